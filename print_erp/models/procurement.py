from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Date, Text, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from print_erp.core.database import Base

class QuotationStatus(str, enum.Enum):
    DRAFT = "Draft"
    SENT = "Sent"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    RECEIVED = "Received"
    CONVERTED = "Converted"

class OrderStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    PARTIALLY_PAID = "Partially Paid"
    PAID = "Paid"
    SHIPPED = "Shipped"
    RECEIVED = "Received"
    COMPLETED = "Completed"
    REJECTED = "Rejected"

class QuotationRequest(Base):
    __tablename__ = "supplier_quotation_requests"

    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(String, unique=True, index=True, nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False)
    date = Column(Date, nullable=False)
    status = Column(String, nullable=False, default=QuotationStatus.DRAFT.value)
    notes = Column(Text)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    supplier = relationship("Supplier")
    items = relationship(
        "QuotationItem",
        back_populates="request",
        cascade="all, delete-orphan",
        order_by="QuotationItem.id",
    )
    orders = relationship("SupplierOrder", back_populates="quotation")

    __mapper_args__ = {"version_id_col": version}

class QuotationItem(Base):
    __tablename__ = "supplier_quotation_items"

    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(Integer, ForeignKey("supplier_quotation_requests.id"), nullable=False, index=True)
    inventory_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False)
    inventory_name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    expected_price = Column(Float)
    notes = Column(Text)

    request = relationship("QuotationRequest", back_populates="items")

class SupplierOrder(Base):
    __tablename__ = "supplier_purchase_orders"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String, unique=True, index=True, nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False)
    quotation_id = Column(Integer, ForeignKey("supplier_quotation_requests.id"))
    date = Column(Date, nullable=False)
    status = Column(String, nullable=False, default=OrderStatus.PENDING.value)
    total_amount = Column(Float, nullable=False, default=0.0)
    paid_amount = Column(Float, nullable=False, default=0.0)
    remaining_amount = Column(Float, nullable=False, default=0.0)
    payment_plan = Column(Text)
    notes = Column(Text)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    supplier = relationship("Supplier")
    quotation = relationship("QuotationRequest", back_populates="orders")
    items = relationship(
        "SupplierOrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="SupplierOrderItem.id",
    )
    payments = relationship(
        "OrderPayment",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderPayment.id",
    )

    __mapper_args__ = {"version_id_col": version}

class SupplierOrderItem(Base):
    __tablename__ = "supplier_purchase_items"
    __table_args__ = (
        CheckConstraint(
            "stocked_quantity >= 0 AND stocked_quantity <= quantity",
            name="ck_supplier_purchase_items_stocked_range",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("supplier_purchase_orders.id"), nullable=False, index=True)
    inventory_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False)
    inventory_name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)
    item_type = Column(String, default="piece")
    # units of this line already released into inventory
    stocked_quantity = Column(Integer, nullable=False, default=0)

    order = relationship("SupplierOrder", back_populates="items")

class OrderPayment(Base):
    __tablename__ = "supplier_payment_records"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("supplier_purchase_orders.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    payment_date = Column(Date, nullable=False)
    payment_method = Column(String, nullable=False)
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("SupplierOrder", back_populates="payments")
