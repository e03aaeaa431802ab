from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Text, Boolean, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from print_erp.core.database import Base

class TransactionType(str, enum.Enum):
    STOCK_IN = "stock_in"
    STOCK_OUT = "stock_out"

class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    contact_person = Column(String)
    email = Column(String)
    phone = Column(String)
    address = Column(Text)
    payment_terms = Column(String)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    items = relationship("InventoryItem", back_populates="supplier")

class InventoryItem(Base):
    __tablename__ = "inventory_items"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_inventory_items_quantity_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    sku = Column(String, unique=True, index=True)
    item_type = Column(String, default="piece")  # 'piece', 'ream', 'roll', 'box', ...
    quantity = Column(Integer, nullable=False, default=0)
    min_stock_level = Column(Integer, default=0)
    unit_price = Column(Float, default=0.0)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    supplier = relationship("Supplier", back_populates="items")
    transactions = relationship(
        "InventoryTransaction",
        back_populates="item",
        order_by="InventoryTransaction.transaction_date",
    )

class InventoryTransaction(Base):
    """Append-only stock ledger entry"""
    __tablename__ = "inventory_transactions"

    id = Column(Integer, primary_key=True, index=True)
    inventory_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False, index=True)
    transaction_type = Column(String, nullable=False)  # TransactionType values
    quantity = Column(Integer, nullable=False)
    created_by = Column(Integer)  # user id, or supplier id when is_supplier
    is_supplier = Column(Boolean, default=False)
    notes = Column(Text)
    # set for stock released by a purchase order line
    order_item_id = Column(
        Integer,
        ForeignKey("supplier_purchase_items.id", ondelete="SET NULL"),
        index=True,
    )
    transaction_date = Column(DateTime(timezone=True), server_default=func.now())

    item = relationship("InventoryItem", back_populates="transactions")
