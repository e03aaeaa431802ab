import datetime as dt
import enum
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional

class PaymentMethod(str, enum.Enum):
    CASH = "Cash"
    BANK_TRANSFER = "Bank Transfer"
    CHECK = "Check"
    GCASH = "GCash"
    CREDIT_CARD = "Credit Card"
    OTHER = "Other"

class OtherPaymentMethod(str, enum.Enum):
    CRYPTO = "Crypto"
    COINS_PH = "Coins.ph"
    PAYPAL = "PayPal"
    MAYA = "Maya"
    WESTERN_UNION = "Western Union"
    REMITTANCE = "Remittance"
    OTHER = "Other"

# Quotations

class QuotationItemIn(BaseModel):
    id: Optional[int] = None
    inventory_id: int
    inventory_name: Optional[str] = None
    quantity: int = Field(gt=0)
    expected_price: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None

class QuotationCreate(BaseModel):
    request_id: Optional[str] = None
    supplier_id: int
    date: Optional[dt.date] = None
    notes: Optional[str] = None
    items: List[QuotationItemIn] = Field(min_length=1)

class QuotationUpdate(BaseModel):
    supplier_id: Optional[int] = None
    date: Optional[dt.date] = None
    notes: Optional[str] = None
    items: Optional[List[QuotationItemIn]] = None

class QuotationItemResponse(BaseModel):
    id: int
    inventory_id: int
    inventory_name: str
    quantity: int
    expected_price: Optional[float]
    notes: Optional[str]

    class Config:
        from_attributes = True

class QuotationResponse(BaseModel):
    id: int
    request_id: str
    supplier_id: int
    supplier_name: Optional[str] = None
    date: dt.date
    status: str
    notes: Optional[str]
    version: int
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None
    items: List[QuotationItemResponse] = []

    class Config:
        from_attributes = True

# Orders

class OrderItemIn(BaseModel):
    id: Optional[int] = None
    inventory_id: int
    inventory_name: Optional[str] = None
    quantity: int = Field(gt=0)
    unit_price: float = Field(ge=0)
    item_type: str = "piece"

class OrderCreate(BaseModel):
    order_id: Optional[str] = None
    supplier_id: int
    date: Optional[dt.date] = None
    payment_plan: Optional[str] = None
    notes: Optional[str] = None
    items: List[OrderItemIn] = Field(min_length=1)

class OrderUpdate(BaseModel):
    supplier_id: Optional[int] = None
    date: Optional[dt.date] = None
    payment_plan: Optional[str] = None
    notes: Optional[str] = None
    items: Optional[List[OrderItemIn]] = Field(default=None, min_length=1)

class StatusUpdate(BaseModel):
    status: str
    payment_plan: Optional[str] = None

class OrderItemResponse(BaseModel):
    id: int
    inventory_id: int
    inventory_name: str
    quantity: int
    unit_price: float
    total_price: float
    item_type: Optional[str]
    stocked_quantity: int

    class Config:
        from_attributes = True

class PaymentCreate(BaseModel):
    amount: float = Field(gt=0)
    payment_date: Optional[dt.date] = None
    payment_method: PaymentMethod
    other_method: Optional[OtherPaymentMethod] = None
    payment_code: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_other_method(self):
        if self.payment_method == PaymentMethod.OTHER and self.other_method is None:
            raise ValueError("other_method is required when payment_method is Other")
        if self.payment_code is not None and "__" in self.payment_code:
            raise ValueError("payment_code may not contain '__'")
        return self

class PaymentResponse(BaseModel):
    id: int
    order_id: int
    amount: float
    payment_date: dt.date
    payment_method: str
    payment_code: Optional[str] = None
    notes: Optional[str] = None
    created_at: dt.datetime

class OrderResponse(BaseModel):
    id: int
    order_id: str
    supplier_id: int
    supplier_name: Optional[str] = None
    quotation_id: Optional[int] = None
    date: dt.date
    status: str
    total_amount: float
    paid_amount: float
    remaining_amount: float
    payment_plan: Optional[str]
    notes: Optional[str]
    version: int
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None
    items: List[OrderItemResponse] = []
    payments: List[PaymentResponse] = []
    allowed_statuses: List[str] = []

class StockRelease(BaseModel):
    inventory_id: int
    order_item_id: int
    quantity: int

class PaymentRecordResponse(BaseModel):
    payment: PaymentResponse
    order: OrderResponse
    stock_released: List[StockRelease] = []

class QuotationStatusResponse(BaseModel):
    quotation: QuotationResponse
    order: Optional[OrderResponse] = None
