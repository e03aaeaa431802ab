from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from print_erp.models.inventory import TransactionType

class SupplierCreate(BaseModel):
    name: str = Field(min_length=1)
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    payment_terms: Optional[str] = None

class SupplierUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    payment_terms: Optional[str] = None
    is_active: Optional[bool] = None

class SupplierResponse(BaseModel):
    id: int
    name: str
    contact_person: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    payment_terms: Optional[str]
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True

class InventoryItemCreate(BaseModel):
    name: str = Field(min_length=1)
    sku: Optional[str] = None
    item_type: str = "piece"
    quantity: int = Field(default=0, ge=0)
    min_stock_level: int = Field(default=0, ge=0)
    unit_price: float = Field(default=0.0, ge=0)
    supplier_id: Optional[int] = None

class InventoryItemUpdate(BaseModel):
    """Quantity is not editable here; stock moves go through transactions."""
    name: Optional[str] = Field(default=None, min_length=1)
    sku: Optional[str] = None
    item_type: Optional[str] = None
    min_stock_level: Optional[int] = Field(default=None, ge=0)
    unit_price: Optional[float] = Field(default=None, ge=0)
    supplier_id: Optional[int] = None
    is_active: Optional[bool] = None

class InventoryItemResponse(BaseModel):
    id: int
    name: str
    sku: Optional[str]
    item_type: Optional[str]
    quantity: int
    min_stock_level: Optional[int]
    unit_price: Optional[float]
    supplier_id: Optional[int]
    supplier_name: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class StockTransactionCreate(BaseModel):
    transaction_type: TransactionType
    quantity: int = Field(gt=0)
    notes: Optional[str] = None

class InventoryTransactionResponse(BaseModel):
    id: int
    inventory_id: int
    transaction_type: str
    quantity: int
    created_by: Optional[int]
    is_supplier: bool
    notes: Optional[str]
    order_item_id: Optional[int]
    transaction_date: datetime

    class Config:
        from_attributes = True
