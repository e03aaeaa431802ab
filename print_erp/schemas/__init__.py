from print_erp.schemas.auth import Token, UserResponse
from print_erp.schemas.inventory import (
    SupplierCreate, SupplierResponse, InventoryItemCreate, InventoryItemResponse,
    StockTransactionCreate, InventoryTransactionResponse,
)
from print_erp.schemas.procurement import (
    QuotationCreate, QuotationResponse, OrderCreate, OrderResponse,
    PaymentCreate, PaymentResponse, PaymentRecordResponse,
)

__all__ = [
    "Token", "UserResponse",
    "SupplierCreate", "SupplierResponse", "InventoryItemCreate", "InventoryItemResponse",
    "StockTransactionCreate", "InventoryTransactionResponse",
    "QuotationCreate", "QuotationResponse", "OrderCreate", "OrderResponse",
    "PaymentCreate", "PaymentResponse", "PaymentRecordResponse",
]
