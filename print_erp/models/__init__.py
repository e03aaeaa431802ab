from print_erp.models.user import User, Role
from print_erp.models.inventory import Supplier, InventoryItem, InventoryTransaction, TransactionType
from print_erp.models.procurement import (
    QuotationRequest, QuotationItem, QuotationStatus,
    SupplierOrder, SupplierOrderItem, OrderPayment, OrderStatus,
)

__all__ = [
    "User", "Role",
    "Supplier", "InventoryItem", "InventoryTransaction", "TransactionType",
    "QuotationRequest", "QuotationItem", "QuotationStatus",
    "SupplierOrder", "SupplierOrderItem", "OrderPayment", "OrderStatus",
]
