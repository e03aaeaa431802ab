from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from print_erp.core.database import get_db, transaction
from print_erp.core.logging_config import get_logger
from print_erp.models.inventory import InventoryItem, Supplier, TransactionType
from print_erp.schemas.inventory import (
    SupplierCreate, SupplierResponse, SupplierUpdate,
    InventoryItemCreate, InventoryItemResponse, InventoryItemUpdate,
    StockTransactionCreate, InventoryTransactionResponse,
)
from print_erp.services.inventory_service import InventoryService
from print_erp.api.v1.dependencies import get_current_user, require_permission_dependency
from print_erp.models.user import User

router = APIRouter()
logger = get_logger(__name__)

def _item_response(item: InventoryItem) -> InventoryItemResponse:
    response = InventoryItemResponse.from_orm(item)
    response.supplier_name = item.supplier.name if item.supplier else None
    return response

def _supplier_or_404(db: Session, supplier_id: int) -> Supplier:
    supplier = db.get(Supplier, supplier_id)
    if supplier is None:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return supplier

def _ensure_sku_free(db: Session, sku: Optional[str], item_id: Optional[int] = None):
    if not sku:
        return
    query = db.query(InventoryItem.id).filter(InventoryItem.sku == sku)
    if item_id is not None:
        query = query.filter(InventoryItem.id != item_id)
    if query.first():
        raise HTTPException(status_code=400, detail=f"SKU {sku} already exists")

# Suppliers
@router.get("/suppliers", response_model=List[SupplierResponse])
def list_suppliers(
    skip: int = 0,
    limit: int = 100,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    query = db.query(Supplier)
    if not include_inactive:
        query = query.filter(Supplier.is_active == True)  # noqa: E712
    return query.order_by(Supplier.name).offset(skip).limit(limit).all()

@router.get("/suppliers/{supplier_id}", response_model=SupplierResponse)
def get_supplier(
    supplier_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return _supplier_or_404(db, supplier_id)

@router.post("/suppliers", response_model=SupplierResponse)
def create_supplier(
    supplier_data: SupplierCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission_dependency("inventory", "create"))
):
    supplier = Supplier(**supplier_data.dict())
    with transaction(db):
        db.add(supplier)
    db.refresh(supplier)
    logger.info(f"Supplier {supplier.name} added by {current_user.email}")
    return supplier

@router.put("/suppliers/{supplier_id}", response_model=SupplierResponse)
def update_supplier(
    supplier_id: int,
    supplier_data: SupplierUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission_dependency("inventory", "edit"))
):
    supplier = _supplier_or_404(db, supplier_id)
    with transaction(db):
        for field, value in supplier_data.dict(exclude_unset=True).items():
            setattr(supplier, field, value)
    db.refresh(supplier)
    return supplier

@router.delete("/suppliers/{supplier_id}")
def deactivate_supplier(
    supplier_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission_dependency("inventory", "delete"))
):
    """Orders and quotations keep referencing the supplier, so it is only deactivated"""
    supplier = _supplier_or_404(db, supplier_id)
    with transaction(db):
        supplier.is_active = False
    logger.info(f"Supplier {supplier_id} deactivated by {current_user.email}")
    return {"message": "Supplier deactivated", "supplier_id": supplier_id}

# Inventory items
@router.get("/items", response_model=List[InventoryItemResponse])
def list_items(
    skip: int = 0,
    limit: int = 100,
    item_type: Optional[str] = None,
    search: Optional[str] = None,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    query = db.query(InventoryItem)
    if not include_inactive:
        query = query.filter(InventoryItem.is_active == True)  # noqa: E712
    if item_type:
        query = query.filter(InventoryItem.item_type == item_type)
    if search:
        query = query.filter(InventoryItem.name.ilike(f"%{search}%"))
    items = query.order_by(InventoryItem.name).offset(skip).limit(limit).all()
    return [_item_response(item) for item in items]

@router.get("/items/low-stock/list", response_model=List[InventoryItemResponse])
def list_low_stock_items(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return [_item_response(item) for item in InventoryService.get_low_stock(db)]

@router.get("/items/{item_id}", response_model=InventoryItemResponse)
def get_item(
    item_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return _item_response(InventoryService.get_by_id(db, item_id))

@router.post("/items", response_model=InventoryItemResponse)
def create_item(
    item_data: InventoryItemCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission_dependency("inventory", "create"))
):
    _ensure_sku_free(db, item_data.sku)
    if item_data.supplier_id is not None:
        _supplier_or_404(db, item_data.supplier_id)

    with transaction(db):
        item = InventoryItem(**item_data.dict(exclude={"quantity"}), quantity=0)
        db.add(item)
        db.flush()
        # opening balance goes through the ledger like any other stock move
        if item_data.quantity > 0:
            InventoryService.move_stock(
                db, item.id, TransactionType.STOCK_IN, item_data.quantity,
                created_by=current_user.id, notes="Initial stock"
            )
    db.refresh(item)
    return _item_response(item)

@router.put("/items/{item_id}", response_model=InventoryItemResponse)
def update_item(
    item_id: int,
    item_data: InventoryItemUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission_dependency("inventory", "edit"))
):
    """Quantity is not editable here; use the transactions endpoint"""
    item = InventoryService.get_by_id(db, item_id)
    changes = item_data.dict(exclude_unset=True)
    if "sku" in changes:
        _ensure_sku_free(db, changes["sku"], item_id)
    if changes.get("supplier_id") is not None:
        _supplier_or_404(db, changes["supplier_id"])

    with transaction(db):
        for field, value in changes.items():
            setattr(item, field, value)
    db.refresh(item)
    return _item_response(item)

@router.delete("/items/{item_id}")
def deactivate_item(
    item_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission_dependency("inventory", "delete"))
):
    """Soft delete: the stock ledger and order lines keep pointing at the item"""
    item = InventoryService.get_by_id(db, item_id)
    with transaction(db):
        item.is_active = False
    return {"message": "Inventory item deactivated", "item_id": item_id}

# Stock ledger
@router.get("/items/{item_id}/transactions", response_model=List[InventoryTransactionResponse])
def list_item_transactions(
    item_id: int,
    transaction_type: Optional[TransactionType] = None,
    limit: int = Query(100, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    InventoryService.get_by_id(db, item_id)
    return InventoryService.get_transactions(db, item_id, transaction_type, limit)

@router.post("/items/{item_id}/transactions", response_model=InventoryTransactionResponse)
def record_stock_move(
    item_id: int,
    move: StockTransactionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission_dependency("inventory", "edit"))
):
    """Manual stock-in / stock-out by an employee"""
    with transaction(db):
        ledger_entry = InventoryService.move_stock(
            db, item_id, move.transaction_type, move.quantity,
            created_by=current_user.id, is_supplier=False, notes=move.notes
        )
    db.refresh(ledger_entry)
    return ledger_entry
