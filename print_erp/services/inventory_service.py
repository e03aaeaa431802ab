"""
Inventory Service - the only channel through which stock quantities change.

Methods flush but never commit: callers compose them into a larger unit of
work and commit once (see ``print_erp.core.database.transaction``).
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from print_erp.core.exceptions import BusinessRuleError, NotFoundError
from print_erp.core.logging_config import get_logger
from print_erp.models.inventory import InventoryItem, InventoryTransaction, TransactionType

logger = get_logger(__name__)


class InventoryService:
    """Stock quantities and the stock ledger"""

    @staticmethod
    def get_by_id(db: Session, inventory_id: int, lock: bool = False) -> InventoryItem:
        query = db.query(InventoryItem).filter(InventoryItem.id == inventory_id)
        if lock:
            query = query.with_for_update().populate_existing()
        item = query.first()
        if not item:
            raise NotFoundError(f"Inventory item {inventory_id} not found")
        return item

    @staticmethod
    def update_quantity(db: Session, item: InventoryItem, new_quantity: int) -> InventoryItem:
        if new_quantity < 0:
            raise BusinessRuleError(
                f"Insufficient stock for {item.name}: {item.quantity} on hand"
            )
        item.quantity = new_quantity
        db.flush()
        return item

    @staticmethod
    def add_transaction(
        db: Session,
        inventory_id: int,
        transaction_type: TransactionType,
        quantity: int,
        created_by: Optional[int],
        is_supplier: bool = False,
        notes: Optional[str] = None,
        order_item_id: Optional[int] = None,
        transaction_date: Optional[datetime] = None,
    ) -> InventoryTransaction:
        if quantity <= 0:
            raise BusinessRuleError("Transaction quantity must be positive")
        transaction = InventoryTransaction(
            inventory_id=inventory_id,
            transaction_type=TransactionType(transaction_type).value,
            quantity=quantity,
            created_by=created_by,
            is_supplier=is_supplier,
            notes=notes,
            order_item_id=order_item_id,
        )
        if transaction_date is not None:
            transaction.transaction_date = transaction_date
        db.add(transaction)
        db.flush()
        return transaction

    @staticmethod
    def move_stock(
        db: Session,
        inventory_id: int,
        transaction_type: TransactionType,
        quantity: int,
        created_by: Optional[int],
        is_supplier: bool = False,
        notes: Optional[str] = None,
        order_item_id: Optional[int] = None,
    ) -> InventoryTransaction:
        """Change the on-hand quantity and record the matching ledger entry"""
        if quantity <= 0:
            raise BusinessRuleError("Transaction quantity must be positive")
        item = InventoryService.get_by_id(db, inventory_id, lock=True)
        transaction_type = TransactionType(transaction_type)
        delta = quantity if transaction_type == TransactionType.STOCK_IN else -quantity

        InventoryService.update_quantity(db, item, item.quantity + delta)
        transaction = InventoryService.add_transaction(
            db,
            inventory_id,
            transaction_type,
            quantity,
            created_by,
            is_supplier=is_supplier,
            notes=notes,
            order_item_id=order_item_id,
        )

        logger.info(
            f"{transaction_type.value} {quantity} x {item.name} (item {item.id}), "
            f"on hand now {item.quantity}"
        )
        return transaction

    @staticmethod
    def get_transactions(
        db: Session,
        inventory_id: int,
        transaction_type: Optional[TransactionType] = None,
        limit: int = 100,
    ) -> List[InventoryTransaction]:
        query = db.query(InventoryTransaction).filter(InventoryTransaction.inventory_id == inventory_id)
        if transaction_type:
            query = query.filter(InventoryTransaction.transaction_type == TransactionType(transaction_type).value)
        return query.order_by(
            InventoryTransaction.transaction_date.desc(),
            InventoryTransaction.id.desc(),
        ).limit(limit).all()

    @staticmethod
    def get_low_stock(db: Session) -> List[InventoryItem]:
        return db.query(InventoryItem).filter(
            InventoryItem.quantity <= InventoryItem.min_stock_level,
            InventoryItem.is_active == True  # noqa: E712
        ).order_by(InventoryItem.name).all()
