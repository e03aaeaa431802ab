"""
Supplier Order Service - purchase order lifecycle.

Every public method is one unit of work: it locks the order row, applies all
of its writes (order, lines, stock ledger) and commits once, or rolls
everything back. Stock released by an order line is tracked on the line
itself (``stocked_quantity``), which keeps repeated triggers from stocking the
same units twice.
"""
import math
from datetime import date
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from print_erp.core.config import settings
from print_erp.core.database import transaction
from print_erp.core.exceptions import BusinessRuleError, ConflictError, InvalidTransitionError, NotFoundError
from print_erp.core.logging_config import get_logger
from print_erp.models.inventory import InventoryTransaction, Supplier, TransactionType
from print_erp.models.procurement import OrderPayment, OrderStatus, SupplierOrder, SupplierOrderItem
from print_erp.schemas.procurement import OrderCreate, OrderItemIn, OrderUpdate
from print_erp.services import order_status
from print_erp.services.inventory_service import InventoryService
from print_erp.services.numbering import next_document_number

logger = get_logger(__name__)


def money(value) -> float:
    return round(float(value or 0), 2)


def affordable_quantity(item: SupplierOrderItem, paid_amount: float) -> int:
    """Units of a line covered by the order's paid amount, capped at the ordered quantity"""
    if item.unit_price <= 0:
        return item.quantity
    # rounding absorbs float noise such as 0.3 / 0.1 == 2.9999999999999996
    return min(item.quantity, math.floor(round(paid_amount / item.unit_price, 6)))


def release_order_stock(
    db: Session,
    order: SupplierOrder,
    notes: str,
    paid_amount: Optional[float] = None,
) -> List[Dict]:
    """
    Stock in whatever part of each line is due but not yet released.

    With ``paid_amount`` a line is due up to what the payment covers; without
    it the whole line is due. Returns one entry per line that received stock.
    """
    released = []
    for item in order.items:
        if paid_amount is None:
            target = item.quantity
        else:
            target = affordable_quantity(item, paid_amount)
        to_stock = target - item.stocked_quantity
        if to_stock <= 0:
            continue

        InventoryService.move_stock(
            db,
            item.inventory_id,
            TransactionType.STOCK_IN,
            to_stock,
            created_by=order.supplier_id,
            is_supplier=True,
            notes=notes,
            order_item_id=item.id,
        )
        item.stocked_quantity += to_stock
        released.append({
            "inventory_id": item.inventory_id,
            "order_item_id": item.id,
            "quantity": to_stock,
        })

    db.flush()
    if released:
        logger.info(
            f"Released {sum(r['quantity'] for r in released)} units over "
            f"{len(released)} line(s) of {order.order_id}"
        )
    return released


def check_supplier(db: Session, supplier_id: int) -> Supplier:
    """Supplier a new order or quotation may be placed with; deactivated ones are refused"""
    supplier = db.query(Supplier).filter(Supplier.id == supplier_id).first()
    if not supplier:
        raise NotFoundError(f"Supplier {supplier_id} not found")
    if not supplier.is_active:
        raise BusinessRuleError(f"Supplier {supplier.name} is inactive")
    return supplier


def _line_name(db: Session, line: OrderItemIn) -> str:
    inventory_item = InventoryService.get_by_id(db, line.inventory_id)
    return line.inventory_name or inventory_item.name


class SupplierOrderService:
    """Purchase order business logic"""

    @staticmethod
    def get_order(db: Session, order_id: int, lock: bool = False) -> SupplierOrder:
        query = db.query(SupplierOrder).filter(SupplierOrder.id == order_id)
        if lock:
            query = query.with_for_update().populate_existing()
        order = query.first()
        if not order:
            raise NotFoundError(f"Supplier order {order_id} not found")
        return order

    @staticmethod
    def list_orders(
        db: Session,
        status: Optional[str] = None,
        supplier_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[SupplierOrder]:
        query = db.query(SupplierOrder)
        if status:
            query = query.filter(SupplierOrder.status == order_status.parse_order_status(status).value)
        if supplier_id:
            query = query.filter(SupplierOrder.supplier_id == supplier_id)
        return query.order_by(
            SupplierOrder.date.desc(), SupplierOrder.id.desc()
        ).offset(skip).limit(limit).all()

    @staticmethod
    def build_order(
        db: Session,
        supplier_id: int,
        lines: List[OrderItemIn],
        order_id: Optional[str] = None,
        order_date: Optional[date] = None,
        payment_plan: Optional[str] = None,
        notes: Optional[str] = None,
        quotation_id: Optional[int] = None,
    ) -> SupplierOrder:
        """Add a Pending order with its lines to the session, without committing"""
        check_supplier(db, supplier_id)
        if not lines:
            raise BusinessRuleError("An order needs at least one item")

        if order_id:
            if db.query(SupplierOrder.id).filter(SupplierOrder.order_id == order_id).first():
                raise ConflictError(f"Order number {order_id} already exists")
        else:
            order_id = next_document_number(db, SupplierOrder.order_id, settings.PO_PREFIX)

        items = [
            SupplierOrderItem(
                inventory_id=line.inventory_id,
                inventory_name=_line_name(db, line),
                quantity=line.quantity,
                unit_price=money(line.unit_price),
                total_price=money(line.quantity * line.unit_price),
                item_type=line.item_type or "piece",
                stocked_quantity=0,
            )
            for line in lines
        ]
        total_amount = money(sum(item.total_price for item in items))

        order = SupplierOrder(
            order_id=order_id,
            supplier_id=supplier_id,
            quotation_id=quotation_id,
            date=order_date or date.today(),
            status=OrderStatus.PENDING.value,
            total_amount=total_amount,
            paid_amount=0.0,
            remaining_amount=total_amount,
            payment_plan=payment_plan,
            notes=notes,
            items=items,
        )
        db.add(order)
        db.flush()
        return order

    @staticmethod
    def create_order(db: Session, data: OrderCreate) -> SupplierOrder:
        with transaction(db):
            order = SupplierOrderService.build_order(
                db,
                data.supplier_id,
                data.items,
                order_id=data.order_id,
                order_date=data.date,
                payment_plan=data.payment_plan,
                notes=data.notes,
            )
        logger.info(f"Created supplier order {order.order_id} for {order.total_amount:.2f}")
        return order

    @staticmethod
    def _apply_item_edits(db: Session, order: SupplierOrder, lines: List[OrderItemIn]) -> None:
        existing = {item.id: item for item in order.items}
        kept_ids = {line.id for line in lines if line.id is not None}

        unknown = kept_ids - set(existing)
        if unknown:
            raise BusinessRuleError(
                f"Items {sorted(unknown)} do not belong to order {order.order_id}"
            )

        for item_id, item in existing.items():
            if item_id in kept_ids:
                continue
            if item.stocked_quantity > 0:
                raise BusinessRuleError(
                    f"Cannot remove {item.inventory_name}: {item.stocked_quantity} units already stocked in"
                )
            order.items.remove(item)

        for line in lines:
            name = _line_name(db, line)
            if line.id is None:
                order.items.append(SupplierOrderItem(
                    inventory_id=line.inventory_id,
                    inventory_name=name,
                    quantity=line.quantity,
                    unit_price=money(line.unit_price),
                    total_price=money(line.quantity * line.unit_price),
                    item_type=line.item_type or "piece",
                    stocked_quantity=0,
                ))
                continue

            item = existing[line.id]
            if item.stocked_quantity > 0 and line.inventory_id != item.inventory_id:
                raise BusinessRuleError(
                    f"Cannot change the product of {item.inventory_name}: stock already released"
                )
            if line.quantity < item.stocked_quantity:
                raise BusinessRuleError(
                    f"Quantity of {item.inventory_name} cannot drop below the "
                    f"{item.stocked_quantity} units already stocked in"
                )
            item.inventory_id = line.inventory_id
            item.inventory_name = name
            item.quantity = line.quantity
            item.unit_price = money(line.unit_price)
            item.total_price = money(line.quantity * line.unit_price)
            item.item_type = line.item_type or "piece"

        db.flush()

    @staticmethod
    def update_order(db: Session, order_id: int, data: OrderUpdate) -> SupplierOrder:
        with transaction(db):
            order = SupplierOrderService.get_order(db, order_id, lock=True)
            if order_status.parse_order_status(order.status) in order_status.CLOSED_ORDER_STATUSES:
                raise ConflictError(f"{order.status} orders cannot be edited")

            update_data = data.dict(exclude_unset=True)
            update_data.pop("items", None)
            if update_data.get("supplier_id") is not None:
                check_supplier(db, update_data["supplier_id"])
            for field, value in update_data.items():
                if value is None and field in ("supplier_id", "date"):
                    continue
                setattr(order, field, value)

            if data.items is not None:
                SupplierOrderService._apply_item_edits(db, order, data.items)

            total_amount = money(sum(item.total_price for item in order.items))
            if total_amount < order.paid_amount:
                raise BusinessRuleError(
                    f"Order total ({total_amount:.2f}) cannot be less than the "
                    f"amount already paid ({order.paid_amount:.2f})"
                )
            order.total_amount = total_amount
            order.remaining_amount = money(total_amount - order.paid_amount)

            if order.paid_amount > 0:
                order.status = order_status.status_after_payment(
                    order.status, order.paid_amount, order.remaining_amount
                )
                release_order_stock(
                    db, order,
                    notes=f"Auto partial stock-in from PO {order.order_id}",
                    paid_amount=order.paid_amount,
                )
        logger.info(f"Updated supplier order {order.order_id}")
        return order

    @staticmethod
    def change_status(
        db: Session,
        order_id: int,
        status: str,
        payment_plan: Optional[str] = None,
    ) -> Tuple[SupplierOrder, List[Dict]]:
        requested = order_status.parse_order_status(status)
        released = []
        with transaction(db):
            order = SupplierOrderService.get_order(db, order_id, lock=True)
            order_status.check_order_transition(order.status, requested)

            if payment_plan is not None:
                order.payment_plan = payment_plan

            previous = order.status
            if requested.value != previous:
                order.status = requested.value
                if requested == OrderStatus.PAID:
                    released = release_order_stock(
                        db, order, notes=f"Auto stock-in from PO {order.order_id}"
                    )
                logger.info(f"Order {order.order_id} status {previous} -> {order.status}")
        return order, released

    @staticmethod
    def receive_order(db: Session, order_id: int) -> Tuple[SupplierOrder, List[Dict]]:
        """Goods arrived: stock in every outstanding unit and mark the order Received"""
        with transaction(db):
            order = SupplierOrderService.get_order(db, order_id, lock=True)
            if order.status != OrderStatus.SHIPPED.value:
                raise InvalidTransitionError("order", order.status, OrderStatus.RECEIVED.value)
            released = release_order_stock(
                db, order, notes=f"Stock in from Purchase Order {order.order_id}"
            )
            order.status = OrderStatus.RECEIVED.value
        logger.info(f"Order {order.order_id} received")
        return order, released

    @staticmethod
    def delete_order(db: Session, order_id: int) -> None:
        """Remove payments, then lines, then the order itself"""
        with transaction(db):
            order = SupplierOrderService.get_order(db, order_id, lock=True)
            order_number = order.order_id
            item_ids = [item.id for item in order.items]
            stocked = sum(item.stocked_quantity for item in order.items)

            if item_ids:
                # ledger entries outlive the order; only the line link goes
                db.query(InventoryTransaction).filter(
                    InventoryTransaction.order_item_id.in_(item_ids)
                ).update({InventoryTransaction.order_item_id: None}, synchronize_session=False)
            db.query(OrderPayment).filter(
                OrderPayment.order_id == order.id
            ).delete(synchronize_session=False)
            db.query(SupplierOrderItem).filter(
                SupplierOrderItem.order_id == order.id
            ).delete(synchronize_session=False)
            db.expire(order, ["items", "payments"])
            db.delete(order)

        if stocked:
            logger.warning(
                f"Deleted order {order_number}; {stocked} units it released stay in inventory"
            )
        else:
            logger.info(f"Deleted order {order_number}")
