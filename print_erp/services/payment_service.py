"""
Payment Service - supplier payments and the stock they release.

A payment raises the order's paid amount, re-derives its status and releases
to inventory, line by line, as many units as the total paid so far covers
(``floor(paid / unit_price)``, capped at the ordered quantity).
"""
import re
from datetime import date
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from print_erp.core.database import transaction
from print_erp.core.exceptions import BusinessRuleError
from print_erp.core.logging_config import get_logger
from print_erp.models.procurement import OrderPayment, SupplierOrder
from print_erp.schemas.procurement import OtherPaymentMethod, PaymentCreate, PaymentMethod
from print_erp.services import order_status
from print_erp.services.supplier_order_service import SupplierOrderService, money, release_order_stock

logger = get_logger(__name__)

PAYMENT_CODE_MARKER = re.compile(r"__code:(.*?)__")


def format_payment_method(method: PaymentMethod, other: Optional[OtherPaymentMethod] = None) -> str:
    method = PaymentMethod(method)
    if method == PaymentMethod.OTHER:
        return f"{method.value} - {OtherPaymentMethod(other).value}"
    return method.value


def encode_payment_notes(notes: Optional[str], payment_code: Optional[str]) -> Optional[str]:
    """Embed the payment reference code in the notes as ``__code:<code>__``"""
    notes = (notes or "").strip()
    if payment_code:
        marker = f"__code:{payment_code.strip()}__"
        return f"{notes} {marker}" if notes else marker
    return notes or None


def decode_payment_notes(stored: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """Split stored notes into (notes, payment_code)"""
    if not stored:
        return None, None
    match = PAYMENT_CODE_MARKER.search(stored)
    if not match:
        return stored, None
    notes = (stored[:match.start()] + stored[match.end():]).strip()
    return notes or None, match.group(1) or None


class PaymentService:

    @staticmethod
    def record_payment(
        db: Session,
        order_id: int,
        data: PaymentCreate,
    ) -> Tuple[OrderPayment, SupplierOrder, List[Dict]]:
        amount = money(data.amount)
        if amount <= 0:
            raise BusinessRuleError("Payment amount must be greater than zero")

        with transaction(db):
            order = SupplierOrderService.get_order(db, order_id, lock=True)
            if order_status.parse_order_status(order.status) in order_status.CLOSED_ORDER_STATUSES:
                raise BusinessRuleError(
                    f"Cannot record a payment on {order.status.lower()} order {order.order_id}"
                )

            remaining = money(order.total_amount - order.paid_amount)
            if remaining <= 0:
                raise BusinessRuleError(f"Order {order.order_id} is already fully paid")
            if amount > remaining:
                raise BusinessRuleError(
                    f"Payment amount ({amount:.2f}) exceeds remaining balance ({remaining:.2f})"
                )

            payment = OrderPayment(
                amount=amount,
                payment_date=data.payment_date or date.today(),
                payment_method=format_payment_method(data.payment_method, data.other_method),
                notes=encode_payment_notes(data.notes, data.payment_code),
            )
            order.payments.append(payment)

            new_paid = money(order.paid_amount + amount)
            new_remaining = money(order.total_amount - new_paid)
            order.paid_amount = new_paid
            order.remaining_amount = new_remaining
            order.status = order_status.status_after_payment(order.status, new_paid, new_remaining)

            released = release_order_stock(
                db, order,
                notes=f"Auto partial stock-in from PO {order.order_id}",
                paid_amount=new_paid,
            )

        logger.info(
            f"Recorded payment of {amount:.2f} on {order.order_id}: "
            f"paid {order.paid_amount:.2f}, remaining {order.remaining_amount:.2f}, status {order.status}"
        )
        return payment, order, released

    @staticmethod
    def list_payments(db: Session, order_id: int) -> List[OrderPayment]:
        SupplierOrderService.get_order(db, order_id)
        return db.query(OrderPayment).filter(
            OrderPayment.order_id == order_id
        ).order_by(OrderPayment.payment_date, OrderPayment.id).all()
