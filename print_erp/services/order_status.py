"""
Status state machines for purchase orders and quotation requests.

Each status maps to the statuses a plain status edit may move to. The current
status is always accepted as a no-op. Some statuses are only reachable through
a dedicated action: ``Received`` via goods receipt, ``Converted`` via
quotation conversion.
"""
from typing import List
from print_erp.core.exceptions import BusinessRuleError, InvalidTransitionError
from print_erp.models.procurement import OrderStatus, QuotationStatus

ORDER_TRANSITIONS = {
    OrderStatus.PENDING: [OrderStatus.APPROVED, OrderStatus.REJECTED],
    OrderStatus.APPROVED: [OrderStatus.PARTIALLY_PAID, OrderStatus.PAID, OrderStatus.PENDING],
    OrderStatus.PARTIALLY_PAID: [OrderStatus.PAID, OrderStatus.SHIPPED],
    OrderStatus.PAID: [OrderStatus.SHIPPED, OrderStatus.COMPLETED],
    OrderStatus.SHIPPED: [],
    OrderStatus.RECEIVED: [OrderStatus.COMPLETED],
    OrderStatus.COMPLETED: [],
    OrderStatus.REJECTED: [],
}

QUOTATION_TRANSITIONS = {
    QuotationStatus.DRAFT: [QuotationStatus.SENT, QuotationStatus.APPROVED, QuotationStatus.REJECTED],
    QuotationStatus.SENT: [QuotationStatus.RECEIVED, QuotationStatus.APPROVED, QuotationStatus.REJECTED],
    QuotationStatus.RECEIVED: [QuotationStatus.APPROVED, QuotationStatus.REJECTED],
    # approval converts in the same transaction, so Approved is never stored
    QuotationStatus.APPROVED: [],
    QuotationStatus.REJECTED: [],
    QuotationStatus.CONVERTED: [],
}

# payments move the status only while the order is still in its payment phase
PAYMENT_PHASE = {
    OrderStatus.PENDING,
    OrderStatus.APPROVED,
    OrderStatus.PARTIALLY_PAID,
    OrderStatus.PAID,
}

CLOSED_ORDER_STATUSES = {OrderStatus.COMPLETED, OrderStatus.REJECTED}


def parse_order_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in OrderStatus)
        raise BusinessRuleError(f"Invalid order status '{value}'. Must be one of: {valid}")


def parse_quotation_status(value: str) -> QuotationStatus:
    try:
        return QuotationStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in QuotationStatus)
        raise BusinessRuleError(f"Invalid quotation status '{value}'. Must be one of: {valid}")


def allowed_order_statuses(current: str) -> List[str]:
    status = OrderStatus(current)
    return [status.value] + [s.value for s in ORDER_TRANSITIONS[status]]


def allowed_quotation_statuses(current: str) -> List[str]:
    status = QuotationStatus(current)
    return [status.value] + [s.value for s in QUOTATION_TRANSITIONS[status]]


def check_order_transition(current: str, requested: OrderStatus) -> None:
    if requested.value == current:
        return
    allowed = ORDER_TRANSITIONS[OrderStatus(current)]
    if requested not in allowed:
        raise InvalidTransitionError("order", current, requested.value, [s.value for s in allowed])


def check_quotation_transition(current: str, requested: QuotationStatus) -> None:
    if requested.value == current:
        return
    allowed = QUOTATION_TRANSITIONS[QuotationStatus(current)]
    if requested not in allowed:
        raise InvalidTransitionError("quotation", current, requested.value, [s.value for s in allowed])


def status_after_payment(current: str, paid_amount: float, remaining_amount: float) -> str:
    """
    Status an order takes once its paid/remaining totals change.

    While the order is in its payment phase the status follows the balance:
    fully settled orders are Paid, orders carrying an open balance after some
    payment are Partially Paid. That includes a Paid order whose total was
    raised by an edit. Orders past the payment phase (shipped, received...)
    keep their status.
    """
    status = OrderStatus(current)
    if status not in PAYMENT_PHASE:
        return current
    if remaining_amount <= 0:
        return OrderStatus.PAID.value
    if paid_amount > 0:
        return OrderStatus.PARTIALLY_PAID.value
    return current
