"""Status state machines and the payment-driven status rule."""

import pytest

from print_erp.core.exceptions import BusinessRuleError, InvalidTransitionError
from print_erp.models.procurement import OrderStatus, QuotationStatus
from print_erp.services import order_status


class TestOrderTransitions:

    def test_allowed_statuses_start_with_current(self):
        assert order_status.allowed_order_statuses("Approved") == [
            "Approved", "Partially Paid", "Paid", "Pending",
        ]

    def test_same_status_is_a_no_op(self):
        order_status.check_order_transition("Shipped", OrderStatus.SHIPPED)

    def test_pending_to_approved(self):
        order_status.check_order_transition("Pending", OrderStatus.APPROVED)

    def test_pending_cannot_jump_to_paid(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            order_status.check_order_transition("Pending", OrderStatus.PAID)
        assert "Pending" in exc_info.value.message
        assert exc_info.value.status_code == 409

    @pytest.mark.parametrize("closed", ["Completed", "Rejected"])
    def test_closed_statuses_have_no_exits(self, closed):
        assert order_status.allowed_order_statuses(closed) == [closed]
        with pytest.raises(InvalidTransitionError):
            order_status.check_order_transition(closed, OrderStatus.PENDING)

    def test_received_only_through_receive_action(self):
        for status in OrderStatus:
            assert OrderStatus.RECEIVED not in order_status.ORDER_TRANSITIONS[status]

    def test_unknown_status_is_rejected(self):
        with pytest.raises(BusinessRuleError):
            order_status.parse_order_status("Lost in transit")


class TestQuotationTransitions:

    def test_draft_can_be_sent(self):
        order_status.check_quotation_transition("Draft", QuotationStatus.SENT)

    def test_converted_is_never_a_plain_edit_target(self):
        for status in QuotationStatus:
            assert QuotationStatus.CONVERTED not in order_status.QUOTATION_TRANSITIONS[status]

    def test_rejected_is_terminal(self):
        with pytest.raises(InvalidTransitionError):
            order_status.check_quotation_transition("Rejected", QuotationStatus.DRAFT)

    def test_approved_has_no_exits(self):
        assert order_status.allowed_quotation_statuses("Approved") == ["Approved"]


class TestStatusAfterPayment:

    def test_full_payment_marks_paid(self):
        assert order_status.status_after_payment("Approved", 1000.0, 0.0) == "Paid"

    @pytest.mark.parametrize("current", ["Pending", "Approved", "Partially Paid"])
    def test_partial_payment_marks_partially_paid(self, current):
        assert order_status.status_after_payment(current, 500.0, 500.0) == "Partially Paid"

    @pytest.mark.parametrize("current", ["Shipped", "Received", "Completed"])
    def test_orders_past_payment_phase_keep_status(self, current):
        assert order_status.status_after_payment(current, 1000.0, 0.0) == current

    def test_reopened_balance_demotes_paid(self):
        assert order_status.status_after_payment("Paid", 600.0, 400.0) == "Partially Paid"

    def test_nothing_paid_keeps_status(self):
        assert order_status.status_after_payment("Pending", 0.0, 300.0) == "Pending"
