"""Payment note encoding, document numbering and affordable-quantity math."""

from datetime import date

import pytest
from pydantic import ValidationError

from print_erp.models.procurement import SupplierOrder, SupplierOrderItem
from print_erp.schemas.procurement import OtherPaymentMethod, PaymentCreate, PaymentMethod
from print_erp.services.numbering import next_document_number
from print_erp.services.payment_service import (
    decode_payment_notes,
    encode_payment_notes,
    format_payment_method,
)
from print_erp.services.supplier_order_service import affordable_quantity, money


class TestPaymentNotes:

    def test_code_is_appended_to_notes(self):
        assert encode_payment_notes("first tranche", "BT-7781") == "first tranche __code:BT-7781__"

    def test_code_alone(self):
        assert encode_payment_notes(None, "GC123") == "__code:GC123__"

    def test_no_code_keeps_notes(self):
        assert encode_payment_notes("  cash on pickup ", None) == "cash on pickup"
        assert encode_payment_notes("", None) is None

    def test_decode_splits_code_from_notes(self):
        assert decode_payment_notes("first tranche __code:BT-7781__") == ("first tranche", "BT-7781")
        assert decode_payment_notes("__code:GC123__") == (None, "GC123")
        assert decode_payment_notes("plain notes") == ("plain notes", None)
        assert decode_payment_notes(None) == (None, None)

    def test_other_method_is_stored_with_its_sub_method(self):
        assert format_payment_method(PaymentMethod.OTHER, OtherPaymentMethod.PAYPAL) == "Other - PayPal"
        assert format_payment_method(PaymentMethod.GCASH) == "GCash"

    def test_other_method_requires_sub_method(self):
        with pytest.raises(ValidationError):
            PaymentCreate(amount=10, payment_method="Other")

    def test_payment_code_cannot_break_the_marker(self):
        with pytest.raises(ValidationError):
            PaymentCreate(amount=10, payment_method="Cash", payment_code="ab__cd")


class TestAffordableQuantity:

    def test_capped_at_ordered_quantity(self):
        item = SupplierOrderItem(quantity=5, unit_price=100.0)
        assert affordable_quantity(item, 2000.0) == 5

    def test_floors_partial_units(self):
        item = SupplierOrderItem(quantity=10, unit_price=50.0)
        assert affordable_quantity(item, 275.0) == 5

    def test_float_noise_does_not_lose_a_unit(self):
        item = SupplierOrderItem(quantity=3, unit_price=0.1)
        assert affordable_quantity(item, 0.3) == 3

    def test_free_line_is_fully_released(self):
        item = SupplierOrderItem(quantity=4, unit_price=0.0)
        assert affordable_quantity(item, 0.0) == 4

    def test_money_rounds_to_cents(self):
        assert money(10.005 + 0.001) == 10.01
        assert money(None) == 0.0


class TestDocumentNumbering:

    def _order(self, db_session, supplier, number):
        order = SupplierOrder(
            order_id=number,
            supplier_id=supplier.id,
            date=date(2026, 3, 1),
            status="Pending",
            total_amount=0.0,
            paid_amount=0.0,
            remaining_amount=0.0,
        )
        db_session.add(order)
        db_session.commit()
        return order

    def test_first_number_of_the_year(self, db_session):
        assert next_document_number(db_session, SupplierOrder.order_id, "PO", 2026) == "PO-2026-001"

    def test_uses_numeric_maximum(self, db_session, test_supplier):
        self._order(db_session, test_supplier, "PO-2026-9")
        self._order(db_session, test_supplier, "PO-2026-10")
        self._order(db_session, test_supplier, "PO-2025-044")
        assert next_document_number(db_session, SupplierOrder.order_id, "PO", 2026) == "PO-2026-011"

    def test_ignores_non_numeric_suffixes(self, db_session, test_supplier):
        self._order(db_session, test_supplier, "PO-2026-002")
        self._order(db_session, test_supplier, "PO-2026-manual")
        assert next_document_number(db_session, SupplierOrder.order_id, "PO", 2026) == "PO-2026-003"
