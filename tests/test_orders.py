"""Purchase order lifecycle: creation, edits, status changes, receipt and deletion."""

from datetime import date

import pytest

from print_erp.models.inventory import InventoryTransaction
from print_erp.models.procurement import OrderPayment, SupplierOrder, SupplierOrderItem

from conftest import ORDERS, pay, set_status


class TestCreateOrder:

    def test_totals_and_number(self, order):
        assert order["order_id"] == f"PO-{date.today().year}-001"
        assert order["status"] == "Pending"
        assert order["total_amount"] == 1000.0
        assert order["paid_amount"] == 0.0
        assert order["remaining_amount"] == 1000.0
        assert order["allowed_statuses"] == ["Pending", "Approved", "Rejected"]
        assert [item["inventory_name"] for item in order["items"]] == [
            "A4 Bond Paper 80gsm", "Black Ink Cartridge",
        ]
        assert all(item["stocked_quantity"] == 0 for item in order["items"])

    def test_inactive_supplier_refused(self, client, manager_headers, test_supplier, paper, db_session):
        test_supplier.is_active = False
        db_session.commit()
        response = client.post(
            ORDERS,
            json={
                "supplier_id": test_supplier.id,
                "items": [{"inventory_id": paper.id, "quantity": 1, "unit_price": 100}],
            },
            headers=manager_headers,
        )
        assert response.status_code == 400
        assert "inactive" in response.json()["detail"]
        assert db_session.query(SupplierOrder).count() == 0

    def test_numbers_increase(self, client, manager_headers, test_supplier, paper, order):
        response = client.post(
            ORDERS,
            json={"supplier_id": test_supplier.id, "items": [{"inventory_id": paper.id, "quantity": 1, "unit_price": 100}]},
            headers=manager_headers,
        )
        assert response.json()["order_id"] == f"PO-{date.today().year}-002"

    def test_duplicate_number_conflicts(self, client, manager_headers, test_supplier, paper, order):
        response = client.post(
            ORDERS,
            json={
                "order_id": order["order_id"],
                "supplier_id": test_supplier.id,
                "items": [{"inventory_id": paper.id, "quantity": 1, "unit_price": 100}],
            },
            headers=manager_headers,
        )
        assert response.status_code == 409

    def test_unknown_inventory_item_rolls_back(self, client, manager_headers, test_supplier, paper, db_session):
        response = client.post(
            ORDERS,
            json={
                "supplier_id": test_supplier.id,
                "items": [
                    {"inventory_id": paper.id, "quantity": 1, "unit_price": 100},
                    {"inventory_id": 999, "quantity": 1, "unit_price": 100},
                ],
            },
            headers=manager_headers,
        )
        assert response.status_code == 404
        assert db_session.query(SupplierOrder).count() == 0
        assert db_session.query(SupplierOrderItem).count() == 0

    @pytest.mark.parametrize("line", [
        {"quantity": 0, "unit_price": 10},
        {"quantity": 1, "unit_price": -5},
    ])
    def test_invalid_lines_are_validation_errors(self, client, manager_headers, test_supplier, paper, line):
        line["inventory_id"] = paper.id
        response = client.post(
            ORDERS, json={"supplier_id": test_supplier.id, "items": [line]}, headers=manager_headers
        )
        assert response.status_code == 422

    def test_staff_cannot_create(self, client, staff_headers, test_supplier, paper):
        response = client.post(
            ORDERS,
            json={"supplier_id": test_supplier.id, "items": [{"inventory_id": paper.id, "quantity": 1, "unit_price": 1}]},
            headers=staff_headers,
        )
        assert response.status_code == 403

    def test_list_filtered_by_status(self, client, staff_headers, order):
        response = client.get(f"{ORDERS}?status=Pending", headers=staff_headers)
        assert [o["id"] for o in response.json()] == [order["id"]]
        response = client.get(f"{ORDERS}?status=Paid", headers=staff_headers)
        assert response.json() == []


class TestEditOrder:

    def test_lines_are_diffed_by_id(self, client, manager_headers, order, paper, ink):
        paper_line = order["items"][0]
        response = client.put(
            f"{ORDERS}/{order['id']}",
            json={
                "notes": "Rush job",
                "items": [
                    {"id": paper_line["id"], "inventory_id": paper.id, "quantity": 8, "unit_price": 100},
                    {"inventory_id": ink.id, "quantity": 2, "unit_price": 45.5},
                ],
            },
            headers=manager_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["notes"] == "Rush job"
        kept, added = body["items"]
        assert kept["id"] == paper_line["id"]
        assert kept["quantity"] == 8
        assert added["inventory_id"] == ink.id
        assert added["quantity"] == 2
        assert added["total_price"] == 91.0
        assert body["total_amount"] == 891.0
        assert body["remaining_amount"] == 891.0

    def test_foreign_line_id_rejected(self, client, manager_headers, order, paper):
        response = client.put(
            f"{ORDERS}/{order['id']}",
            json={"items": [{"id": 12345, "inventory_id": paper.id, "quantity": 1, "unit_price": 1}]},
            headers=manager_headers,
        )
        assert response.status_code == 400

    def test_stocked_line_cannot_be_removed(self, client, manager_headers, order, paper):
        pay(client, manager_headers, order["id"], 500)
        paper_line = order["items"][0]
        response = client.put(
            f"{ORDERS}/{order['id']}",
            json={"items": [{"id": paper_line["id"], "inventory_id": paper.id, "quantity": 5, "unit_price": 100}]},
            headers=manager_headers,
        )
        assert response.status_code == 400
        assert "already stocked" in response.json()["detail"]

    def test_total_cannot_drop_below_paid(self, client, manager_headers, order, paper, ink):
        pay(client, manager_headers, order["id"], 500)
        paper_line, ink_line = order["items"]
        response = client.put(
            f"{ORDERS}/{order['id']}",
            json={"items": [
                {"id": paper_line["id"], "inventory_id": paper.id, "quantity": 5, "unit_price": 10},
                {"id": ink_line["id"], "inventory_id": ink.id, "quantity": 10, "unit_price": 0},
            ]},
            headers=manager_headers,
        )
        assert response.status_code == 400
        assert "cannot be less than" in response.json()["detail"]

    def test_completed_order_is_read_only(self, client, manager_headers, order):
        for status in ("Approved", "Paid", "Completed"):
            assert set_status(client, manager_headers, order["id"], status).status_code == 200
        response = client.put(f"{ORDERS}/{order['id']}", json={"notes": "late edit"}, headers=manager_headers)
        assert response.status_code == 409


class TestStatusChanges:

    def test_illegal_transition_is_409(self, client, manager_headers, order):
        response = set_status(client, manager_headers, order["id"], "Shipped")
        assert response.status_code == 409
        assert "Valid transitions: Approved, Rejected" in response.json()["detail"]

    def test_unknown_status_is_400(self, client, manager_headers, order):
        response = set_status(client, manager_headers, order["id"], "Misplaced")
        assert response.status_code == 400

    def test_payment_plan_updated_with_status(self, client, manager_headers, order):
        response = client.put(
            f"{ORDERS}/{order['id']}/status",
            json={"status": "Approved", "payment_plan": "Full payment on delivery"},
            headers=manager_headers,
        )
        assert response.json()["payment_plan"] == "Full payment on delivery"
        assert response.json()["allowed_statuses"] == ["Approved", "Partially Paid", "Paid", "Pending"]

    def test_paid_releases_full_stock_once(self, client, manager_headers, order, paper, ink, db_session):
        set_status(client, manager_headers, order["id"], "Approved")
        response = set_status(client, manager_headers, order["id"], "Paid")
        assert response.status_code == 200
        body = response.json()
        assert [item["stocked_quantity"] for item in body["items"]] == [5, 10]
        # amounts are not touched by a manual status change
        assert body["paid_amount"] == 0.0

        # re-submitting the same status changes nothing
        assert set_status(client, manager_headers, order["id"], "Paid").status_code == 200

        db_session.refresh(paper)
        db_session.refresh(ink)
        assert paper.quantity == 5
        assert ink.quantity == 12

        ledger = db_session.query(InventoryTransaction).all()
        assert len(ledger) == 2
        assert all(t.is_supplier and t.created_by == order["supplier_id"] for t in ledger)
        assert ledger[0].notes == f"Auto stock-in from PO {order['order_id']}"


class TestReceiveOrder:

    def test_receive_stocks_outstanding_units(self, client, manager_headers, order, paper, ink, db_session):
        pay(client, manager_headers, order["id"], 200)
        assert set_status(client, manager_headers, order["id"], "Shipped").status_code == 200

        response = client.post(f"{ORDERS}/{order['id']}/receive", headers=manager_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "Received"
        assert [item["stocked_quantity"] for item in body["items"]] == [5, 10]

        db_session.refresh(paper)
        db_session.refresh(ink)
        assert paper.quantity == 5
        assert ink.quantity == 12

        receipt_notes = {
            t.notes for t in db_session.query(InventoryTransaction).all()
        }
        assert f"Stock in from Purchase Order {order['order_id']}" in receipt_notes

    def test_receive_requires_shipped(self, client, manager_headers, order):
        response = client.post(f"{ORDERS}/{order['id']}/receive", headers=manager_headers)
        assert response.status_code == 409

    def test_received_can_only_complete(self, client, manager_headers, order):
        for status in ("Approved", "Paid", "Shipped"):
            set_status(client, manager_headers, order["id"], status)
        body = client.post(f"{ORDERS}/{order['id']}/receive", headers=manager_headers).json()
        assert body["allowed_statuses"] == ["Received", "Completed"]


class TestDeleteOrder:

    def test_removes_children_and_keeps_stock(self, client, admin_headers, manager_headers, order, paper, db_session):
        pay(client, manager_headers, order["id"], 500)

        response = client.delete(f"{ORDERS}/{order['id']}", headers=admin_headers)
        assert response.status_code == 200

        assert db_session.query(SupplierOrder).count() == 0
        assert db_session.query(SupplierOrderItem).count() == 0
        assert db_session.query(OrderPayment).count() == 0

        ledger = db_session.query(InventoryTransaction).all()
        assert len(ledger) == 2
        assert all(t.order_item_id is None for t in ledger)
        db_session.refresh(paper)
        assert paper.quantity == 5

    def test_manager_cannot_delete(self, client, manager_headers, order):
        response = client.delete(f"{ORDERS}/{order['id']}", headers=manager_headers)
        assert response.status_code == 403

    def test_missing_order_is_404(self, client, admin_headers):
        response = client.delete(f"{ORDERS}/999", headers=admin_headers)
        assert response.status_code == 404
