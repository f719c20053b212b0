# Overview: Pytest coverage for tenant isolation behavior.

"""
Multi-Tenant Isolation Tests

SECURITY TESTS: Prove that cross-tenant access is denied for core resources.

These tests create two stores, each with a full staff, then verify that:
1. An employee of Store A cannot read or write data in Store B
2. A foreign id answers exactly like an id that does not exist
3. Lists only ever contain the session store's rows
4. Security events are logged for cross-tenant access attempts
"""

import pytest

from repairdesk.extensions import db
from repairdesk.models import Customer, SecurityEvent, Ticket
from repairdesk.services import sales_service


MISSING_ID = 999999


@pytest.fixture
def foreign_rows(tenant_b, item_b, ticket_b):
    customer = Customer(store_id=tenant_b.id, first_name="Bea")
    db.session.add(customer)
    db.session.commit()
    sale = sales_service.create_sale(
        tenant_b.ctx("CASHIER"), {"subtotal": "10", "tax": "0", "total": "10"}
    ).unwrap()
    return {
        "ticket": ticket_b.id,
        "item": item_b.id,
        "category": item_b.category_id,
        "customer": customer.id,
        "sale": sale.id,
        "store": tenant_b.id,
    }


READ_PATHS = [
    ("ticket", "/api/tickets/{}"),
    ("ticket", "/api/tickets/{}/notes"),
    ("ticket", "/api/sales/ticket/{}"),
    ("item", "/api/inventory/{}"),
    ("item", "/api/inventory/{}/movements"),
    ("category", "/api/categories/{}"),
    ("customer", "/api/customers/{}"),
    ("sale", "/api/sales/{}"),
    ("store", "/api/stores/{}"),
]


# ============================================================================
# Reads
# ============================================================================

class TestCrossTenantReads:

    @pytest.mark.parametrize("kind,path", READ_PATHS)
    def test_foreign_id_matches_missing_id(self, client, tenant_a, foreign_rows, kind, path):
        headers = tenant_a.headers("OWNER")
        foreign = client.get(path.format(foreign_rows[kind]), headers=headers)
        missing = client.get(path.format(MISSING_ID), headers=headers)

        assert foreign.status_code == 404
        assert missing.status_code == 404
        assert foreign.get_json() == missing.get_json()

    def test_cross_tenant_read_is_logged(self, client, tenant_a, foreign_rows):
        client.get(f"/api/tickets/{foreign_rows['ticket']}", headers=tenant_a.headers("VIEWER"))
        event = db.session.query(SecurityEvent).filter_by(event_type="CROSS_TENANT_ACCESS_DENIED").one()
        assert event.employee_id == tenant_a.staff["VIEWER"].id
        assert event.store_id == tenant_a.id
        assert event.action == "READ_TICKET"
        assert event.success is False

    def test_missing_id_is_not_logged(self, client, tenant_a):
        client.get(f"/api/tickets/{MISSING_ID}", headers=tenant_a.headers("OWNER"))
        assert db.session.query(SecurityEvent).count() == 0

    @pytest.mark.parametrize("path,key", [
        ("/api/tickets", "tickets"),
        ("/api/inventory", "items"),
        ("/api/categories", "categories"),
        ("/api/customers", "customers"),
        ("/api/sales", "sales"),
        ("/api/refunds", "refunds"),
        ("/api/employees", "employees"),
        ("/api/stores", "stores"),
    ])
    def test_lists_exclude_foreign_rows(self, client, tenant_a, foreign_rows, path, key):
        resp = client.get(path, headers=tenant_a.headers("OWNER"))
        assert resp.status_code == 200
        rows = resp.get_json()[key]
        if key == "stores":
            assert [r["id"] for r in rows] == [tenant_a.id]
        elif key == "employees":
            assert len(rows) == 5
        else:
            assert rows == []


# ============================================================================
# Writes
# ============================================================================

class TestCrossTenantWrites:

    def test_patch_foreign_ticket(self, client, tenant_a, foreign_rows):
        resp = client.patch(
            f"/api/tickets/{foreign_rows['ticket']}",
            json={"title": "hijacked"},
            headers=tenant_a.headers("OWNER"),
        )
        assert resp.status_code == 404
        assert db.session.get(Ticket, foreign_rows["ticket"]).title == "Water damage"

    def test_transition_foreign_ticket(self, client, tenant_a, foreign_rows):
        resp = client.post(
            f"/api/tickets/{foreign_rows['ticket']}/status",
            json={"status": "CANCELLED"},
            headers=tenant_a.headers("TECHNICIAN"),
        )
        assert resp.status_code == 404
        assert db.session.get(Ticket, foreign_rows["ticket"]).status == "RECEIVED"

    def test_delete_foreign_ticket(self, client, tenant_a, foreign_rows):
        resp = client.delete(f"/api/tickets/{foreign_rows['ticket']}", headers=tenant_a.headers("OWNER"))
        assert resp.status_code == 404
        assert db.session.get(Ticket, foreign_rows["ticket"]) is not None

    def test_cashier_deleting_foreign_ticket_sees_404_not_403(self, client, tenant_a, foreign_rows):
        resp = client.delete(f"/api/tickets/{foreign_rows['ticket']}", headers=tenant_a.headers("CASHIER"))
        assert resp.status_code == 404

    def test_adjust_foreign_item(self, client, tenant_a, foreign_rows):
        resp = client.post(
            f"/api/inventory/{foreign_rows['item']}/adjust",
            json={"quantity_change": -5},
            headers=tenant_a.headers("MANAGER"),
        )
        assert resp.status_code == 404

    def test_foreign_reference_in_body_is_rejected(self, client, tenant_a, foreign_rows):
        resp = client.post(
            "/api/tickets",
            json={"title": "x", "customer_id": foreign_rows["customer"]},
            headers=tenant_a.headers("CASHIER"),
        )
        assert resp.status_code == 400

    def test_store_id_in_body_is_not_writable(self, client, tenant_a, foreign_rows):
        resp = client.post(
            "/api/tickets",
            json={"title": "x", "store_id": foreign_rows["store"]},
            headers=tenant_a.headers("OWNER"),
        )
        assert resp.status_code == 400
        assert db.session.query(Ticket).filter_by(store_id=foreign_rows["store"]).count() == 1
