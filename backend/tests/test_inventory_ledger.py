# Overview: Pytest coverage for stock items and the append-only movement ledger.

"""
Inventory Ledger Tests

Every adjustment writes exactly one movement, and

    initial_quantity + sum(quantity_change) == quantity_on_hand

holds after any sequence of successful or failed adjustments.
"""

from datetime import datetime, timedelta

import pytest

from repairdesk.errors import ErrorKind
from repairdesk.extensions import db
from repairdesk.models import Category, SecurityEvent, StockItem, StockMovement
from repairdesk.services import inventory_service


def movement_total(item_id):
    return sum(m.quantity_change for m in db.session.query(StockMovement).filter_by(stock_item_id=item_id))


# ============================================================================
# Adjustments
# ============================================================================

class TestAdjustStock:

    def test_adjust_writes_one_movement(self, tenant_a, item_a):
        result = inventory_service.adjust_stock(tenant_a.ctx("MANAGER"), item_a.id, -3, reason="SALE", note="walk-in")
        assert result.ok
        item, movement = result.value
        assert item.quantity_on_hand == 7
        assert movement.quantity_change == -3
        assert movement.reason == "SALE"
        assert movement.note == "walk-in"
        assert movement.actor_id == tenant_a.staff["MANAGER"].id
        assert movement.store_id == tenant_a.id

    def test_n_adjustments_n_movements(self, tenant_a, item_a):
        ctx = tenant_a.ctx("OWNER")
        deltas = [5, -2, -8, 1, 12, -4]
        for delta in deltas:
            assert inventory_service.adjust_stock(ctx, item_a.id, delta).ok

        db.session.refresh(item_a)
        assert db.session.query(StockMovement).filter_by(stock_item_id=item_a.id).count() == len(deltas)
        assert item_a.quantity_on_hand == 10 + sum(deltas)
        assert item_a.initial_quantity + movement_total(item_a.id) == item_a.quantity_on_hand

    def test_reason_defaults_to_adjustment(self, tenant_a, item_a):
        _, movement = inventory_service.adjust_stock(tenant_a.ctx("OWNER"), item_a.id, 1).value
        assert movement.reason == "ADJUSTMENT"

    @pytest.mark.parametrize("delta", [0, "0", None, 1.5, "2.0", "1e3", True, "abc"])
    def test_invalid_delta_writes_nothing(self, tenant_a, item_a, delta):
        result = inventory_service.adjust_stock(tenant_a.ctx("OWNER"), item_a.id, delta)
        assert result.error.kind == ErrorKind.VALIDATION
        db.session.refresh(item_a)
        assert item_a.quantity_on_hand == 10
        assert db.session.query(StockMovement).count() == 0

    def test_unknown_reason(self, tenant_a, item_a):
        result = inventory_service.adjust_stock(tenant_a.ctx("OWNER"), item_a.id, 1, reason="THEFT")
        assert result.error.kind == ErrorKind.VALIDATION

    def test_string_delta_accepted(self, tenant_a, item_a):
        item, _ = inventory_service.adjust_stock(tenant_a.ctx("OWNER"), item_a.id, "-4").value
        assert item.quantity_on_hand == 6

    @pytest.mark.parametrize("role", ["TECHNICIAN", "CASHIER", "VIEWER"])
    def test_non_management_denied(self, tenant_a, item_a, role):
        result = inventory_service.adjust_stock(tenant_a.ctx(role), item_a.id, 1)
        assert result.error.kind == ErrorKind.AUTHORIZATION_DENIED
        db.session.refresh(item_a)
        assert item_a.quantity_on_hand == 10
        assert db.session.query(StockMovement).count() == 0

    def test_cross_tenant_adjust_is_not_found(self, tenant_a, item_b):
        result = inventory_service.adjust_stock(tenant_a.ctx("MANAGER"), item_b.id, -5)
        assert result.error.kind == ErrorKind.NOT_FOUND
        db.session.refresh(item_b)
        assert item_b.quantity_on_hand == 5
        assert db.session.query(StockMovement).count() == 0

        event = db.session.query(SecurityEvent).filter_by(event_type="CROSS_TENANT_ACCESS_DENIED").one()
        assert event.store_id == tenant_a.id
        assert event.employee_id == tenant_a.staff["MANAGER"].id

    def test_missing_item_is_not_found(self, tenant_a):
        result = inventory_service.adjust_stock(tenant_a.ctx("OWNER"), 987654, 1)
        assert result.error.kind == ErrorKind.NOT_FOUND

    @pytest.mark.parametrize("delta", [10 ** 30, -(10 ** 30), str(10 ** 30), 2 ** 63])
    def test_out_of_range_delta_is_validation_error(self, tenant_a, item_a, delta):
        ctx = tenant_a.ctx("OWNER")
        result = inventory_service.adjust_stock(ctx, item_a.id, delta)
        assert result.error.kind == ErrorKind.VALIDATION
        db.session.refresh(item_a)
        assert item_a.quantity_on_hand == 10
        assert db.session.query(StockMovement).count() == 0

        # Session is still usable afterwards
        assert inventory_service.adjust_stock(ctx, item_a.id, 1).ok

    def test_delta_overflowing_quantity_is_validation_error(self, tenant_a, item_a):
        result = inventory_service.adjust_stock(tenant_a.ctx("OWNER"), item_a.id, 2 ** 63 - 1)
        assert result.error.kind == ErrorKind.VALIDATION
        db.session.refresh(item_a)
        assert item_a.quantity_on_hand == 10
        assert db.session.query(StockMovement).count() == 0


# ============================================================================
# Negative stock
# ============================================================================

class TestNegativeStock:

    def test_negative_allowed_by_default(self, tenant_a, item_a):
        item, _ = inventory_service.adjust_stock(tenant_a.ctx("OWNER"), item_a.id, -15).value
        assert item.quantity_on_hand == -5

    def test_negative_rejected_when_disabled(self, app, tenant_a, item_a):
        app.config["INVENTORY_ALLOW_NEGATIVE_STOCK"] = False
        result = inventory_service.adjust_stock(tenant_a.ctx("OWNER"), item_a.id, -11)
        assert result.error.kind == ErrorKind.CONFLICT
        db.session.refresh(item_a)
        assert item_a.quantity_on_hand == 10
        assert db.session.query(StockMovement).count() == 0

    def test_down_to_zero_allowed_when_disabled(self, app, tenant_a, item_a):
        app.config["INVENTORY_ALLOW_NEGATIVE_STOCK"] = False
        item, _ = inventory_service.adjust_stock(tenant_a.ctx("OWNER"), item_a.id, -10).value
        assert item.quantity_on_hand == 0


# ============================================================================
# Ledger verification
# ============================================================================

class TestVerifyLedger:

    def test_clean_ledger(self, tenant_a, tenant_b, item_a, item_b):
        inventory_service.adjust_stock(tenant_a.ctx("OWNER"), item_a.id, 4)
        inventory_service.adjust_stock(tenant_b.ctx("MANAGER"), item_b.id, -2)
        assert inventory_service.verify_ledger() == []

    def test_failed_adjustments_keep_ledger_consistent(self, app, tenant_a, item_a):
        ctx = tenant_a.ctx("OWNER")
        inventory_service.adjust_stock(ctx, item_a.id, 3)
        inventory_service.adjust_stock(ctx, item_a.id, 0)
        inventory_service.adjust_stock(tenant_a.ctx("CASHIER"), item_a.id, 3)
        app.config["INVENTORY_ALLOW_NEGATIVE_STOCK"] = False
        inventory_service.adjust_stock(ctx, item_a.id, -100)
        assert inventory_service.verify_ledger(tenant_a.id) == []

    def test_direct_write_is_detected(self, tenant_a, item_a):
        db.session.query(StockItem).filter_by(id=item_a.id).update({"quantity_on_hand": 42})
        db.session.commit()

        discrepancies = inventory_service.verify_ledger(tenant_a.id)
        assert discrepancies == [
            {
                "stock_item_id": item_a.id,
                "store_id": tenant_a.id,
                "sku": "SCR-001",
                "quantity_on_hand": 42,
                "ledger_quantity": 10,
            }
        ]

    def test_store_filter(self, tenant_a, tenant_b, item_a, item_b):
        db.session.query(StockItem).filter_by(id=item_b.id).update({"quantity_on_hand": 0})
        db.session.commit()
        assert inventory_service.verify_ledger(tenant_a.id) == []
        assert len(inventory_service.verify_ledger(tenant_b.id)) == 1


# ============================================================================
# Stock item CRUD and reads
# ============================================================================

class TestStockItems:

    def test_create_sets_opening_balance_without_movement(self, tenant_a, category_a):
        result = inventory_service.create_stock_item(
            tenant_a.ctx("MANAGER"),
            {"sku": "CHG-01", "name": "USB-C Charger", "category_id": category_a.id, "initial_quantity": 7},
        )
        assert result.ok
        assert result.value.quantity_on_hand == 7
        assert result.value.initial_quantity == 7
        assert db.session.query(StockMovement).count() == 0

    def test_duplicate_sku_conflicts(self, tenant_a, item_a, category_a):
        result = inventory_service.create_stock_item(
            tenant_a.ctx("OWNER"),
            {"sku": "SCR-001", "name": "Dup", "category_id": category_a.id},
        )
        assert result.error.kind == ErrorKind.CONFLICT

    def test_same_sku_in_other_store_ok(self, tenant_b, item_a):
        other = Category(store_id=tenant_b.id, name="Screens")
        db.session.add(other)
        db.session.commit()
        result = inventory_service.create_stock_item(
            tenant_b.ctx("OWNER"),
            {"sku": "SCR-001", "name": "Screen", "category_id": other.id},
        )
        assert result.ok

    def test_foreign_category_is_validation_error(self, tenant_b, category_a):
        result = inventory_service.create_stock_item(
            tenant_b.ctx("OWNER"),
            {"sku": "X-1", "name": "X", "category_id": category_a.id},
        )
        assert result.error.kind == ErrorKind.VALIDATION

    @pytest.mark.parametrize("field,value", [("unit_price", "-1"), ("reorder_point", -1), ("initial_quantity", -3)])
    def test_negative_values_rejected(self, tenant_a, category_a, field, value):
        payload = {"sku": "N-1", "name": "N", "category_id": category_a.id, field: value}
        result = inventory_service.create_stock_item(tenant_a.ctx("OWNER"), payload)
        assert result.error.kind == ErrorKind.VALIDATION

    def test_quantity_not_writable_on_update(self, tenant_a, item_a):
        result = inventory_service.update_stock_item(tenant_a.ctx("OWNER"), item_a.id, {"quantity_on_hand": 99})
        assert result.error.kind == ErrorKind.VALIDATION
        db.session.refresh(item_a)
        assert item_a.quantity_on_hand == 10

    def test_update_name(self, tenant_a, item_a):
        result = inventory_service.update_stock_item(tenant_a.ctx("MANAGER"), item_a.id, {"name": "Screen v2"})
        assert result.value.name == "Screen v2"

    def test_get_returns_ten_recent_movements(self, tenant_a, item_a):
        base = datetime(2026, 2, 1)
        for i in range(15):
            db.session.add(StockMovement(
                store_id=tenant_a.id,
                stock_item_id=item_a.id,
                quantity_change=1,
                created_at=base + timedelta(minutes=i),
            ))
        db.session.commit()

        item, movements = inventory_service.get_stock_item(tenant_a.ctx("VIEWER"), item_a.id).value
        assert item.id == item_a.id
        assert len(movements) == 10
        assert movements[0].created_at == base + timedelta(minutes=14)

    def test_low_stock(self, tenant_a, item_a):
        ctx = tenant_a.ctx("OWNER")
        assert inventory_service.list_low_stock_items(ctx).value == []
        inventory_service.adjust_stock(ctx, item_a.id, -7)
        low = inventory_service.list_low_stock_items(ctx).value
        assert [i.id for i in low] == [item_a.id]
        assert low[0].is_low_stock

    def test_list_filters_by_category(self, tenant_a, item_a, category_a):
        assert len(inventory_service.list_stock_items(tenant_a.ctx("CASHIER"), category_id=category_a.id).value) == 1
        assert inventory_service.list_stock_items(tenant_a.ctx("CASHIER"), category_id=category_a.id + 100).value == []

    def test_delete_removes_movements(self, tenant_a, item_a):
        inventory_service.adjust_stock(tenant_a.ctx("OWNER"), item_a.id, 1)
        assert inventory_service.delete_stock_item(tenant_a.ctx("OWNER"), item_a.id).ok
        assert db.session.query(StockMovement).count() == 0
        assert db.session.get(StockItem, item_a.id) is None


# ============================================================================
# HTTP
# ============================================================================

class TestInventoryApi:

    def test_adjust_route(self, client, tenant_a, item_a):
        resp = client.post(
            f"/api/inventory/{item_a.id}/adjust",
            json={"quantity_change": 5, "reason": "PURCHASE"},
            headers=tenant_a.headers("MANAGER"),
        )
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["item"]["quantity_on_hand"] == 15
        assert body["movement"]["reason"] == "PURCHASE"

    def test_get_item_includes_recent_movements(self, client, tenant_a, item_a):
        inventory_service.adjust_stock(tenant_a.ctx("OWNER"), item_a.id, 2)
        resp = client.get(f"/api/inventory/{item_a.id}", headers=tenant_a.headers("VIEWER"))
        assert resp.status_code == 200
        assert len(resp.get_json()["item"]["recent_movements"]) == 1

    def test_cashier_adjust_forbidden(self, client, tenant_a, item_a):
        resp = client.post(
            f"/api/inventory/{item_a.id}/adjust",
            json={"quantity_change": 1},
            headers=tenant_a.headers("CASHIER"),
        )
        assert resp.status_code == 403
        assert resp.get_json()["kind"] == "AUTHORIZATION_DENIED"

    def test_cross_tenant_item_404(self, client, tenant_a, item_b):
        resp = client.get(f"/api/inventory/{item_b.id}", headers=tenant_a.headers("OWNER"))
        assert resp.status_code == 404
