# Overview: Pytest coverage for stock categories and customer records.

import pytest

from repairdesk.errors import ErrorKind
from repairdesk.extensions import db
from repairdesk.models import Category
from repairdesk.services import category_service, customer_service


# ============================================================================
# Categories
# ============================================================================

class TestCategories:

    def test_create_and_list(self, tenant_a):
        ctx = tenant_a.ctx("MANAGER")
        category_service.create_category(ctx, {"name": "Batteries"}).unwrap()
        category_service.create_category(ctx, {"name": "Adhesives", "description": "Tapes and glue"}).unwrap()
        names = [c.name for c in category_service.list_categories(tenant_a.ctx("VIEWER")).value]
        assert names == ["Adhesives", "Batteries"]

    def test_name_unique_per_store(self, tenant_a, tenant_b, category_a):
        result = category_service.create_category(tenant_a.ctx("OWNER"), {"name": "Screens"})
        assert result.error.kind == ErrorKind.CONFLICT
        assert category_service.create_category(tenant_b.ctx("OWNER"), {"name": "Screens"}).ok

    def test_rename_conflict(self, tenant_a, category_a):
        other = category_service.create_category(tenant_a.ctx("OWNER"), {"name": "Cables"}).unwrap()
        result = category_service.update_category(tenant_a.ctx("OWNER"), other.id, {"name": "Screens"})
        assert result.error.kind == ErrorKind.CONFLICT

    def test_rename_to_own_name_ok(self, tenant_a, category_a):
        result = category_service.update_category(tenant_a.ctx("OWNER"), category_a.id, {"name": "Screens"})
        assert result.ok

    @pytest.mark.parametrize("role", ["TECHNICIAN", "CASHIER", "VIEWER"])
    def test_writes_need_management(self, tenant_a, category_a, role):
        ctx = tenant_a.ctx(role)
        assert category_service.create_category(ctx, {"name": "X"}).error.kind == ErrorKind.AUTHORIZATION_DENIED
        assert category_service.update_category(ctx, category_a.id, {"name": "Y"}).error.kind == ErrorKind.AUTHORIZATION_DENIED
        assert category_service.delete_category(ctx, category_a.id).error.kind == ErrorKind.AUTHORIZATION_DENIED

    def test_delete_in_use_conflicts(self, tenant_a, item_a, category_a):
        result = category_service.delete_category(tenant_a.ctx("OWNER"), category_a.id)
        assert result.error.kind == ErrorKind.CONFLICT

    def test_delete_unused(self, tenant_a, category_a):
        assert category_service.delete_category(tenant_a.ctx("OWNER"), category_a.id).ok
        assert db.session.get(Category, category_a.id) is None

    def test_include_items(self, tenant_a, item_a, category_a):
        category, items = category_service.get_category(
            tenant_a.ctx("CASHIER"), category_a.id, include_items=True
        ).value
        assert category.id == category_a.id
        assert [i.sku for i in items] == ["SCR-001"]

    def test_cross_tenant_category_not_found(self, tenant_b, category_a):
        result = category_service.get_category(tenant_b.ctx("OWNER"), category_a.id)
        assert result.error.kind == ErrorKind.NOT_FOUND

    def test_get_route_with_items(self, client, tenant_a, item_a, category_a):
        resp = client.get(f"/api/categories/{category_a.id}?include_items=true", headers=tenant_a.headers("VIEWER"))
        assert resp.status_code == 200
        assert len(resp.get_json()["category"]["items"]) == 1


# ============================================================================
# Customers
# ============================================================================

class TestCustomers:

    def test_create_and_search(self, tenant_a):
        ctx = tenant_a.ctx("CASHIER")
        customer_service.create_customer(ctx, {"first_name": "Ana", "last_name": "Lopez", "phone": "555-1000"}).unwrap()
        customer_service.create_customer(ctx, {"first_name": "Ben", "email": "ben@example.com"}).unwrap()

        assert len(customer_service.list_customers(ctx).value) == 2
        assert [c.first_name for c in customer_service.list_customers(ctx, search="lop").value] == ["Ana"]
        assert [c.first_name for c in customer_service.list_customers(ctx, search="ben@").value] == ["Ben"]

    def test_first_name_required(self, tenant_a):
        result = customer_service.create_customer(tenant_a.ctx("OWNER"), {"last_name": "Only"})
        assert result.error.kind == ErrorKind.VALIDATION

    def test_viewer_cannot_create(self, tenant_a):
        result = customer_service.create_customer(tenant_a.ctx("VIEWER"), {"first_name": "V"})
        assert result.error.kind == ErrorKind.AUTHORIZATION_DENIED

    def test_update_and_isolation(self, tenant_a, tenant_b):
        customer = customer_service.create_customer(tenant_a.ctx("OWNER"), {"first_name": "Cy"}).unwrap()
        assert customer_service.update_customer(tenant_a.ctx("TECHNICIAN"), customer.id, {"phone": "1"}).ok
        assert customer_service.get_customer(tenant_b.ctx("OWNER"), customer.id).error.kind == ErrorKind.NOT_FOUND
        assert customer_service.list_customers(tenant_b.ctx("OWNER")).value == []
