# Overview: Stock categories, unique by name within a store.

from __future__ import annotations

from ..errors import ConflictError
from ..extensions import db
from ..models import Category, StockItem
from ..permissions import Action
from ..validation import ModelValidationPolicy, validate_payload
from .permission_service import require
from .results import service_operation
from .tenant_service import TenantContext, get_scoped


CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description"},
    required_on_create={"name"},
)


def _ensure_unique_name(store_id: int, name: str, exclude_id: int | None = None) -> None:
    query = db.session.query(Category).filter(Category.store_id == store_id, Category.name == name)
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    if query.first() is not None:
        raise ConflictError(f"Category with name '{name}' already exists")


@service_operation
def create_category(context: TenantContext, payload: dict) -> Category:
    require(context, Action.CREATE_CATEGORY, context.store_id, resource="Category")
    patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=False)
    _ensure_unique_name(context.store_id, patch["name"])

    category = Category(store_id=context.store_id, **patch)
    db.session.add(category)
    db.session.commit()
    return category


@service_operation
def list_categories(context: TenantContext) -> list[Category]:
    require(context, Action.READ_CATEGORY, context.store_id, resource="Category")
    return (
        db.session.query(Category)
        .filter(Category.store_id == context.store_id)
        .order_by(Category.name.asc())
        .all()
    )


@service_operation
def get_category(context: TenantContext, category_id: int, *, include_items: bool = False):
    """Category, or (category, items) when include_items is set."""
    category = get_scoped(context, Category, category_id, Action.READ_CATEGORY, label="Category")
    if not include_items:
        return category
    items = (
        db.session.query(StockItem)
        .filter(StockItem.category_id == category.id, StockItem.store_id == context.store_id)
        .order_by(StockItem.name.asc())
        .all()
    )
    return category, items


@service_operation
def update_category(context: TenantContext, category_id: int, payload: dict) -> Category:
    category = get_scoped(context, Category, category_id, Action.UPDATE_CATEGORY, label="Category")
    patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=True)
    if "name" in patch:
        _ensure_unique_name(context.store_id, patch["name"], exclude_id=category.id)

    for key, value in patch.items():
        setattr(category, key, value)
    db.session.commit()
    return category


@service_operation
def delete_category(context: TenantContext, category_id: int) -> int:
    category = get_scoped(context, Category, category_id, Action.DELETE_CATEGORY, label="Category")
    in_use = db.session.query(StockItem.id).filter(StockItem.category_id == category.id).first()
    if in_use is not None:
        raise ConflictError("Cannot delete category that is in use by stock items")

    db.session.delete(category)
    db.session.commit()
    return category_id
