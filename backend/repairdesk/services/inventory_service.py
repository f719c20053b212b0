# Overview: Stock items and their append-only movement ledger.

"""
Inventory Ledger

Every change to a stock item's quantity is a StockMovement row written in
the same transaction as the matching change to quantity_on_hand, so

    initial_quantity + sum(quantity_change) == quantity_on_hand

holds for every item. initial_quantity is the opening balance recorded at
creation and is not itself a movement.

adjust_stock locks the item row (SELECT ... FOR UPDATE) and the mapping's
version_id turns a lost update into StaleDataError, which run_with_retry
retries against fresh rows.

Negative stock is allowed unless INVENTORY_ALLOW_NEGATIVE_STOCK is False.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy import func

from ..errors import ConflictError, ValidationError
from ..extensions import db
from ..models import Category, StockItem, StockMovement, MOVEMENT_REASONS
from ..permissions import Action
from ..validation import (
    MAX_INT,
    MIN_INT,
    ModelValidationPolicy,
    coerce_int,
    enforce_non_negative_amounts,
    validate_payload,
)
from .concurrency import run_with_retry
from .permission_service import require
from .results import service_operation
from .tenant_service import TenantContext, find_in_store, get_scoped


RECENT_MOVEMENTS_LIMIT = 10

STOCK_ITEM_CREATE_POLICY = ModelValidationPolicy(
    writable_fields={
        "sku",
        "name",
        "description",
        "category_id",
        "unit_cost",
        "unit_price",
        "reorder_point",
        "initial_quantity",
    },
    required_on_create={"sku", "name", "category_id"},
)

# quantity_on_hand and initial_quantity are never writable after creation
STOCK_ITEM_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "category_id", "unit_cost", "unit_price", "reorder_point"},
    required_on_create={"name", "category_id"},
)


def _resolve_category(store_id: int, category_id) -> int:
    if find_in_store(Category, category_id, store_id) is None:
        raise ValidationError("Category not found in this store")
    return category_id


def _enforce_item_rules(patch: dict) -> None:
    enforce_non_negative_amounts(patch, ("unit_cost", "unit_price"))
    for key in ("reorder_point", "initial_quantity"):
        if patch.get(key) is not None and patch[key] < 0:
            raise ValidationError(f"{key} must be >= 0")


def _load_item(context: TenantContext, item_id, action: Action, *, lock: bool = False) -> StockItem:
    return get_scoped(context, StockItem, item_id, action, label="Stock item", lock=lock)


def recent_movements(item_id: int, limit: int = RECENT_MOVEMENTS_LIMIT) -> list[StockMovement]:
    return (
        db.session.query(StockMovement)
        .filter(StockMovement.stock_item_id == item_id)
        .order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
        .limit(limit)
        .all()
    )


@service_operation
def create_stock_item(context: TenantContext, payload: dict) -> StockItem:
    require(context, Action.CREATE_STOCK_ITEM, context.store_id, resource="Stock item")

    patch = validate_payload(model=StockItem, payload=payload, policy=STOCK_ITEM_CREATE_POLICY, partial=False)
    _enforce_item_rules(patch)
    _resolve_category(context.store_id, patch["category_id"])

    existing = db.session.query(StockItem.id).filter(
        StockItem.store_id == context.store_id,
        StockItem.sku == patch["sku"],
    ).first()
    if existing is not None:
        raise ConflictError(f"SKU '{patch['sku']}' already exists in this store")

    opening = patch.pop("initial_quantity", None) or 0
    item = StockItem(
        store_id=context.store_id,
        initial_quantity=opening,
        quantity_on_hand=opening,
        **patch,
    )
    db.session.add(item)
    db.session.commit()
    return item


@service_operation
def list_stock_items(context: TenantContext, *, category_id=None) -> list[StockItem]:
    require(context, Action.READ_STOCK_ITEM, context.store_id, resource="Stock item")
    query = db.session.query(StockItem).filter(StockItem.store_id == context.store_id)
    if category_id not in (None, ""):
        query = query.filter(StockItem.category_id == coerce_int("category_id", category_id))
    return query.order_by(StockItem.name.asc(), StockItem.id.asc()).all()


@service_operation
def list_low_stock_items(context: TenantContext) -> list[StockItem]:
    require(context, Action.READ_STOCK_ITEM, context.store_id, resource="Stock item")
    return (
        db.session.query(StockItem)
        .filter(
            StockItem.store_id == context.store_id,
            StockItem.reorder_point.isnot(None),
            StockItem.quantity_on_hand <= StockItem.reorder_point,
        )
        .order_by(StockItem.quantity_on_hand.asc(), StockItem.name.asc())
        .all()
    )


@service_operation
def get_stock_item(context: TenantContext, item_id: int) -> tuple[StockItem, list[StockMovement]]:
    """Item plus its most recent movements, newest first."""
    item = _load_item(context, item_id, Action.READ_STOCK_ITEM)
    return item, recent_movements(item.id)


@service_operation
def list_movements(context: TenantContext, item_id: int) -> list[StockMovement]:
    item = _load_item(context, item_id, Action.READ_STOCK_ITEM)
    return (
        db.session.query(StockMovement)
        .filter(StockMovement.stock_item_id == item.id)
        .order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
        .all()
    )


@service_operation
def update_stock_item(context: TenantContext, item_id: int, payload: dict) -> StockItem:
    def _op():
        item = _load_item(context, item_id, Action.UPDATE_STOCK_ITEM, lock=True)
        patch = validate_payload(model=StockItem, payload=payload, policy=STOCK_ITEM_UPDATE_POLICY, partial=True)
        _enforce_item_rules(patch)
        if "category_id" in patch:
            _resolve_category(item.store_id, patch["category_id"])

        for key, value in patch.items():
            setattr(item, key, value)
        db.session.commit()
        return item

    return run_with_retry(_op)


@service_operation
def delete_stock_item(context: TenantContext, item_id: int) -> int:
    item = _load_item(context, item_id, Action.DELETE_STOCK_ITEM, lock=True)
    db.session.query(StockMovement).filter(StockMovement.stock_item_id == item.id).delete(
        synchronize_session=False
    )
    db.session.delete(item)
    db.session.commit()
    return item_id


def _validate_adjustment(quantity_change, reason, note) -> tuple[int, str, str | None]:
    if quantity_change is None:
        raise ValidationError("quantity_change is required")
    delta = coerce_int("quantity_change", quantity_change)
    if delta == 0:
        raise ValidationError("quantity_change must be non-zero")

    if reason is None:
        reason = "ADJUSTMENT"
    if reason not in MOVEMENT_REASONS:
        raise ValidationError(f"reason must be one of: {', '.join(MOVEMENT_REASONS)}")

    if note is not None:
        if not isinstance(note, str):
            raise ValidationError("note must be a string")
        note = note.strip() or None

    return delta, reason, note


@service_operation
def adjust_stock(
    context: TenantContext,
    item_id: int,
    quantity_change,
    reason: str | None = None,
    note: str | None = None,
) -> tuple[StockItem, StockMovement]:
    """
    Append one movement and move quantity_on_hand by the same delta.

    Tenant and role are checked before input validation so a caller never
    learns anything about another store's item from the error it gets.
    """
    def _op():
        item = _load_item(context, item_id, Action.ADJUST_STOCK_ITEM, lock=True)
        delta, movement_reason, movement_note = _validate_adjustment(quantity_change, reason, note)

        new_quantity = item.quantity_on_hand + delta
        if new_quantity < MIN_INT or new_quantity > MAX_INT:
            raise ValidationError("quantity_change would put quantity_on_hand out of range")
        if new_quantity < 0 and not current_app.config.get("INVENTORY_ALLOW_NEGATIVE_STOCK", True):
            raise ConflictError(
                f"Insufficient stock: {item.quantity_on_hand} on hand, change of {delta} requested"
            )

        movement = StockMovement(
            store_id=item.store_id,
            stock_item_id=item.id,
            actor_id=context.actor_id,
            quantity_change=delta,
            reason=movement_reason,
            note=movement_note,
        )
        item.quantity_on_hand = new_quantity
        db.session.add(movement)
        db.session.commit()
        return item, movement

    return run_with_retry(_op)


def verify_ledger(store_id: int | None = None) -> list[dict]:
    """
    Items whose quantity_on_hand differs from initial_quantity plus the sum
    of their movements. An empty list means the ledger reconciles.
    """
    movement_sums = (
        db.session.query(
            StockMovement.stock_item_id.label("item_id"),
            func.coalesce(func.sum(StockMovement.quantity_change), 0).label("total"),
        )
        .group_by(StockMovement.stock_item_id)
        .subquery()
    )

    query = db.session.query(
        StockItem,
        func.coalesce(movement_sums.c.total, 0),
    ).outerjoin(movement_sums, movement_sums.c.item_id == StockItem.id)
    if store_id is not None:
        query = query.filter(StockItem.store_id == store_id)

    discrepancies = []
    for item, movement_total in query.order_by(StockItem.id.asc()).all():
        expected = item.initial_quantity + int(movement_total)
        if expected != item.quantity_on_hand:
            discrepancies.append(
                {
                    "stock_item_id": item.id,
                    "store_id": item.store_id,
                    "sku": item.sku,
                    "quantity_on_hand": item.quantity_on_hand,
                    "ledger_quantity": expected,
                }
            )
    return discrepancies
