# backend/repairdesk/routes/inventory.py
"""
Inventory routes.

Stock items are read by every role; creation, edits, deletion and stock
adjustments are restricted to OWNER and MANAGER by the authorization policy.
"""
from flask import Blueprint, request

from ..decorators import require_auth
from ..responses import body_not_object, json_object, render_list, render_one, respond
from ..services import inventory_service
from ..services.tenant_service import current_context


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


def _render_item_with_movements(value):
    item, movements = value
    body = item.to_dict()
    body["recent_movements"] = [m.to_dict() for m in movements]
    return {"item": body}


def _render_adjustment(value):
    item, movement = value
    return {"item": item.to_dict(), "movement": movement.to_dict()}


@inventory_bp.post("")
@require_auth
def create_stock_item_route():
    result = inventory_service.create_stock_item(current_context(), request.get_json(silent=True))
    return respond(result, render_one("item"), status=201)


@inventory_bp.get("")
@require_auth
def list_stock_items_route():
    result = inventory_service.list_stock_items(current_context(), category_id=request.args.get("category_id"))
    return respond(result, render_list("items"))


@inventory_bp.get("/low-stock")
@require_auth
def low_stock_route():
    result = inventory_service.list_low_stock_items(current_context())
    return respond(result, render_list("items"))


@inventory_bp.get("/<int:item_id>")
@require_auth
def get_stock_item_route(item_id: int):
    result = inventory_service.get_stock_item(current_context(), item_id)
    return respond(result, _render_item_with_movements)


@inventory_bp.patch("/<int:item_id>")
@require_auth
def update_stock_item_route(item_id: int):
    result = inventory_service.update_stock_item(current_context(), item_id, request.get_json(silent=True) or {})
    return respond(result, render_one("item"))


@inventory_bp.delete("/<int:item_id>")
@require_auth
def delete_stock_item_route(item_id: int):
    result = inventory_service.delete_stock_item(current_context(), item_id)
    return respond(result, lambda deleted_id: {"deleted": deleted_id})


@inventory_bp.post("/<int:item_id>/adjust")
@require_auth
def adjust_stock_route(item_id: int):
    """
    Append a stock movement.

    Body: quantity_change (non-zero int), [reason] (default ADJUSTMENT), [note]
    """
    payload = json_object()
    if payload is None:
        return body_not_object()
    result = inventory_service.adjust_stock(
        current_context(),
        item_id,
        payload.get("quantity_change"),
        reason=payload.get("reason"),
        note=payload.get("note"),
    )
    return respond(result, _render_adjustment, status=201)


@inventory_bp.get("/<int:item_id>/movements")
@require_auth
def list_movements_route(item_id: int):
    result = inventory_service.list_movements(current_context(), item_id)
    return respond(result, render_list("movements"))
