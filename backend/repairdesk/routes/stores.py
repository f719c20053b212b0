# backend/repairdesk/routes/stores.py
"""
Store routes.

Only the caller's own store is ever visible; create/update/delete are
OWNER-only.
"""
from flask import Blueprint, request

from ..decorators import require_auth
from ..responses import render_list, render_one, respond
from ..services import store_service
from ..services.tenant_service import current_context


stores_bp = Blueprint("stores", __name__, url_prefix="/api/stores")


@stores_bp.post("")
@require_auth
def create_store_route():
    result = store_service.create_store(current_context(), request.get_json(silent=True))
    return respond(result, render_one("store"), status=201)


@stores_bp.get("")
@require_auth
def list_stores_route():
    result = store_service.list_stores(current_context())
    return respond(result, render_list("stores"))


@stores_bp.get("/<int:store_id>")
@require_auth
def get_store_route(store_id: int):
    result = store_service.get_store(current_context(), store_id)
    return respond(result, render_one("store"))


@stores_bp.patch("/<int:store_id>")
@require_auth
def update_store_route(store_id: int):
    result = store_service.update_store(current_context(), store_id, request.get_json(silent=True) or {})
    return respond(result, render_one("store"))


@stores_bp.delete("/<int:store_id>")
@require_auth
def delete_store_route(store_id: int):
    result = store_service.delete_store(current_context(), store_id)
    return respond(result, lambda deleted_id: {"deleted": deleted_id})
