# backend/repairdesk/routes/categories.py
from flask import Blueprint, request

from ..decorators import require_auth
from ..responses import render_list, render_one, respond
from ..services import category_service
from ..services.tenant_service import current_context


categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


def _render_category(value):
    if isinstance(value, tuple):
        category, items = value
        body = category.to_dict()
        body["items"] = [item.to_dict() for item in items]
        return {"category": body}
    return {"category": value.to_dict()}


@categories_bp.post("")
@require_auth
def create_category_route():
    result = category_service.create_category(current_context(), request.get_json(silent=True))
    return respond(result, render_one("category"), status=201)


@categories_bp.get("")
@require_auth
def list_categories_route():
    result = category_service.list_categories(current_context())
    return respond(result, render_list("categories"))


@categories_bp.get("/<int:category_id>")
@require_auth
def get_category_route(category_id: int):
    include_items = request.args.get("include_items", "").lower() in {"1", "true", "yes"}
    result = category_service.get_category(current_context(), category_id, include_items=include_items)
    return respond(result, _render_category)


@categories_bp.patch("/<int:category_id>")
@require_auth
def update_category_route(category_id: int):
    result = category_service.update_category(current_context(), category_id, request.get_json(silent=True) or {})
    return respond(result, render_one("category"))


@categories_bp.delete("/<int:category_id>")
@require_auth
def delete_category_route(category_id: int):
    result = category_service.delete_category(current_context(), category_id)
    return respond(result, lambda deleted_id: {"deleted": deleted_id})
