# backend/repairdesk/routes/customers.py
from flask import Blueprint, request

from ..decorators import require_auth
from ..responses import render_list, render_one, respond
from ..services import customer_service
from ..services.tenant_service import current_context


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.post("")
@require_auth
def create_customer_route():
    result = customer_service.create_customer(current_context(), request.get_json(silent=True))
    return respond(result, render_one("customer"), status=201)


@customers_bp.get("")
@require_auth
def list_customers_route():
    result = customer_service.list_customers(current_context(), search=request.args.get("q"))
    return respond(result, render_list("customers"))


@customers_bp.get("/<int:customer_id>")
@require_auth
def get_customer_route(customer_id: int):
    result = customer_service.get_customer(current_context(), customer_id)
    return respond(result, render_one("customer"))


@customers_bp.patch("/<int:customer_id>")
@require_auth
def update_customer_route(customer_id: int):
    result = customer_service.update_customer(current_context(), customer_id, request.get_json(silent=True) or {})
    return respond(result, render_one("customer"))
