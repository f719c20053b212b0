# backend/repairdesk/routes/sales.py
from flask import Blueprint, request

from ..decorators import require_auth
from ..responses import render_list, render_one, respond
from ..services import sales_service
from ..services.tenant_service import current_context


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("")
@require_auth
def create_sale_route():
    """
    Record a sale.

    Body: subtotal, tax, total, [ticket_id], [customer_id], [payment_status], [reference]
    """
    result = sales_service.create_sale(current_context(), request.get_json(silent=True))
    return respond(result, render_one("sale"), status=201)


@sales_bp.get("")
@require_auth
def list_sales_route():
    result = sales_service.list_sales(current_context(), ticket_id=request.args.get("ticket_id"))
    return respond(result, render_list("sales"))


@sales_bp.get("/<int:sale_id>")
@require_auth
def get_sale_route(sale_id: int):
    result = sales_service.get_sale(current_context(), sale_id)
    return respond(result, render_one("sale"))


@sales_bp.get("/ticket/<int:ticket_id>")
@require_auth
def sales_for_ticket_route(ticket_id: int):
    result = sales_service.list_sales_for_ticket(current_context(), ticket_id)
    return respond(result, render_list("sales"))
