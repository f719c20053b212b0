# backend/repairdesk/routes/refunds.py
from flask import Blueprint, request

from ..decorators import require_auth
from ..responses import render_list, render_one, respond
from ..services import refund_service
from ..services.tenant_service import current_context


refunds_bp = Blueprint("refunds", __name__, url_prefix="/api/refunds")


@refunds_bp.post("")
@require_auth
def create_refund_route():
    """Body: sale_id, amount, [reason]"""
    result = refund_service.create_refund(current_context(), request.get_json(silent=True))
    return respond(result, render_one("refund"), status=201)


@refunds_bp.get("")
@require_auth
def list_refunds_route():
    result = refund_service.list_refunds(current_context())
    return respond(result, render_list("refunds"))


@refunds_bp.get("/<int:refund_id>")
@require_auth
def get_refund_route(refund_id: int):
    result = refund_service.get_refund(current_context(), refund_id)
    return respond(result, render_one("refund"))
