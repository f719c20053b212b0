# backend/repairdesk/routes/tickets.py
"""
Ticket routes.

All routes require authentication; role rules live in the authorization
policy and are enforced by ticket_service.
"""
from flask import Blueprint, request

from ..decorators import require_auth
from ..responses import body_not_object, json_object, render_list, render_one, respond
from ..services import ticket_service
from ..services.tenant_service import current_context


tickets_bp = Blueprint("tickets", __name__, url_prefix="/api/tickets")


@tickets_bp.post("")
@require_auth
def create_ticket_route():
    result = ticket_service.create_ticket(current_context(), request.get_json(silent=True))
    return respond(result, render_one("ticket"), status=201)


@tickets_bp.get("")
@require_auth
def list_tickets_route():
    result = ticket_service.list_tickets(
        current_context(),
        status=request.args.get("status"),
        technician_id=request.args.get("technician_id"),
    )
    return respond(result, render_list("tickets"))


@tickets_bp.get("/<int:ticket_id>")
@require_auth
def get_ticket_route(ticket_id: int):
    result = ticket_service.get_ticket(current_context(), ticket_id)
    return respond(result, render_one("ticket"))


@tickets_bp.patch("/<int:ticket_id>")
@require_auth
def update_ticket_route(ticket_id: int):
    result = ticket_service.update_ticket(current_context(), ticket_id, request.get_json(silent=True) or {})
    return respond(result, render_one("ticket"))


@tickets_bp.delete("/<int:ticket_id>")
@require_auth
def delete_ticket_route(ticket_id: int):
    result = ticket_service.delete_ticket(current_context(), ticket_id)
    return respond(result, lambda deleted_id: {"deleted": deleted_id})


@tickets_bp.post("/<int:ticket_id>/status")
@require_auth
def transition_ticket_route(ticket_id: int):
    payload = json_object()
    if payload is None:
        return body_not_object()
    result = ticket_service.transition(current_context(), ticket_id, payload.get("status"))
    return respond(result, render_one("ticket"))


@tickets_bp.post("/<int:ticket_id>/assign")
@require_auth
def assign_technician_route(ticket_id: int):
    payload = json_object()
    if payload is None:
        return body_not_object()
    result = ticket_service.assign_technician(current_context(), ticket_id, payload.get("technician_id"))
    return respond(result, render_one("ticket"))


@tickets_bp.post("/<int:ticket_id>/notes")
@require_auth
def add_note_route(ticket_id: int):
    payload = json_object()
    if payload is None:
        return body_not_object()
    result = ticket_service.add_note(
        current_context(),
        ticket_id,
        payload.get("body"),
        payload.get("visibility"),
    )
    return respond(result, render_one("note"), status=201)


@tickets_bp.get("/<int:ticket_id>/notes")
@require_auth
def list_notes_route(ticket_id: int):
    result = ticket_service.list_notes(current_context(), ticket_id)
    return respond(result, render_list("notes"))
