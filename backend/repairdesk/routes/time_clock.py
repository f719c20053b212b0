# backend/repairdesk/routes/time_clock.py
from flask import Blueprint, request

from ..decorators import require_auth
from ..responses import body_not_object, json_object, render_list, render_one, respond
from ..services import timekeeping_service
from ..services.tenant_service import current_context


time_clock_bp = Blueprint("time_clock", __name__, url_prefix="/api/time-clock")


@time_clock_bp.post("/clock-in")
@require_auth
def clock_in_route():
    payload = json_object()
    if payload is None:
        return body_not_object()
    result = timekeeping_service.clock_in(current_context(), payload.get("notes"))
    return respond(result, render_one("time_clock"), status=201)


@time_clock_bp.post("/clock-out")
@require_auth
def clock_out_route():
    payload = json_object()
    if payload is None:
        return body_not_object()
    result = timekeeping_service.clock_out(current_context(), payload.get("notes"))
    return respond(result, render_one("time_clock"))


@time_clock_bp.get("/my-clocks")
@require_auth
def my_clocks_route():
    result = timekeeping_service.my_time_clocks(current_context())
    return respond(result, render_list("time_clocks"))


@time_clock_bp.get("/active")
@require_auth
def active_clock_route():
    result = timekeeping_service.active_time_clock(current_context())
    return respond(result, lambda entry: {"time_clock": entry.to_dict() if entry else None})


@time_clock_bp.get("/entries")
@require_auth
def store_entries_route():
    result = timekeeping_service.list_store_time_clocks(
        current_context(),
        employee_id=request.args.get("employee_id"),
    )
    return respond(result, render_list("time_clocks"))
