# backend/repairdesk/routes/auth.py
"""
Authentication routes: store registration, PIN login, logout, and the
current session's tenant context.
"""
from flask import Blueprint, g, request

from ..decorators import require_auth
from ..responses import body_not_object, json_object, respond
from ..services import auth_service
from ..services.tenant_service import current_context


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/register")
def register_route():
    payload = request.get_json(silent=True)
    result = auth_service.register_store(
        payload,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    return respond(result, status=201)


@auth_bp.post("/pin-login")
def pin_login_route():
    payload = json_object()
    if payload is None:
        return body_not_object()
    result = auth_service.pin_login(
        payload.get("store_email"),
        payload.get("pin"),
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    return respond(result)


@auth_bp.post("/logout")
@require_auth
def logout_route():
    result = auth_service.logout(g.session_token)
    return respond(result, lambda _: {"message": "Logged out"})


@auth_bp.get("/me")
@require_auth
def me_route():
    return current_context().to_dict()
