# Overview: Authentication decorator for API routes.

from functools import wraps

from flask import g, jsonify, request

from .services import session_service


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header.split(" ", 1)[1].strip()
    return token or None


def require_auth(f):
    """
    Require a valid session and establish the tenant context.

    Sets g.tenant to the TenantContext (employee, store, role) captured when
    the session was created. Routes pass g.tenant explicitly into services.

    Returns 401 if the Authorization header is missing, or the token is
    unknown, revoked, expired, or belongs to a deactivated employee.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if token is None:
            return jsonify({"error": "Authentication required", "kind": "AUTHENTICATION_FAILED"}), 401

        context = session_service.validate_session(token)
        if context is None:
            return jsonify({"error": "Invalid or expired token", "kind": "AUTHENTICATION_FAILED"}), 401

        g.tenant = context
        g.session_token = token
        return f(*args, **kwargs)

    return decorated_function
