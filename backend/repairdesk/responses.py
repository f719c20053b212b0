# Overview: Translate service Results into Flask JSON responses.

from __future__ import annotations

from typing import Any, Callable

from flask import jsonify, request

from .errors import ErrorKind
from .services.results import Result


STATUS_BY_KIND = {
    ErrorKind.AUTHENTICATION_FAILED: 401,
    ErrorKind.AUTHORIZATION_DENIED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.STORE_ERROR: 500,
}


def error_response(kind: ErrorKind, message: str, details: dict | None = None):
    body = {"error": message, "kind": kind.value}
    if details:
        body["details"] = details
    return jsonify(body), STATUS_BY_KIND[kind]


def json_object() -> dict | None:
    """Request body as a dict; {} when absent, None when it is JSON but not an object."""
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    return payload if isinstance(payload, dict) else None


def body_not_object():
    return error_response(ErrorKind.VALIDATION, "Request body must be a JSON object")


def respond(result: Result, render: Callable[[Any], Any] | None = None, status: int = 200):
    """
    200/201 with render(value) on success; the mapped status with
    {"error", "kind"} on failure.
    """
    if not result.ok:
        return error_response(result.error.kind, result.error.message, result.error.details)
    body = render(result.value) if render else result.value
    return jsonify(body), status


def render_list(key: str):
    """Render a list of models as {key: [to_dict(), ...]}."""
    def _render(items):
        return {key: [item.to_dict() for item in items]}
    return _render


def render_one(key: str):
    def _render(item):
        return {key: item.to_dict()}
    return _render
