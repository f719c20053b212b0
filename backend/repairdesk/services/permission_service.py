# Overview: Enforcement of the authorization policy plus the security event log.

"""
Permission Enforcement and Security Event Logging

require() is the single enforcement point every service calls before it
mutates or returns data. Denials are written to security_events and raised
as the matching OperationError:

- cross-store target  -> CROSS_TENANT_ACCESS_DENIED, raised as NotFound
- role lacks action   -> PERMISSION_DENIED, raised as AuthorizationDenied

Grants are not logged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from flask import current_app, has_request_context, request

from ..errors import AuthorizationDenied, NotFound
from ..extensions import db
from ..models import SecurityEvent
from ..permissions import Action, authorize
from ..time_utils import utcnow

if TYPE_CHECKING:
    from .tenant_service import TenantContext


def log_security_event(
    employee_id: int | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
    store_id: int | None = None,
) -> SecurityEvent:
    """
    Append a security event and commit it immediately, so the record
    survives the rollback of the operation that was denied.

    event_type examples:
    - PERMISSION_DENIED
    - CROSS_TENANT_ACCESS_DENIED
    - LOGIN_FAILED
    """
    ip_address = None
    user_agent = None
    if has_request_context():
        ip_address = request.remote_addr
        user_agent = request.headers.get("User-Agent")

    event = SecurityEvent(
        employee_id=employee_id,
        store_id=store_id,
        event_type=event_type,
        resource=resource,
        action=action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
        occurred_at=utcnow(),
    )

    db.session.add(event)
    db.session.commit()

    return event


def require(
    context: "TenantContext",
    action: Action,
    target_store_id: int | None,
    *,
    resource: str = "Resource",
) -> None:
    decision = authorize(context, action, target_store_id)
    if decision.allowed:
        return

    actor_id = context.actor_id if context else None
    store_id = context.store_id if context else None
    action_code = Action(action).value

    if decision.conceal:
        log_security_event(
            employee_id=actor_id,
            event_type="CROSS_TENANT_ACCESS_DENIED",
            success=False,
            resource=resource,
            action=action_code,
            reason=f"Target store {target_store_id} outside session store {store_id}",
            store_id=store_id,
        )
        current_app.logger.warning(
            "Cross-tenant access denied: employee=%s store=%s action=%s",
            actor_id, store_id, action_code,
        )
        raise NotFound(f"{resource} not found")

    log_security_event(
        employee_id=actor_id,
        event_type="PERMISSION_DENIED",
        success=False,
        resource=resource,
        action=action_code,
        reason=decision.reason,
        store_id=store_id,
    )
    current_app.logger.warning(
        "Permission denied: employee=%s store=%s action=%s",
        actor_id, store_id, action_code,
    )
    raise AuthorizationDenied(decision.reason or "Permission denied")
