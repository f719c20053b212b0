# Overview: Pure authorization decision: (context, action, target store) -> Decision.

"""
Authorization Policy

The tenant check runs before the role check: a request against another
store is denied for every role and marked `conceal` so the caller reports
it exactly like a missing record. Anything without an explicit grant in
ROLE_ACTION_MATRIX is denied.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .actions import Action
from .matrix import roles_for
from .roles import Role

if TYPE_CHECKING:
    from ..services.tenant_service import TenantContext


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str | None = None
    conceal: bool = False

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(allowed=True)


def deny(reason: str, *, conceal: bool = False) -> Decision:
    return Decision(allowed=False, reason=reason, conceal=conceal)


def authorize(context: "TenantContext", action: Action, target_store_id: int | None) -> Decision:
    if context is None or context.store_id is None:
        return deny("Missing tenant context")

    if target_store_id is None or context.store_id != target_store_id:
        return deny("Resource belongs to another store", conceal=True)

    try:
        role = Role(context.role)
    except ValueError:
        return deny(f"Unknown role: {context.role}")

    try:
        action = Action(action)
    except ValueError:
        return deny(f"Unknown action: {action}")

    if role not in roles_for(action):
        return deny(f"Role {role.value} is not permitted to {action.value}")

    return ALLOW
