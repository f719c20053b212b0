# Overview: Authorization policy package.
# Re-exports the role/action enums, the grant table, and the decision function.

from .roles import Role, ALL_ROLES, ROLE_VALUES
from .actions import Action, ACTION_DEFINITIONS
from .matrix import ROLE_ACTION_MATRIX, roles_for
from .policy import Decision, authorize

__all__ = [
    "Role",
    "ALL_ROLES",
    "ROLE_VALUES",
    "Action",
    "ACTION_DEFINITIONS",
    "ROLE_ACTION_MATRIX",
    "roles_for",
    "Decision",
    "authorize",
]
