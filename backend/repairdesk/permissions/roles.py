# Overview: Fixed employee role enumeration.

from enum import Enum


class Role(str, Enum):
    OWNER = "OWNER"
    MANAGER = "MANAGER"
    TECHNICIAN = "TECHNICIAN"
    CASHIER = "CASHIER"
    VIEWER = "VIEWER"


ALL_ROLES = frozenset(Role)
ROLE_VALUES = {r.value for r in Role}
