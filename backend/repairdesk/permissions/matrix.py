# Overview: Declarative role -> action grants. The only place roles are checked.

from .actions import Action
from .roles import ALL_ROLES, Role

OWNER_ONLY = frozenset({Role.OWNER})
MANAGEMENT = frozenset({Role.OWNER, Role.MANAGER})
WORKSHOP = frozenset({Role.OWNER, Role.MANAGER, Role.TECHNICIAN})
FRONT_DESK = frozenset({Role.OWNER, Role.MANAGER, Role.CASHIER})
STAFF = frozenset({Role.OWNER, Role.MANAGER, Role.TECHNICIAN, Role.CASHIER})


ROLE_ACTION_MATRIX: dict[Action, frozenset[Role]] = {
    Action.READ_CATEGORY: ALL_ROLES,
    Action.CREATE_CATEGORY: MANAGEMENT,
    Action.UPDATE_CATEGORY: MANAGEMENT,
    Action.DELETE_CATEGORY: MANAGEMENT,

    Action.READ_STOCK_ITEM: ALL_ROLES,
    Action.CREATE_STOCK_ITEM: MANAGEMENT,
    Action.UPDATE_STOCK_ITEM: MANAGEMENT,
    Action.DELETE_STOCK_ITEM: MANAGEMENT,
    Action.ADJUST_STOCK_ITEM: MANAGEMENT,

    Action.READ_EMPLOYEE: ALL_ROLES,
    Action.CREATE_EMPLOYEE: MANAGEMENT,
    Action.DELETE_EMPLOYEE: MANAGEMENT,

    Action.READ_TICKET: ALL_ROLES,
    Action.CREATE_TICKET: ALL_ROLES,
    Action.UPDATE_TICKET: WORKSHOP,
    Action.ASSIGN_TECHNICIAN: WORKSHOP,
    Action.DELETE_TICKET: WORKSHOP,
    Action.FILTER_TICKETS_BY_TECHNICIAN: WORKSHOP,
    Action.READ_TICKET_NOTE: ALL_ROLES,
    Action.ADD_TICKET_NOTE: STAFF,

    Action.READ_CUSTOMER: ALL_ROLES,
    Action.CREATE_CUSTOMER: STAFF,
    Action.UPDATE_CUSTOMER: STAFF,

    Action.READ_SALE: ALL_ROLES,
    Action.CREATE_SALE: FRONT_DESK,
    Action.READ_REFUND: ALL_ROLES,
    Action.CREATE_REFUND: MANAGEMENT,

    Action.READ_STORE: ALL_ROLES,
    Action.CREATE_STORE: OWNER_ONLY,
    Action.UPDATE_STORE: OWNER_ONLY,
    Action.DELETE_STORE: OWNER_ONLY,

    Action.USE_TIME_CLOCK: ALL_ROLES,
    Action.READ_STORE_TIME_CLOCKS: MANAGEMENT,
}


def roles_for(action: Action) -> frozenset[Role]:
    """Roles granted an action; unknown actions grant nobody."""
    return ROLE_ACTION_MATRIX.get(action, frozenset())
