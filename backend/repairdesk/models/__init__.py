# Overview: Model package; importing it registers every table on db.metadata.

from .tenancy import Owner, Store, DEFAULT_STORE_TIMEZONE
from .auth import Employee, SessionToken
from .security import SecurityEvent
from .customers import Customer
from .tickets import Ticket, TicketNote, TICKET_STATUSES, TERMINAL_TICKET_STATUSES, NOTE_VISIBILITIES
from .inventory import Category, StockItem, StockMovement, MOVEMENT_REASONS
from .sales import Sale, Refund, PAYMENT_STATUSES
from .timekeeping import TimeClock

__all__ = [
    "Owner",
    "Store",
    "DEFAULT_STORE_TIMEZONE",
    "Employee",
    "SessionToken",
    "SecurityEvent",
    "Customer",
    "Ticket",
    "TicketNote",
    "TICKET_STATUSES",
    "TERMINAL_TICKET_STATUSES",
    "NOTE_VISIBILITIES",
    "Category",
    "StockItem",
    "StockMovement",
    "MOVEMENT_REASONS",
    "Sale",
    "Refund",
    "PAYMENT_STATUSES",
    "TimeClock",
]
