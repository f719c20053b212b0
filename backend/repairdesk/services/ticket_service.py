# Overview: Ticket lifecycle state machine, technician assignment, and notes.

"""
Ticket Lifecycle

Status moves through TICKET_TRANSITIONS:

    RECEIVED -> IN_PROGRESS -> AWAITING_PARTS -> READY -> COMPLETED
    any non-terminal status -> CANCELLED

RECEIVED is only ever an initial status. Work may bounce between
IN_PROGRESS, AWAITING_PARTS and READY. COMPLETED and CANCELLED are terminal:
no outgoing transitions, and COMPLETED tickets cannot be deleted.

Entering IN_PROGRESS, COMPLETED or CANCELLED stamps started_at,
completed_at or cancelled_at the first time only. A transition to the
current status is a no-op and touches no timestamp.

Notes are append-only; there is no update or delete path.
"""

from __future__ import annotations

from datetime import datetime

from ..errors import ConflictError, ValidationError
from ..extensions import db
from ..models import (
    Customer,
    Employee,
    Sale,
    Ticket,
    TicketNote,
    NOTE_VISIBILITIES,
    TICKET_STATUSES,
    TERMINAL_TICKET_STATUSES,
)
from ..permissions import Action, authorize
from ..time_utils import utcnow
from ..validation import (
    ModelValidationPolicy,
    coerce_int,
    enforce_non_negative_amounts,
    validate_payload,
)
from .concurrency import run_with_retry
from .permission_service import require
from .results import service_operation
from .tenant_service import TenantContext, find_in_store, get_scoped


_WORK_STATES = {"IN_PROGRESS", "AWAITING_PARTS", "READY"}

TICKET_TRANSITIONS: dict[str, frozenset[str]] = {
    "RECEIVED": frozenset(_WORK_STATES | {"COMPLETED", "CANCELLED"}),
    "IN_PROGRESS": frozenset({"AWAITING_PARTS", "READY", "COMPLETED", "CANCELLED"}),
    "AWAITING_PARTS": frozenset({"IN_PROGRESS", "READY", "COMPLETED", "CANCELLED"}),
    "READY": frozenset({"IN_PROGRESS", "AWAITING_PARTS", "COMPLETED", "CANCELLED"}),
    "COMPLETED": frozenset(),
    "CANCELLED": frozenset(),
}

# Status -> timestamp column set on first entry
STATUS_TIMESTAMPS = {
    "IN_PROGRESS": "started_at",
    "COMPLETED": "completed_at",
    "CANCELLED": "cancelled_at",
}

MONEY_FIELDS = ("estimated_cost", "subtotal", "tax", "total")

TICKET_POLICY = ModelValidationPolicy(
    writable_fields={
        "title",
        "description",
        "customer_id",
        "technician_id",
        "status",
        "estimated_cost",
        "subtotal",
        "tax",
        "total",
        "scheduled_at",
    },
    required_on_create={"title"},
    choices={"status": set(TICKET_STATUSES)},
)


def validate_status(value) -> str:
    if value not in TICKET_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(TICKET_STATUSES)}")
    return value


def apply_transition(ticket: Ticket, new_status: str, now: datetime | None = None) -> bool:
    """
    Move `ticket` to `new_status` in memory. Returns False for the
    same-status no-op, True when the status changed.

    Raises ConflictError for a transition out of a terminal status or one
    missing from TICKET_TRANSITIONS.
    """
    new_status = validate_status(new_status)
    current = ticket.status

    if new_status == current:
        return False

    if current in TERMINAL_TICKET_STATUSES:
        raise ConflictError(f"Ticket is {current} and its status can no longer change")

    if new_status not in TICKET_TRANSITIONS.get(current, frozenset()):
        raise ConflictError(f"Cannot move ticket from {current} to {new_status}")

    ticket.status = new_status
    stamp = STATUS_TIMESTAMPS.get(new_status)
    if stamp and getattr(ticket, stamp) is None:
        setattr(ticket, stamp, now or utcnow())
    return True


def resolve_technician(store_id: int, technician_id) -> int | None:
    """
    Validate a technician reference from a request body. Empty clears.

    Missing, inactive, and other-store employees are all the same
    validation error.
    """
    if technician_id is None or technician_id == "":
        return None
    technician_id = coerce_int("technician_id", technician_id)
    technician = find_in_store(Employee, technician_id, store_id)
    if technician is None or not technician.is_active:
        raise ValidationError("Technician not found in this store")
    return technician.id


def resolve_customer(store_id: int, customer_id) -> int | None:
    if customer_id is None:
        return None
    if find_in_store(Customer, customer_id, store_id) is None:
        raise ValidationError("Customer not found in this store")
    return customer_id


def _load_ticket(context: TenantContext, ticket_id, action: Action, *, lock: bool = False) -> Ticket:
    return get_scoped(context, Ticket, ticket_id, action, label="Ticket", lock=lock)


@service_operation
def create_ticket(context: TenantContext, payload: dict) -> Ticket:
    """
    Open a ticket. Any role may create; supplying a technician also needs
    ASSIGN_TECHNICIAN. A ticket may start in any non-terminal status, and
    the entry timestamp for that status is stamped.
    """
    require(context, Action.CREATE_TICKET, context.store_id, resource="Ticket")

    raw_technician = payload.get("technician_id") if isinstance(payload, dict) else None
    if isinstance(payload, dict) and raw_technician == "":
        payload = {k: v for k, v in payload.items() if k != "technician_id"}
        raw_technician = None

    patch = validate_payload(model=Ticket, payload=payload, policy=TICKET_POLICY, partial=False)
    enforce_non_negative_amounts(patch, MONEY_FIELDS)

    status = patch.pop("status", None) or "RECEIVED"
    if status in TERMINAL_TICKET_STATUSES:
        raise ValidationError(f"A ticket cannot be created as {status}")

    if raw_technician is not None:
        require(context, Action.ASSIGN_TECHNICIAN, context.store_id, resource="Ticket")
        patch["technician_id"] = resolve_technician(context.store_id, patch.get("technician_id"))

    patch["customer_id"] = resolve_customer(context.store_id, patch.get("customer_id"))

    ticket = Ticket(store_id=context.store_id, status="RECEIVED", **patch)
    if status != "RECEIVED":
        apply_transition(ticket, status)

    db.session.add(ticket)
    db.session.commit()
    return ticket


@service_operation
def list_tickets(
    context: TenantContext,
    *,
    status: str | None = None,
    technician_id=None,
) -> list[Ticket]:
    """
    Newest first. The technician filter is honoured only for roles allowed
    to filter by technician; for other roles it is ignored.
    """
    require(context, Action.READ_TICKET, context.store_id, resource="Ticket")

    query = db.session.query(Ticket).filter(Ticket.store_id == context.store_id)

    if status:
        query = query.filter(Ticket.status == validate_status(status))

    if technician_id not in (None, ""):
        if authorize(context, Action.FILTER_TICKETS_BY_TECHNICIAN, context.store_id):
            query = query.filter(Ticket.technician_id == coerce_int("technician_id", technician_id))

    return query.order_by(Ticket.created_at.desc(), Ticket.id.desc()).all()


@service_operation
def get_ticket(context: TenantContext, ticket_id: int) -> Ticket:
    return _load_ticket(context, ticket_id, Action.READ_TICKET)


@service_operation
def update_ticket(context: TenantContext, ticket_id: int, payload: dict) -> Ticket:
    """
    Field edits, technician assignment, and status change in one
    transaction. Non-status fields stay editable on terminal tickets.
    """
    def _op():
        ticket = _load_ticket(context, ticket_id, Action.UPDATE_TICKET, lock=True)

        body = dict(payload) if isinstance(payload, dict) else payload
        assign = isinstance(body, dict) and "technician_id" in body
        raw_technician = body.pop("technician_id", None) if assign else None

        patch = validate_payload(model=Ticket, payload=body, policy=TICKET_POLICY, partial=True)
        enforce_non_negative_amounts(patch, MONEY_FIELDS)

        if assign:
            require(context, Action.ASSIGN_TECHNICIAN, ticket.store_id, resource="Ticket")
            ticket.technician_id = resolve_technician(ticket.store_id, raw_technician)

        if "customer_id" in patch:
            ticket.customer_id = resolve_customer(ticket.store_id, patch.pop("customer_id"))

        new_status = patch.pop("status", None)
        for key, value in patch.items():
            setattr(ticket, key, value)

        if new_status is not None:
            apply_transition(ticket, new_status)

        db.session.commit()
        return ticket

    return run_with_retry(_op)


@service_operation
def transition(context: TenantContext, ticket_id: int, new_status) -> Ticket:
    def _op():
        ticket = _load_ticket(context, ticket_id, Action.UPDATE_TICKET, lock=True)
        if apply_transition(ticket, new_status):
            db.session.commit()
        return ticket

    return run_with_retry(_op)


@service_operation
def assign_technician(context: TenantContext, ticket_id: int, technician_id) -> Ticket:
    ticket = _load_ticket(context, ticket_id, Action.ASSIGN_TECHNICIAN, lock=True)
    ticket.technician_id = resolve_technician(ticket.store_id, technician_id)
    db.session.commit()
    return ticket


@service_operation
def delete_ticket(context: TenantContext, ticket_id: int) -> int:
    """
    Order matters: tenant check, then the COMPLETED guard, then the role
    check. A COMPLETED ticket is a conflict for every role.
    """
    ticket = _load_ticket(context, ticket_id, Action.READ_TICKET, lock=True)

    if ticket.status == "COMPLETED":
        raise ConflictError("Cannot delete a completed ticket")

    require(context, Action.DELETE_TICKET, ticket.store_id, resource="Ticket")

    db.session.query(TicketNote).filter(TicketNote.ticket_id == ticket.id).delete(synchronize_session=False)
    # Sales outlive the ticket they were rung up against
    db.session.query(Sale).filter(Sale.ticket_id == ticket.id).update(
        {Sale.ticket_id: None}, synchronize_session=False
    )
    db.session.delete(ticket)
    db.session.commit()
    return ticket_id


# -- Notes --


@service_operation
def add_note(context: TenantContext, ticket_id: int, body, visibility=None) -> TicketNote:
    ticket = _load_ticket(context, ticket_id, Action.READ_TICKET)
    require(context, Action.ADD_TICKET_NOTE, ticket.store_id, resource="TicketNote")

    if not isinstance(body, str) or not body.strip():
        raise ValidationError("body is required")

    if visibility is None:
        visibility = "INTERNAL"
    if visibility not in NOTE_VISIBILITIES:
        raise ValidationError(f"visibility must be one of: {', '.join(NOTE_VISIBILITIES)}")

    note = TicketNote(
        ticket_id=ticket.id,
        author_id=context.actor_id,
        body=body.strip(),
        visibility=visibility,
    )
    db.session.add(note)
    db.session.commit()
    return note


@service_operation
def list_notes(context: TenantContext, ticket_id: int) -> list[TicketNote]:
    ticket = _load_ticket(context, ticket_id, Action.READ_TICKET_NOTE)
    return (
        db.session.query(TicketNote)
        .filter(TicketNote.ticket_id == ticket.id)
        .order_by(TicketNote.created_at.desc(), TicketNote.id.desc())
        .all()
    )
