# Overview: Employee time clock: one open shift per employee per store.

from __future__ import annotations

from decimal import Decimal

from ..errors import ConflictError, ValidationError
from ..extensions import db
from ..models import TimeClock
from ..permissions import Action
from ..time_utils import hours_between, utcnow
from ..validation import coerce_int
from .concurrency import lock_for_update
from .permission_service import require
from .results import service_operation
from .tenant_service import TenantContext


def _clean_notes(notes) -> str | None:
    if notes is None:
        return None
    if not isinstance(notes, str):
        raise ValidationError("notes must be a string")
    return notes.strip() or None


def _open_entry_query(context: TenantContext):
    return db.session.query(TimeClock).filter(
        TimeClock.employee_id == context.actor_id,
        TimeClock.store_id == context.store_id,
        TimeClock.clock_out_at.is_(None),
    )


@service_operation
def clock_in(context: TenantContext, notes=None) -> TimeClock:
    require(context, Action.USE_TIME_CLOCK, context.store_id, resource="Time clock")
    notes = _clean_notes(notes)

    if _open_entry_query(context).first() is not None:
        raise ConflictError("Already clocked in. Please clock out first.")

    entry = TimeClock(
        store_id=context.store_id,
        employee_id=context.actor_id,
        clock_in_at=utcnow(),
        notes=notes,
    )
    db.session.add(entry)
    db.session.commit()
    return entry


@service_operation
def clock_out(context: TenantContext, notes=None) -> TimeClock:
    require(context, Action.USE_TIME_CLOCK, context.store_id, resource="Time clock")
    notes = _clean_notes(notes)

    entry = lock_for_update(_open_entry_query(context)).first()
    if entry is None:
        raise ConflictError("Not clocked in")

    now = utcnow()
    entry.clock_out_at = now
    entry.total_hours = Decimal(str(hours_between(entry.clock_in_at, now)))
    if notes is not None:
        entry.notes = notes
    db.session.commit()
    return entry


@service_operation
def my_time_clocks(context: TenantContext) -> list[TimeClock]:
    require(context, Action.USE_TIME_CLOCK, context.store_id, resource="Time clock")
    return (
        db.session.query(TimeClock)
        .filter(TimeClock.employee_id == context.actor_id, TimeClock.store_id == context.store_id)
        .order_by(TimeClock.clock_in_at.desc(), TimeClock.id.desc())
        .all()
    )


@service_operation
def active_time_clock(context: TenantContext) -> TimeClock | None:
    require(context, Action.USE_TIME_CLOCK, context.store_id, resource="Time clock")
    return _open_entry_query(context).first()


@service_operation
def list_store_time_clocks(context: TenantContext, *, employee_id=None) -> list[TimeClock]:
    require(context, Action.READ_STORE_TIME_CLOCKS, context.store_id, resource="Time clock")
    query = db.session.query(TimeClock).filter(TimeClock.store_id == context.store_id)
    if employee_id not in (None, ""):
        query = query.filter(TimeClock.employee_id == coerce_int("employee_id", employee_id))
    return query.order_by(TimeClock.clock_in_at.desc(), TimeClock.id.desc()).all()
