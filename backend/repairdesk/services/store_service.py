# Overview: Store (tenant) management for OWNER employees.

"""
Stores

An OWNER can open further stores under the same owner account. Reads and
writes only ever reach the caller's own store: any other id, including
sibling stores of the same owner, is reported as not found.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy import or_

from ..errors import ConflictError, ValidationError
from ..extensions import db
from ..models import (
    Category,
    Customer,
    Employee,
    Refund,
    Sale,
    SecurityEvent,
    SessionToken,
    StockItem,
    StockMovement,
    Store,
    Ticket,
    TicketNote,
    TimeClock,
    DEFAULT_STORE_TIMEZONE,
)
from ..permissions import Action, Role
from ..time_utils import utcnow
from ..validation import ModelValidationPolicy, validate_payload
from .permission_service import require
from .results import service_operation
from .tenant_service import TenantContext, get_scoped


STORE_CREATE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "store_email", "store_phone", "notification_email", "timezone"},
    required_on_create={"name", "store_email"},
)

STORE_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "store_phone", "notification_email", "timezone"},
)


@service_operation
def create_store(context: TenantContext, payload: dict) -> Store:
    """
    New store owned by the same owner account as the caller's store.

    The calling OWNER employee's PIN seeds an OWNER employee in the new
    store so the owner can log in there.
    """
    require(context, Action.CREATE_STORE, context.store_id, resource="Store")

    patch = validate_payload(model=Store, payload=payload, policy=STORE_CREATE_POLICY, partial=False)
    patch["store_email"] = patch["store_email"].lower()
    if "@" not in patch["store_email"]:
        raise ValidationError("store_email must be an email address")

    if db.session.query(Store).filter_by(store_email=patch["store_email"]).first():
        raise ConflictError("Store email is already in use")

    current_store = db.session.get(Store, context.store_id)
    actor = db.session.get(Employee, context.actor_id)

    store = Store(
        owner_id=current_store.owner_id,
        name=patch["name"],
        store_email=patch["store_email"],
        store_phone=patch.get("store_phone"),
        notification_email=patch.get("notification_email") or patch["store_email"],
        timezone=patch.get("timezone") or DEFAULT_STORE_TIMEZONE,
    )
    db.session.add(store)
    db.session.flush()

    db.session.add(Employee(store_id=store.id, name=actor.name, pin_hash=actor.pin_hash, role=Role.OWNER.value))
    db.session.commit()

    current_app.logger.info("Store %s created by employee %s", store.id, context.actor_id)
    return store


@service_operation
def list_stores(context: TenantContext) -> list[Store]:
    require(context, Action.READ_STORE, context.store_id, resource="Store")
    return db.session.query(Store).filter(Store.id == context.store_id).all()


@service_operation
def get_store(context: TenantContext, store_id: int) -> Store:
    return get_scoped(context, Store, store_id, Action.READ_STORE, label="Store")


@service_operation
def update_store(context: TenantContext, store_id: int, payload: dict) -> Store:
    store = get_scoped(context, Store, store_id, Action.UPDATE_STORE, label="Store")
    patch = validate_payload(model=Store, payload=payload, policy=STORE_UPDATE_POLICY, partial=True)
    for key, value in patch.items():
        setattr(store, key, value)
    db.session.commit()
    return store


@service_operation
def delete_store(context: TenantContext, store_id: int) -> int:
    """
    Delete the caller's store and every row scoped to it.

    Security events outlive the store: they are detached (store_id and
    employee_id cleared) and a STORE_DELETED event records the deletion.
    """
    store = get_scoped(context, Store, store_id, Action.DELETE_STORE, label="Store")
    sid = store.id

    employee_ids = db.session.query(Employee.id).filter(Employee.store_id == sid)
    detached = (
        db.session.query(SecurityEvent)
        .filter(or_(SecurityEvent.store_id == sid, SecurityEvent.employee_id.in_(employee_ids)))
        .update({"store_id": None, "employee_id": None}, synchronize_session=False)
    )

    ticket_ids = db.session.query(Ticket.id).filter(Ticket.store_id == sid)
    db.session.query(TicketNote).filter(TicketNote.ticket_id.in_(ticket_ids)).delete(synchronize_session=False)

    # Children before parents
    for model in (
        Refund,
        Sale,
        Ticket,
        StockMovement,
        StockItem,
        Category,
        Customer,
        TimeClock,
        SessionToken,
        Employee,
    ):
        db.session.query(model).filter(model.store_id == sid).delete(synchronize_session=False)

    db.session.add(SecurityEvent(
        store_id=None,
        employee_id=None,
        event_type="STORE_DELETED",
        resource="Store",
        action=Action.DELETE_STORE.value,
        success=True,
        reason=(
            f"Store {sid} ({store.name}) deleted by employee {context.actor_id}; "
            f"{detached} earlier event(s) detached"
        ),
        occurred_at=utcnow(),
    ))
    db.session.delete(store)
    db.session.commit()

    current_app.logger.info("Store %s deleted by employee %s", sid, context.actor_id)
    return sid
