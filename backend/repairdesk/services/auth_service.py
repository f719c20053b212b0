# Overview: PIN hashing, store registration, and PIN login.

"""
Authentication

Employees log in with their store's email plus a 4-8 character PIN. PINs
are bcrypt-hashed (cost from BCRYPT_ROUNDS); because the hash is salted,
login and the per-store PIN uniqueness check compare the PIN against every
active employee hash of the store.
"""

from __future__ import annotations

import bcrypt
from flask import current_app

from ..errors import AuthenticationFailed, ConflictError, NotFound, ValidationError
from ..extensions import db
from ..models import Employee, Owner, Store, DEFAULT_STORE_TIMEZONE
from ..permissions import Role
from ..validation import enforce_rules_pin
from .permission_service import log_security_event
from .results import service_operation
from .session_service import create_session, revoke_session


def hash_pin(pin: str) -> str:
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    hashed = bcrypt.hashpw(pin.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_pin(pin: str, pin_hash: str) -> bool:
    try:
        return bcrypt.checkpw(pin.encode("utf-8"), pin_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash never matches
        return False


def find_employee_by_pin(store_id: int, pin: str) -> Employee | None:
    employees = db.session.query(Employee).filter_by(store_id=store_id, is_active=True).all()
    for employee in employees:
        if verify_pin(pin, employee.pin_hash):
            return employee
    return None


def _required_text(payload: dict, key: str, max_length: int) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{key} is required")
    value = value.strip()
    if len(value) > max_length:
        raise ValidationError(f"{key} exceeds max length {max_length}")
    return value


def _optional_text(payload: dict, key: str, max_length: int) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    value = value.strip()
    if len(value) > max_length:
        raise ValidationError(f"{key} exceeds max length {max_length}")
    return value or None


def _normalize_email(value: str) -> str:
    if "@" not in value:
        raise ValidationError("store_email must be an email address")
    return value.lower()


def _session_payload(employee: Employee, store: Store, token: str) -> dict:
    return {
        "token": token,
        "store": {"id": store.id, "name": store.name, "store_email": store.store_email},
        "employee": employee.to_summary(),
    }


@service_operation
def register_store(
    payload: dict,
    *,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> dict:
    """
    Create owner account, store, and OWNER employee; log the owner in.

    payload: owner_name, store_name, store_email, pin, [store_phone], [notification_email]
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    owner_name = _required_text(payload, "owner_name", 120)
    store_name = _required_text(payload, "store_name", 120)
    store_email = _normalize_email(_required_text(payload, "store_email", 255))
    pin = enforce_rules_pin(payload.get("pin"))
    store_phone = _optional_text(payload, "store_phone", 32)
    notification_email = _optional_text(payload, "notification_email", 255)

    if db.session.query(Store).filter_by(store_email=store_email).first():
        raise ConflictError("Store email is already in use")
    if db.session.query(Owner).filter_by(email=store_email).first():
        raise ConflictError("Email is already registered")

    pin_hash = hash_pin(pin)

    owner = Owner(email=store_email, password_hash=pin_hash)
    db.session.add(owner)
    db.session.flush()

    store = Store(
        owner_id=owner.id,
        name=store_name,
        store_email=store_email,
        store_phone=store_phone,
        notification_email=notification_email or store_email,
        timezone=DEFAULT_STORE_TIMEZONE,
    )
    db.session.add(store)
    db.session.flush()

    employee = Employee(store_id=store.id, name=owner_name, pin_hash=pin_hash, role=Role.OWNER.value)
    db.session.add(employee)
    db.session.flush()

    _, token = create_session(employee, user_agent=user_agent, ip_address=ip_address)
    db.session.commit()

    current_app.logger.info("Registered store %s (id=%s)", store.name, store.id)
    return _session_payload(employee, store, token)


@service_operation
def pin_login(
    store_email,
    pin,
    *,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> dict:
    if not isinstance(store_email, str) or not store_email.strip():
        raise ValidationError("store_email is required")
    if not isinstance(pin, str) or not pin.strip():
        raise ValidationError("pin is required")
    # Same normalisation as when the PIN was set
    pin = enforce_rules_pin(pin)

    store = db.session.query(Store).filter_by(store_email=store_email.strip().lower()).first()
    if store is None:
        raise NotFound("Store not found")

    employee = find_employee_by_pin(store.id, pin)
    if employee is None:
        log_security_event(
            employee_id=None,
            event_type="LOGIN_FAILED",
            success=False,
            resource="/api/auth/pin-login",
            action="PIN_LOGIN",
            reason="PIN did not match any active employee",
            store_id=store.id,
        )
        raise AuthenticationFailed("Invalid PIN")

    _, token = create_session(employee, user_agent=user_agent, ip_address=ip_address)
    db.session.commit()

    current_app.logger.info("Employee %s logged in to store %s", employee.id, store.id)
    return _session_payload(employee, store, token)


@service_operation
def logout(token: str) -> bool:
    return revoke_session(token, reason="Logout")
