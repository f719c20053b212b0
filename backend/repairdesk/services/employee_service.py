# Overview: Employee roster management.

from __future__ import annotations

from ..errors import AuthorizationDenied, ConflictError, NotFound, ValidationError
from ..extensions import db
from ..models import Employee
from ..permissions import Action, ROLE_VALUES, Role
from ..time_utils import utcnow
from ..validation import enforce_rules_pin
from .auth_service import find_employee_by_pin, hash_pin
from .permission_service import require
from .results import service_operation
from .session_service import revoke_employee_sessions
from .tenant_service import TenantContext


@service_operation
def create_employee(context: TenantContext, payload: dict) -> Employee:
    """
    Add an employee to the caller's store.

    The PIN must not match any active employee of the store, since login
    identifies the employee by PIN alone.
    """
    require(context, Action.CREATE_EMPLOYEE, context.store_id, resource="Employee")

    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    name = payload.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name is required")
    name = name.strip()
    if len(name) > 120:
        raise ValidationError("name exceeds max length 120")

    role = payload.get("role")
    if role not in ROLE_VALUES:
        raise ValidationError(f"role must be one of: {', '.join(sorted(ROLE_VALUES))}")

    pin = enforce_rules_pin(payload.get("pin"))

    if find_employee_by_pin(context.store_id, pin) is not None:
        raise ConflictError(
            "An employee with this PIN already exists in this store. Each employee must have a unique PIN."
        )

    employee = Employee(store_id=context.store_id, name=name, pin_hash=hash_pin(pin), role=role)
    db.session.add(employee)
    db.session.commit()
    return employee


@service_operation
def list_employees(context: TenantContext) -> list[Employee]:
    require(context, Action.READ_EMPLOYEE, context.store_id, resource="Employee")
    return (
        db.session.query(Employee)
        .filter(Employee.store_id == context.store_id, Employee.is_active.is_(True))
        .order_by(Employee.name.asc(), Employee.id.asc())
        .all()
    )


@service_operation
def delete_employee(context: TenantContext, employee_id: int) -> Employee:
    """Deactivate an employee and end their sessions. OWNER employees stay."""
    require(context, Action.DELETE_EMPLOYEE, context.store_id, resource="Employee")

    employee = (
        db.session.query(Employee)
        .filter(
            Employee.id == employee_id,
            Employee.store_id == context.store_id,
            Employee.is_active.is_(True),
        )
        .first()
    )
    if employee is None:
        raise NotFound("Employee not found")

    if employee.role == Role.OWNER.value:
        raise AuthorizationDenied("Cannot delete the store owner")

    employee.is_active = False
    employee.deactivated_at = utcnow()
    revoke_employee_sessions(employee.id, reason="Employee deactivated")
    db.session.commit()
    return employee
