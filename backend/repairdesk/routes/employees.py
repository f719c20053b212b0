# backend/repairdesk/routes/employees.py
from flask import Blueprint, request

from ..decorators import require_auth
from ..responses import respond
from ..services import employee_service
from ..services.tenant_service import current_context


employees_bp = Blueprint("employees", __name__, url_prefix="/api/employees")


@employees_bp.post("")
@require_auth
def create_employee_route():
    """Body: name, pin (4-8 chars), role"""
    result = employee_service.create_employee(current_context(), request.get_json(silent=True))
    return respond(result, lambda employee: {"employee": employee.to_summary()}, status=201)


@employees_bp.get("")
@require_auth
def list_employees_route():
    result = employee_service.list_employees(current_context())
    return respond(result, lambda employees: {"employees": [e.to_summary() for e in employees]})


@employees_bp.delete("/<int:employee_id>")
@require_auth
def delete_employee_route(employee_id: int):
    result = employee_service.delete_employee(current_context(), employee_id)
    return respond(result, lambda employee: {"deleted": employee.id})
