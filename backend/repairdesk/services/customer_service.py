# Overview: Store-scoped customer records referenced by tickets and sales.

from __future__ import annotations

from ..extensions import db
from ..models import Customer
from ..permissions import Action
from ..validation import ModelValidationPolicy, validate_payload
from .permission_service import require
from .results import service_operation
from .tenant_service import TenantContext, get_scoped


CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields={"first_name", "last_name", "email", "phone"},
    required_on_create={"first_name"},
)


@service_operation
def create_customer(context: TenantContext, payload: dict) -> Customer:
    require(context, Action.CREATE_CUSTOMER, context.store_id, resource="Customer")
    patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=False)
    customer = Customer(store_id=context.store_id, **patch)
    db.session.add(customer)
    db.session.commit()
    return customer


@service_operation
def list_customers(context: TenantContext, search: str | None = None) -> list[Customer]:
    require(context, Action.READ_CUSTOMER, context.store_id, resource="Customer")
    query = db.session.query(Customer).filter(Customer.store_id == context.store_id)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            db.or_(
                Customer.first_name.ilike(pattern),
                Customer.last_name.ilike(pattern),
                Customer.email.ilike(pattern),
                Customer.phone.ilike(pattern),
            )
        )
    return query.order_by(Customer.last_name.asc(), Customer.first_name.asc(), Customer.id.asc()).all()


@service_operation
def get_customer(context: TenantContext, customer_id: int) -> Customer:
    return get_scoped(context, Customer, customer_id, Action.READ_CUSTOMER, label="Customer")


@service_operation
def update_customer(context: TenantContext, customer_id: int, payload: dict) -> Customer:
    customer = get_scoped(context, Customer, customer_id, Action.UPDATE_CUSTOMER, label="Customer")
    patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=True)
    for key, value in patch.items():
        setattr(customer, key, value)
    db.session.commit()
    return customer
