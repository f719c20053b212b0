# Overview: Recording completed sales, optionally tied to a ticket and/or customer.

from __future__ import annotations

from ..errors import ValidationError
from ..extensions import db
from ..models import Customer, Sale, Ticket, PAYMENT_STATUSES
from ..permissions import Action
from ..time_utils import utcnow
from ..validation import (
    ModelValidationPolicy,
    coerce_int,
    enforce_non_negative_amounts,
    validate_payload,
)
from .permission_service import require
from .results import service_operation
from .tenant_service import TenantContext, find_in_store, get_scoped


SALE_POLICY = ModelValidationPolicy(
    writable_fields={"ticket_id", "customer_id", "subtotal", "tax", "total", "payment_status", "reference"},
    required_on_create={"subtotal", "tax", "total"},
    # REFUNDED is only ever reached through a refund
    choices={"payment_status": set(PAYMENT_STATUSES) - {"REFUNDED"}},
)


@service_operation
def create_sale(context: TenantContext, payload: dict) -> Sale:
    """
    Record a sale. payment_status defaults to PAID, and PAID sales get
    paid_at stamped. Ticket and customer references must be in the store.
    """
    require(context, Action.CREATE_SALE, context.store_id, resource="Sale")

    patch = validate_payload(model=Sale, payload=payload, policy=SALE_POLICY, partial=False)
    enforce_non_negative_amounts(patch, ("subtotal", "tax", "total"))

    if patch.get("ticket_id") is not None and find_in_store(Ticket, patch["ticket_id"], context.store_id) is None:
        raise ValidationError("Ticket not found in this store")
    if patch.get("customer_id") is not None and find_in_store(Customer, patch["customer_id"], context.store_id) is None:
        raise ValidationError("Customer not found in this store")

    payment_status = patch.pop("payment_status", None) or "PAID"

    sale = Sale(
        store_id=context.store_id,
        created_by_id=context.actor_id,
        payment_status=payment_status,
        paid_at=utcnow() if payment_status == "PAID" else None,
        **patch,
    )
    db.session.add(sale)
    db.session.commit()
    return sale


@service_operation
def list_sales(context: TenantContext, *, ticket_id=None) -> list[Sale]:
    require(context, Action.READ_SALE, context.store_id, resource="Sale")
    query = db.session.query(Sale).filter(Sale.store_id == context.store_id)
    if ticket_id not in (None, ""):
        query = query.filter(Sale.ticket_id == coerce_int("ticket_id", ticket_id))
    return query.order_by(Sale.created_at.desc(), Sale.id.desc()).all()


@service_operation
def get_sale(context: TenantContext, sale_id: int) -> Sale:
    return get_scoped(context, Sale, sale_id, Action.READ_SALE, label="Sale")


@service_operation
def list_sales_for_ticket(context: TenantContext, ticket_id: int) -> list[Sale]:
    ticket = get_scoped(context, Ticket, ticket_id, Action.READ_SALE, label="Ticket")
    return (
        db.session.query(Sale)
        .filter(Sale.store_id == ticket.store_id, Sale.ticket_id == ticket.id)
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .all()
    )
