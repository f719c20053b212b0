# Overview: Refunds: at most one per sale, flipping the sale to REFUNDED.

"""
Refunds

The sale row is locked while the refund is written so two concurrent
refunds cannot both see a PAID sale; the unique constraint on
refunds.sale_id backs this up. A failed attempt leaves the sale untouched.
"""

from __future__ import annotations

from ..errors import ConflictError, ValidationError
from ..extensions import db
from ..models import Refund, Sale
from ..permissions import Action
from ..time_utils import utcnow
from ..validation import coerce_decimal, coerce_int, enforce_rules_refund_amount
from .concurrency import lock_for_update, run_with_retry
from .permission_service import require
from .results import service_operation
from .tenant_service import TenantContext, get_scoped


@service_operation
def create_refund(context: TenantContext, payload: dict) -> Refund:
    """payload: sale_id, amount, [reason]"""
    require(context, Action.CREATE_REFUND, context.store_id, resource="Refund")

    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    if payload.get("sale_id") is None:
        raise ValidationError("sale_id is required")
    if payload.get("amount") is None:
        raise ValidationError("amount is required")

    sale_id = coerce_int("sale_id", payload["sale_id"])
    amount = coerce_decimal("amount", payload["amount"])

    reason = payload.get("reason")
    if reason is not None:
        if not isinstance(reason, str):
            raise ValidationError("reason must be a string")
        reason = reason.strip() or None

    def _op():
        sale = lock_for_update(
            db.session.query(Sale).filter(Sale.id == sale_id, Sale.store_id == context.store_id)
        ).first()
        if sale is None:
            raise ValidationError("Sale not found in this store")

        if sale.payment_status == "REFUNDED":
            raise ConflictError("Sale has already been refunded")

        enforce_rules_refund_amount(amount, sale.total)

        now = utcnow()
        refund = Refund(
            store_id=sale.store_id,
            sale_id=sale.id,
            refunded_by_id=context.actor_id,
            amount=amount,
            reason=reason,
            refunded_at=now,
        )
        sale.payment_status = "REFUNDED"
        db.session.add(refund)
        db.session.commit()
        return refund

    return run_with_retry(_op)


@service_operation
def list_refunds(context: TenantContext) -> list[Refund]:
    require(context, Action.READ_REFUND, context.store_id, resource="Refund")
    return (
        db.session.query(Refund)
        .filter(Refund.store_id == context.store_id)
        .order_by(Refund.refunded_at.desc(), Refund.id.desc())
        .all()
    )


@service_operation
def get_refund(context: TenantContext, refund_id: int) -> Refund:
    return get_scoped(context, Refund, refund_id, Action.READ_REFUND, label="Refund")
