from __future__ import annotations

from ..extensions import db
from ..money import money_str
from ..time_utils import to_utc_z, utcnow


PAYMENT_STATUSES = ("PENDING", "AUTHORIZED", "PAID", "REFUNDED", "VOID")


class Sale(db.Model):
    """
    Completed transaction, optionally tied to a ticket and/or customer.

    payment_status flips to REFUNDED when its (single) refund is recorded.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_store_created", "store_id", "created_at"),
        db.Index("ix_sales_store_ticket", "store_id", "ticket_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    ticket_id = db.Column(db.Integer, db.ForeignKey("tickets.id"), nullable=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=True)
    created_by_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False)

    subtotal = db.Column(db.Numeric(12, 2), nullable=False)
    tax = db.Column(db.Numeric(12, 2), nullable=False)
    total = db.Column(db.Numeric(12, 2), nullable=False)

    # PENDING, AUTHORIZED, PAID, REFUNDED, VOID
    payment_status = db.Column(db.String(16), nullable=False, default="PAID", index=True)
    reference = db.Column(db.String(128), nullable=True)
    paid_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )

    ticket = db.relationship("Ticket", backref=db.backref("sales", lazy=True))
    customer = db.relationship("Customer")
    created_by = db.relationship("Employee")

    def __repr__(self) -> str:
        return f"<Sale id={self.id} total={self.total} status={self.payment_status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "ticket_id": self.ticket_id,
            "customer_id": self.customer_id,
            "created_by_id": self.created_by_id,
            "subtotal": money_str(self.subtotal),
            "tax": money_str(self.tax),
            "total": money_str(self.total),
            "payment_status": self.payment_status,
            "reference": self.reference,
            "paid_at": to_utc_z(self.paid_at),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Refund(db.Model):
    """
    Reversal of exactly one sale. sale_id is unique: at most one refund per sale.
    """
    __tablename__ = "refunds"
    __table_args__ = (
        db.UniqueConstraint("sale_id", name="uq_refunds_sale"),
        db.Index("ix_refunds_store_refunded", "store_id", "refunded_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False)
    refunded_by_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False)

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    reason = db.Column(db.Text, nullable=True)

    refunded_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    sale = db.relationship("Sale", backref=db.backref("refund", uselist=False, lazy=True))
    refunded_by = db.relationship("Employee")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "sale_id": self.sale_id,
            "refunded_by_id": self.refunded_by_id,
            "refunded_by": self.refunded_by.to_summary() if self.refunded_by else None,
            "amount": money_str(self.amount),
            "reason": self.reason,
            "refunded_at": to_utc_z(self.refunded_at),
        }
