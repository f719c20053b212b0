from __future__ import annotations

from ..extensions import db
from ..money import money_str
from ..time_utils import to_utc_z, utcnow


TICKET_STATUSES = ("RECEIVED", "IN_PROGRESS", "AWAITING_PARTS", "READY", "COMPLETED", "CANCELLED")
TERMINAL_TICKET_STATUSES = frozenset({"COMPLETED", "CANCELLED"})

NOTE_VISIBILITIES = ("INTERNAL", "CUSTOMER")


class Ticket(db.Model):
    """
    Repair work order.

    status moves through the transition table in ticket_service.
    started_at / completed_at / cancelled_at are set the first time the
    matching status is entered and never overwritten afterwards.
    """
    __tablename__ = "tickets"
    __table_args__ = (
        db.Index("ix_tickets_store_status_created", "store_id", "status", "created_at"),
        db.Index("ix_tickets_store_technician", "store_id", "technician_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=True, index=True)
    technician_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True)

    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)

    # RECEIVED, IN_PROGRESS, AWAITING_PARTS, READY, COMPLETED, CANCELLED
    status = db.Column(db.String(16), nullable=False, default="RECEIVED")

    estimated_cost = db.Column(db.Numeric(12, 2), nullable=True)
    subtotal = db.Column(db.Numeric(12, 2), nullable=True)
    tax = db.Column(db.Numeric(12, 2), nullable=True)
    total = db.Column(db.Numeric(12, 2), nullable=True)

    scheduled_at = db.Column(db.DateTime(timezone=True), nullable=True)
    started_at = db.Column(db.DateTime(timezone=True), nullable=True)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    cancelled_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )

    customer = db.relationship("Customer", backref=db.backref("tickets", lazy=True))
    technician = db.relationship("Employee", foreign_keys=[technician_id])

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_TICKET_STATUSES

    def __repr__(self) -> str:
        return f"<Ticket id={self.id} status={self.status} store_id={self.store_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "customer_id": self.customer_id,
            "customer": self.customer.to_dict() if self.customer else None,
            "technician_id": self.technician_id,
            "technician": self.technician.to_summary() if self.technician else None,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "estimated_cost": money_str(self.estimated_cost),
            "subtotal": money_str(self.subtotal),
            "tax": money_str(self.tax),
            "total": money_str(self.total),
            "scheduled_at": to_utc_z(self.scheduled_at),
            "started_at": to_utc_z(self.started_at),
            "completed_at": to_utc_z(self.completed_at),
            "cancelled_at": to_utc_z(self.cancelled_at),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class TicketNote(db.Model):
    """
    Immutable annotation on a ticket. No update or delete path exists.

    visibility is INTERNAL or CUSTOMER; CUSTOMER is a hint for outward-facing
    presentation only.
    """
    __tablename__ = "ticket_notes"
    __table_args__ = (
        db.Index("ix_ticket_notes_ticket_created", "ticket_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    ticket_id = db.Column(db.Integer, db.ForeignKey("tickets.id"), nullable=False, index=True)
    author_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False)

    body = db.Column(db.Text, nullable=False)
    visibility = db.Column(db.String(16), nullable=False, default="INTERNAL")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    ticket = db.relationship("Ticket", backref=db.backref("notes", lazy=True))
    author = db.relationship("Employee")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ticket_id": self.ticket_id,
            "author_id": self.author_id,
            "author": self.author.to_summary() if self.author else None,
            "body": self.body,
            "visibility": self.visibility,
            "created_at": to_utc_z(self.created_at),
        }
