from __future__ import annotations

from ..extensions import db
from ..money import money_str
from ..time_utils import to_utc_z, utcnow


class TimeClock(db.Model):
    """
    One shift for one employee. An entry with clock_out_at NULL is open;
    at most one open entry exists per employee per store.
    """
    __tablename__ = "time_clocks"
    __table_args__ = (
        db.Index("ix_time_clocks_employee_open", "employee_id", "store_id", "clock_out_at"),
        db.Index("ix_time_clocks_store_clock_in", "store_id", "clock_in_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False, index=True)

    clock_in_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    clock_out_at = db.Column(db.DateTime(timezone=True), nullable=True)
    total_hours = db.Column(db.Numeric(8, 2), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )

    employee = db.relationship("Employee", backref=db.backref("time_clocks", lazy=True))

    @property
    def is_open(self) -> bool:
        return self.clock_out_at is None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "employee_id": self.employee_id,
            "employee": self.employee.to_summary() if self.employee else None,
            "clock_in_at": to_utc_z(self.clock_in_at),
            "clock_out_at": to_utc_z(self.clock_out_at),
            "total_hours": money_str(self.total_hours),
            "notes": self.notes,
        }
