from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


DEFAULT_STORE_TIMEZONE = "America/Chicago"


class Owner(db.Model):
    """
    Account that owns one or more stores.

    Created at registration with the store email as its login email and the
    registering PIN (bcrypt) as its credential. Additional stores created by
    an OWNER employee hang off the same owner account.
    """
    __tablename__ = "owners"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Owner id={self.id} email={self.email!r}>"


class Store(db.Model):
    """
    Tenant boundary.

    Every other row in the schema carries store_id, and every query is
    filtered by the store captured in the caller's session.
    """
    __tablename__ = "stores"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("owners.id"), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    store_email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    store_phone = db.Column(db.String(32), nullable=True)
    notification_email = db.Column(db.String(255), nullable=True)
    timezone = db.Column(db.String(64), nullable=False, default=DEFAULT_STORE_TIMEZONE)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )

    owner = db.relationship("Owner", backref=db.backref("stores", lazy=True))

    @property
    def store_id(self) -> int:
        # A store is its own tenant
        return self.id

    def __repr__(self) -> str:
        return f"<Store id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "store_email": self.store_email,
            "store_phone": self.store_phone,
            "notification_email": self.notification_email,
            "timezone": self.timezone,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
