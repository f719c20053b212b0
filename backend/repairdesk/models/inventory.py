from __future__ import annotations

from ..extensions import db
from ..money import money_str
from ..time_utils import to_utc_z, utcnow


MOVEMENT_REASONS = ("SALE", "PURCHASE", "ADJUSTMENT", "RETURN", "TRANSFER", "RESERVATION", "RELEASE")


class Category(db.Model):
    __tablename__ = "categories"
    __table_args__ = (
        db.UniqueConstraint("store_id", "name", name="uq_categories_store_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Category id={self.id} name={self.name!r} store_id={self.store_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "name": self.name,
            "description": self.description,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class StockItem(db.Model):
    """
    Store-scoped stock record.

    SKU is unique within a store. quantity_on_hand is a materialized
    projection of the ledger:

        initial_quantity + sum(stock_movements.quantity_change) == quantity_on_hand

    It is only ever changed by inventory_service.adjust_stock, in the same
    transaction that appends the movement. version_id guards the
    read-modify-write against lost updates.
    """
    __tablename__ = "stock_items"
    __table_args__ = (
        db.UniqueConstraint("store_id", "sku", name="uq_stock_items_store_sku"),
        db.Index("ix_stock_items_store_name", "store_id", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False, index=True)

    sku = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    unit_cost = db.Column(db.Numeric(12, 2), nullable=True)
    unit_price = db.Column(db.Numeric(12, 2), nullable=True)

    # Advisory only: drives is_low_stock, never triggers reordering
    reorder_point = db.Column(db.Integer, nullable=True)

    # Opening balance; never changes after creation
    initial_quantity = db.Column(db.Integer, nullable=False, default=0)
    quantity_on_hand = db.Column(db.Integer, nullable=False, default=0)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )

    category = db.relationship("Category", backref=db.backref("stock_items", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def is_low_stock(self) -> bool:
        return self.reorder_point is not None and self.quantity_on_hand <= self.reorder_point

    def __repr__(self) -> str:
        return f"<StockItem id={self.id} sku={self.sku!r} qoh={self.quantity_on_hand} store_id={self.store_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "category_id": self.category_id,
            "category": {"id": self.category.id, "name": self.category.name} if self.category else None,
            "sku": self.sku,
            "name": self.name,
            "description": self.description,
            "unit_cost": money_str(self.unit_cost),
            "unit_price": money_str(self.unit_price),
            "reorder_point": self.reorder_point,
            "initial_quantity": self.initial_quantity,
            "quantity_on_hand": self.quantity_on_hand,
            "is_low_stock": self.is_low_stock,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class StockMovement(db.Model):
    """
    Immutable ledger entry. Rows are only ever inserted.

    reason: SALE, PURCHASE, ADJUSTMENT, RETURN, TRANSFER, RESERVATION, RELEASE
    """
    __tablename__ = "stock_movements"
    __table_args__ = (
        db.Index("ix_stock_movements_item_created", "stock_item_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    stock_item_id = db.Column(db.Integer, db.ForeignKey("stock_items.id"), nullable=False, index=True)
    actor_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True)

    quantity_change = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.String(16), nullable=False, default="ADJUSTMENT")
    note = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    stock_item = db.relationship("StockItem", backref=db.backref("movements", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "stock_item_id": self.stock_item_id,
            "actor_id": self.actor_id,
            "quantity_change": self.quantity_change,
            "reason": self.reason,
            "note": self.note,
            "created_at": to_utc_z(self.created_at),
        }
