from __future__ import annotations

from ..extensions import db
from ..money import format_money
from ..time_utils import to_utc_z, utcnow


class Item(db.Model):
    """
    Sellable inventory item.

    STOCK LEDGER: stock_quantity is the running on-hand count. Outside of
    admin edits it only moves through order placement (decrement) and order
    deletion (increment). It never goes negative: the CHECK constraint below
    backs up the order service's pre-check and conditional decrement.
    """
    __tablename__ = "items"
    __table_args__ = (
        db.CheckConstraint("price >= 0", name="ck_items_price_non_negative"),
        db.CheckConstraint("stock_quantity >= 0", name="ck_items_stock_non_negative"),
        db.Index("ix_items_category_name", "category", "name"),
        {"sqlite_autoincrement": True},
    )

    itemid = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)

    # Fixed-point; never float
    price = db.Column(db.Numeric(10, 2, asdecimal=True), nullable=False)

    category = db.Column(db.String(50), nullable=False)
    stock_quantity = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "itemid": self.itemid,
            "name": self.name,
            "description": self.description,
            "price": format_money(self.price),
            "category": self.category,
            "stock_quantity": self.stock_quantity,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
