from __future__ import annotations

from ..extensions import db
from ..money import format_money
from ..time_utils import to_utc_z, utcnow

ORDER_STATUSES = ("pending", "completed", "cancelled")


class Order(db.Model):
    """
    Order header.

    INVARIANT: total_amount == sum(line.price * line.quantity) over its lines.
    The total is always computed server-side at creation time and never
    accepted from the client.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.CheckConstraint("total_amount >= 0", name="ck_orders_total_non_negative"),
        db.CheckConstraint(
            "status IN ('pending', 'completed', 'cancelled')",
            name="ck_orders_status",
        ),
        db.Index("ix_orders_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    orderid = db.Column(db.Integer, primary_key=True)
    customerid = db.Column(db.Integer, db.ForeignKey("customers.customerid"), nullable=True, index=True)
    total_amount = db.Column(db.Numeric(10, 2, asdecimal=True), nullable=False)
    status = db.Column(db.String(50), nullable=False, default="pending")

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    customer = db.relationship("Customer", backref=db.backref("orders", lazy=True))
    lines = db.relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.order_itemid",
    )

    def to_dict(self, include_lines: bool = True) -> dict:
        data = {
            "orderid": self.orderid,
            "customerid": self.customerid,
            "customer_name": self.customer.name if self.customer else None,
            "customer_email": self.customer.email if self.customer else None,
            "customer_phone": self.customer.phone if self.customer else None,
            "total_amount": format_money(self.total_amount),
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_lines:
            data["items"] = [line.to_dict() for line in self.lines]
        return data


class OrderItem(db.Model):
    """
    One order line: (item, quantity, price snapshot).

    WHY price is copied: the line keeps the price charged at order time even
    if the item's price changes later.
    """
    __tablename__ = "order_items"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
        db.CheckConstraint("price >= 0", name="ck_order_items_price_non_negative"),
        {"sqlite_autoincrement": True},
    )

    order_itemid = db.Column(db.Integer, primary_key=True)
    orderid = db.Column(
        db.Integer,
        db.ForeignKey("orders.orderid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    itemid = db.Column(db.Integer, db.ForeignKey("items.itemid"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Numeric(10, 2, asdecimal=True), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    order = db.relationship("Order", back_populates="lines")
    item = db.relationship("Item")

    def to_dict(self) -> dict:
        return {
            "itemid": self.itemid,
            "quantity": self.quantity,
            "price": format_money(self.price),
            "name": self.item.name if self.item else None,
            "category": self.item.category if self.item else None,
        }
