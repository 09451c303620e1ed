"""
Order Service - order placement, status changes and reversal

WHY: An order moves stock. Placement and deletion are each one database
transaction: validate every line, price it, write header + lines and adjust
stock, then commit. Any failure rolls everything back, so no reader ever
sees a partially applied order.

STOCK LEDGER:
- placement decrements items.stock_quantity once per unit ordered
- deletion increments it once per unit on the deleted order
- status changes never touch stock (cancelling does not restock)
"""

from __future__ import annotations

from decimal import Decimal

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload, selectinload

from ..extensions import db
from ..models import Customer, Item, Order, OrderItem, ORDER_STATUSES
from ..money import ZERO, line_total, to_money
from ..validation import NotFoundError, ValidationError
from .concurrency import begin_write, lock_for_update, run_with_retry
from .update_builder import apply_update
from ..time_utils import utcnow


class OrderError(Exception):
    """Raised for order operation errors."""
    status = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ItemNotFoundError(OrderError):
    def __init__(self, itemid: int):
        super().__init__(f"Item with ID {itemid} not found", {"itemid": itemid})
        self.itemid = itemid


class CustomerNotFoundError(OrderError):
    def __init__(self, customerid: int):
        super().__init__(f"Customer with ID {customerid} not found", {"customerid": customerid})
        self.customerid = customerid


class InsufficientStockError(OrderError):
    def __init__(self, item_name: str, available: int, requested: int, itemid: int | None = None):
        super().__init__(
            f"Insufficient stock for item: {item_name}",
            {"itemid": itemid, "item": item_name, "available": available, "requested": requested},
        )
        self.item_name = item_name
        self.available = available
        self.requested = requested


class OrderNotFoundError(OrderError):
    status = 404

    def __init__(self, orderid: int):
        super().__init__("Order not found", {"orderid": orderid})


class TransactionFailedError(OrderError):
    """Storage failure during a multi-step mutation; fully rolled back."""
    status = 500


def _requested_totals(lines: list[tuple[int, int]]) -> dict[int, int]:
    totals: dict[int, int] = {}
    for itemid, quantity in lines:
        totals[itemid] = totals.get(itemid, 0) + quantity
    return totals


def _check_lines(lines) -> list[tuple[int, int]]:
    if not lines:
        raise OrderError("Order must contain at least one item")

    checked = []
    for itemid, quantity in lines:
        if not isinstance(itemid, int) or isinstance(itemid, bool) or itemid < 1:
            raise OrderError("Each item must have a valid item ID")
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise OrderError("Quantity must be at least 1")
        checked.append((itemid, quantity))
    return checked


def _load_order(order_id: int) -> Order | None:
    return (
        db.session.query(Order)
        .options(
            joinedload(Order.customer),
            selectinload(Order.lines).joinedload(OrderItem.item),
        )
        .filter(Order.orderid == order_id)
        .first()
    )


def create_order(customer_id: int | None, lines: list[tuple[int, int]]) -> Order:
    """
    Place an order for (itemid, quantity) lines, optionally for a customer.

    Steps (one transaction):
    1. lock every referenced item row
    2. validate existence and stock for ALL lines before any write
    3. price each line at the item's current price (Decimal)
    4. insert header (pending) and lines, conditionally decrement stock
    5. commit, or roll back on any failure

    Raises ItemNotFoundError, CustomerNotFoundError, InsufficientStockError,
    TransactionFailedError.
    """
    lines = _check_lines(lines)

    def _op():
        begin_write()

        if customer_id is not None and db.session.get(Customer, customer_id) is None:
            raise CustomerNotFoundError(customer_id)

        requested = _requested_totals(lines)

        # Lock in itemid order so concurrent orders acquire rows consistently
        items: dict[int, Item] = {}
        for itemid in sorted(requested):
            item = lock_for_update(db.session.query(Item).filter_by(itemid=itemid)).first()
            if not item:
                raise ItemNotFoundError(itemid)
            items[itemid] = item

        for itemid, quantity in requested.items():
            item = items[itemid]
            if item.stock_quantity < quantity:
                raise InsufficientStockError(item.name, item.stock_quantity, quantity, itemid=itemid)

        total = ZERO
        priced: list[tuple[int, int, Decimal]] = []
        for itemid, quantity in lines:
            price = to_money(items[itemid].price)
            total += line_total(price, quantity)
            priced.append((itemid, quantity, price))

        now = utcnow()
        order = Order(
            customerid=customer_id,
            total_amount=total,
            status="pending",
            created_at=now,
            updated_at=now,
        )
        db.session.add(order)
        db.session.flush()  # ensure order.orderid exists before lines

        for itemid, quantity, price in priced:
            db.session.add(OrderItem(
                orderid=order.orderid,
                itemid=itemid,
                quantity=quantity,
                price=price,
                created_at=now,
            ))

            result = db.session.execute(
                update(Item)
                .where(Item.itemid == itemid, Item.stock_quantity >= quantity)
                .values(stock_quantity=Item.stock_quantity - quantity, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                # Another writer got there first
                item = items[itemid]
                raise InsufficientStockError(item.name, item.stock_quantity, quantity, itemid=itemid)

        db.session.commit()
        return order.orderid, total

    try:
        order_id, total = run_with_retry(_op)
    except OrderError as e:
        db.session.rollback()
        current_app.logger.warning("Order rejected: %s", e)
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Order transaction failed")
        raise TransactionFailedError("Failed to create order") from e

    current_app.logger.info(
        "Order %s created: %d line(s), total %s", order_id, len(lines), total
    )
    return _load_order(order_id)


def delete_order(order_id: int) -> dict[int, int]:
    """
    Delete an order and restore the stock its lines consumed.

    Returns {itemid: restored_quantity}. Raises OrderNotFoundError (nothing
    mutated) or TransactionFailedError (rolled back).
    """
    def _op():
        begin_write()

        order = lock_for_update(db.session.query(Order).filter_by(orderid=order_id)).first()
        if not order:
            raise OrderNotFoundError(order_id)

        now = utcnow()
        restored: dict[int, int] = {}
        for line in order.lines:
            db.session.execute(
                update(Item)
                .where(Item.itemid == line.itemid)
                .values(stock_quantity=Item.stock_quantity + line.quantity, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            restored[line.itemid] = restored.get(line.itemid, 0) + line.quantity

        # Lines go with the header (ORM cascade + ON DELETE CASCADE)
        db.session.delete(order)
        db.session.commit()
        return restored

    try:
        restored = run_with_retry(_op)
    except OrderError:
        db.session.rollback()
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Order deletion failed")
        raise TransactionFailedError("Failed to delete order") from e

    current_app.logger.info("Order %s deleted; stock restored %s", order_id, restored)
    return restored


def update_order_status(order_id: int, status: str) -> Order:
    """
    Set an order's status. Metadata only: stock is never adjusted here.
    """
    if status not in ORDER_STATUSES:
        raise ValidationError(
            "Validation failed",
            [{"field": "status", "message": "Status must be pending, completed, or cancelled"}],
        )

    try:
        apply_update(Order, order_id, {"status": status}, {"status"}, label="Order")
    except NotFoundError:
        raise OrderNotFoundError(order_id)

    current_app.logger.info("Order %s status set to %s", order_id, status)
    return _load_order(order_id)


def get_order(order_id: int) -> Order:
    order = _load_order(order_id)
    if not order:
        raise OrderNotFoundError(order_id)
    return order


def list_orders(status: str | None = None, customer_id: int | None = None) -> list[Order]:
    """Orders newest first, optionally filtered by status or customer."""
    query = db.session.query(Order).options(
        joinedload(Order.customer),
        selectinload(Order.lines).joinedload(OrderItem.item),
    )
    if status is not None:
        query = query.filter(Order.status == status)
    if customer_id is not None:
        query = query.filter(Order.customerid == customer_id)

    return query.order_by(Order.created_at.desc(), Order.orderid.desc()).all()
