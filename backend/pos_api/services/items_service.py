# backend/pos_api/services/items_service.py
"""
Items Service

Inventory catalogue CRUD. Stock levels set here are absolute admin
corrections; order placement and deletion adjust stock through
order_service only.
"""
from __future__ import annotations

from ..extensions import db
from ..models import Item, OrderItem
from ..validation import ConflictError, NotFoundError
from .update_builder import apply_update
from ..time_utils import utcnow

ITEM_MUTABLE_FIELDS = {"name", "description", "price", "category", "stock_quantity"}


def list_items(category: str | None = None, search: str | None = None) -> list[Item]:
    """
    List items ordered by name.

    Args:
        category: exact category filter
        search: case-insensitive substring match on name or description
    """
    query = db.session.query(Item)

    if category:
        query = query.filter(Item.category == category)

    if search:
        pattern = f"%{search}%"
        query = query.filter(db.or_(Item.name.ilike(pattern), Item.description.ilike(pattern)))

    return query.order_by(Item.name.asc(), Item.itemid.asc()).all()


def get_item(item_id: int) -> Item:
    item = db.session.get(Item, item_id)
    if not item:
        raise NotFoundError("Item not found")
    return item


def create_item(*, patch: dict) -> Item:
    """Create item from a validated patch dict."""
    now = utcnow()
    item = Item(created_at=now, updated_at=now)
    for k, v in patch.items():
        if k in ITEM_MUTABLE_FIELDS:
            setattr(item, k, v)

    db.session.add(item)
    db.session.commit()
    return item


def update_item(*, item_id: int, patch: dict) -> Item:
    """Apply only the supplied fields. Raises NoFieldsToUpdateError / NotFoundError."""
    return apply_update(Item, item_id, patch, ITEM_MUTABLE_FIELDS, label="Item")


def delete_item(*, item_id: int) -> None:
    """
    Hard-delete an item.

    Items referenced by order lines are kept so historical orders stay
    intact; deleting one raises ConflictError.
    """
    item = db.session.get(Item, item_id)
    if not item:
        raise NotFoundError("Item not found")

    in_use = db.session.query(OrderItem.order_itemid).filter_by(itemid=item_id).first()
    if in_use:
        raise ConflictError("Item is referenced by existing orders and cannot be deleted")

    db.session.delete(item)
    db.session.commit()
