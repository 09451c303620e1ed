# Overview: Flask API routes for inventory items; parses input and returns JSON responses.

# backend/pos_api/routes/items.py
"""
Inventory item routes.

SECURITY: All routes require authentication.
- Read operations are open to every authenticated user (cashiers sell from them)
- Write operations require the admin role
"""
from flask import Blueprint, request, current_app

from ..models import Item
from ..responses import success, failure, validation_failure
from ..services import items_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_item,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from ..decorators import require_auth, require_admin

ITEM_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "price", "category", "stock_quantity"},
    required_on_create={"name", "price", "category", "stock_quantity"},
    rules=enforce_rules_item,
)

items_bp = Blueprint("items", __name__, url_prefix="/api/items")


@items_bp.get("")
@require_auth
def list_items_route():
    """
    List items ordered by name.

    Query params:
    - category: str (optional) - exact category
    - search: str (optional) - matches name or description
    """
    category = request.args.get("category")
    search = request.args.get("search")

    try:
        items = items_service.list_items(category=category, search=search)
        return success([i.to_dict() for i in items])
    except Exception:
        current_app.logger.exception("Failed to list items")
        return failure("Failed to retrieve items", 500)


@items_bp.get("/<int:item_id>")
@require_auth
def get_item_route(item_id: int):
    try:
        return success(items_service.get_item(item_id).to_dict())
    except NotFoundError as e:
        return failure(str(e), 404)


@items_bp.post("")
@require_auth
@require_admin
def create_item_route():
    payload = request.get_json(silent=True)

    try:
        patch = validate_payload(model=Item, payload=payload, policy=ITEM_POLICY, partial=False)
    except ValidationError as e:
        return validation_failure(e)

    try:
        item = items_service.create_item(patch=patch)
        return success(item.to_dict(), "Item created successfully", 201)
    except Exception:
        current_app.logger.exception("Failed to create item")
        return failure("Failed to create item", 500)


@items_bp.put("/<int:item_id>")
@require_auth
@require_admin
def update_item_route(item_id: int):
    """Update only the supplied fields of an item."""
    payload = request.get_json(silent=True)

    try:
        patch = validate_payload(model=Item, payload=payload, policy=ITEM_POLICY, partial=True)
        item = items_service.update_item(item_id=item_id, patch=patch)
    except ValidationError as e:
        return validation_failure(e)
    except NotFoundError as e:
        return failure(str(e), 404)
    except ConflictError as e:
        return failure(str(e), 409)
    except Exception:
        current_app.logger.exception("Failed to update item")
        return failure("Failed to update item", 500)

    return success(item.to_dict(), "Item updated successfully")


@items_bp.delete("/<int:item_id>")
@require_auth
@require_admin
def delete_item_route(item_id: int):
    try:
        items_service.delete_item(item_id=item_id)
    except NotFoundError as e:
        return failure(str(e), 404)
    except ConflictError as e:
        return failure(str(e), 409)
    except Exception:
        current_app.logger.exception("Failed to delete item")
        return failure("Failed to delete item", 500)

    return success(message="Item deleted successfully")
