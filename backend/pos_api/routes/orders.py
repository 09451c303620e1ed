# Overview: Flask API routes for orders; parses input and returns JSON responses.

# backend/pos_api/routes/orders.py
"""Order API routes (admin only)"""

from flask import Blueprint, request, current_app

from ..models import ORDER_STATUSES
from ..responses import success, failure, validation_failure
from ..services import order_service
from ..services.order_service import OrderError
from ..validation import ValidationError, validate_order_payload, validate_order_status_payload
from ..decorators import require_auth, require_admin


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


def _order_error(e: OrderError):
    if e.status >= 500:
        return failure(str(e), e.status)
    return failure(str(e), e.status, data=e.details or None)


@orders_bp.get("")
@require_auth
@require_admin
def list_orders_route():
    """
    List orders, newest first.

    Query params:
    - status: pending | completed | cancelled
    - customerid: int
    """
    status = request.args.get("status")
    customer_id = request.args.get("customerid", type=int)

    if status is not None and status not in ORDER_STATUSES:
        return failure("Status must be pending, completed, or cancelled", 400)

    try:
        orders = order_service.list_orders(status=status, customer_id=customer_id)
        return success([o.to_dict() for o in orders])
    except Exception:
        current_app.logger.exception("Failed to list orders")
        return failure("Failed to retrieve orders", 500)


@orders_bp.get("/<int:order_id>")
@require_auth
@require_admin
def get_order_route(order_id: int):
    try:
        order = order_service.get_order(order_id)
        return success(order.to_dict())
    except OrderError as e:
        return _order_error(e)
    except Exception:
        current_app.logger.exception("Failed to get order")
        return failure("Failed to retrieve order", 500)


@orders_bp.post("")
@require_auth
@require_admin
def create_order_route():
    """
    Place an order.

    Body: {customerid?: int, items: [{itemid: int, quantity: int}, ...]}

    Prices come from the items table at order time; any client-sent price
    or total is ignored.
    """
    payload = request.get_json(silent=True)

    try:
        customer_id, lines = validate_order_payload(payload)
    except ValidationError as e:
        return validation_failure(e)

    try:
        order = order_service.create_order(customer_id, lines)
        return success(order.to_dict(), "Order created successfully", 201)
    except OrderError as e:
        return _order_error(e)
    except Exception:
        current_app.logger.exception("Failed to create order")
        return failure("Failed to create order", 500)


@orders_bp.put("/<int:order_id>")
@require_auth
@require_admin
def update_order_route(order_id: int):
    """Change order status. Does not adjust stock."""
    payload = request.get_json(silent=True)

    try:
        status = validate_order_status_payload(payload)
    except ValidationError as e:
        return validation_failure(e)

    try:
        order = order_service.update_order_status(order_id, status)
        return success(order.to_dict(), "Order updated successfully")
    except OrderError as e:
        return _order_error(e)
    except Exception:
        current_app.logger.exception("Failed to update order")
        return failure("Failed to update order", 500)


@orders_bp.delete("/<int:order_id>")
@require_auth
@require_admin
def delete_order_route(order_id: int):
    """Delete an order, restoring the stock its lines consumed."""
    try:
        order_service.delete_order(order_id)
        return success(message="Order deleted successfully")
    except OrderError as e:
        return _order_error(e)
    except Exception:
        current_app.logger.exception("Failed to delete order")
        return failure("Failed to delete order", 500)
