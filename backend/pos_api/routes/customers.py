# Overview: Flask API routes for customers; parses input and returns JSON responses.

# backend/pos_api/routes/customers.py
"""Customer routes. All operations require the admin role."""

from flask import Blueprint, request, current_app

from ..models import Customer
from ..responses import success, failure, validation_failure
from ..services import customers_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_customer,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from ..decorators import require_auth, require_admin

CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields={"name", "email", "phone", "address"},
    required_on_create={"name", "phone"},
    rules=enforce_rules_customer,
)

customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
@require_auth
@require_admin
def list_customers_route():
    search = request.args.get("search")
    try:
        customers = customers_service.list_customers(search=search)
        return success([c.to_dict() for c in customers])
    except Exception:
        current_app.logger.exception("Failed to list customers")
        return failure("Failed to retrieve customers", 500)


@customers_bp.get("/<int:customer_id>")
@require_auth
@require_admin
def get_customer_route(customer_id: int):
    try:
        return success(customers_service.get_customer(customer_id).to_dict())
    except NotFoundError as e:
        return failure(str(e), 404)


@customers_bp.post("")
@require_auth
@require_admin
def create_customer_route():
    payload = request.get_json(silent=True)

    try:
        patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=False)
        customer = customers_service.create_customer(patch=patch)
    except ValidationError as e:
        return validation_failure(e)
    except ConflictError as e:
        return failure(str(e), 409)
    except Exception:
        current_app.logger.exception("Failed to create customer")
        return failure("Failed to create customer", 500)

    return success(customer.to_dict(), "Customer created successfully", 201)


@customers_bp.put("/<int:customer_id>")
@require_auth
@require_admin
def update_customer_route(customer_id: int):
    payload = request.get_json(silent=True)

    try:
        patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=True)
        customer = customers_service.update_customer(customer_id=customer_id, patch=patch)
    except ValidationError as e:
        return validation_failure(e)
    except NotFoundError as e:
        return failure(str(e), 404)
    except ConflictError as e:
        return failure(str(e), 409)
    except Exception:
        current_app.logger.exception("Failed to update customer")
        return failure("Failed to update customer", 500)

    return success(customer.to_dict(), "Customer updated successfully")


@customers_bp.delete("/<int:customer_id>")
@require_auth
@require_admin
def delete_customer_route(customer_id: int):
    try:
        customers_service.delete_customer(customer_id=customer_id)
    except NotFoundError as e:
        return failure(str(e), 404)
    except ConflictError as e:
        return failure(str(e), 409)
    except Exception:
        current_app.logger.exception("Failed to delete customer")
        return failure("Failed to delete customer", 500)

    return success(message="Customer deleted successfully")
