# Overview: Flask API routes for user management; parses input and returns JSON responses.

# backend/pos_api/routes/users.py
"""
User management routes.

- list / create / delete: admin only
- get / update: admin, or the user acting on their own account
  (only admins may change a role)
"""

from flask import Blueprint, request, g, current_app

from ..models import User
from ..responses import success, failure, validation_failure
from ..services import users_service
from ..services.auth_service import PasswordValidationError
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_user,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from ..decorators import require_auth, require_admin, require_admin_or_self

USER_POLICY = ModelValidationPolicy(
    writable_fields={"username", "email", "password", "role"},
    required_on_create={"username", "email", "password"},
    extra_fields={"password"},
    rules=enforce_rules_user,
)

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_admin
def list_users_route():
    try:
        return success([u.to_dict() for u in users_service.list_users()])
    except Exception:
        current_app.logger.exception("Failed to list users")
        return failure("Failed to retrieve users", 500)


@users_bp.get("/<int:user_id>")
@require_auth
@require_admin_or_self("user_id")
def get_user_route(user_id: int):
    try:
        return success(users_service.get_user(user_id).to_dict())
    except NotFoundError as e:
        return failure(str(e), 404)


@users_bp.post("")
@require_auth
@require_admin
def create_user_route():
    payload = request.get_json(silent=True)

    try:
        patch = validate_payload(model=User, payload=payload, policy=USER_POLICY, partial=False)
        user = users_service.create_user(patch=patch)
    except ValidationError as e:
        return validation_failure(e)
    except PasswordValidationError as e:
        return failure(str(e), 400)
    except ConflictError as e:
        return failure(str(e), 409)
    except Exception:
        current_app.logger.exception("Failed to create user")
        return failure("Failed to create user", 500)

    return success(user.to_dict(), "User created successfully", 201)


@users_bp.put("/<int:user_id>")
@require_auth
@require_admin_or_self("user_id")
def update_user_route(user_id: int):
    payload = request.get_json(silent=True)

    if isinstance(payload, dict) and "role" in payload and not g.current_user.is_admin:
        return failure("Only admins can change roles", 403)

    try:
        patch = validate_payload(model=User, payload=payload, policy=USER_POLICY, partial=True)
        user = users_service.update_user(user_id=user_id, patch=patch)
    except ValidationError as e:
        return validation_failure(e)
    except PasswordValidationError as e:
        return failure(str(e), 400)
    except NotFoundError as e:
        return failure(str(e), 404)
    except ConflictError as e:
        return failure(str(e), 409)
    except Exception:
        current_app.logger.exception("Failed to update user")
        return failure("Failed to update user", 500)

    return success(user.to_dict(), "User updated successfully")


@users_bp.delete("/<int:user_id>")
@require_auth
@require_admin
def delete_user_route(user_id: int):
    try:
        users_service.delete_user(user_id=user_id, acting_user_id=g.current_user.userid)
    except NotFoundError as e:
        return failure(str(e), 404)
    except ConflictError as e:
        return failure(str(e), 409)
    except Exception:
        current_app.logger.exception("Failed to delete user")
        return failure("Failed to delete user", 500)

    return success(message="User deleted successfully")
