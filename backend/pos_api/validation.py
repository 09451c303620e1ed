from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable

from sqlalchemy import Boolean, Integer, Numeric, String, Text

from .money import MAX_AMOUNT, has_at_most_cents, to_money


EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$")
PHONE_RE = re.compile(r"^\+?[0-9\s\-()]{7,20}$")
INTEGER_RE = re.compile(r"-?[0-9]+")


class ValidationError(ValueError):
    """400-level input problem. Carries one entry per failing field."""

    def __init__(self, message: str = "Validation failed", errors: list[dict] | None = None):
        super().__init__(message)
        self.errors = errors or []


class NoFieldsToUpdateError(ValidationError):
    """A partial update carried no updatable fields."""

    def __init__(self):
        super().__init__("No fields to update")


class NotFoundError(LookupError):
    """404-level: referenced entity does not exist."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate username)."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - extra_fields: writable inputs with no backing column (e.g. password)
    - rules: entity business rules run after type coercion
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)
    extra_fields: set[str] = field(default_factory=set)
    rules: Callable[[dict, list], None] | None = None


def _columns_by_key(model) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        # Already an int (but not bool which is a subclass of int)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            stripped = value.strip()
            if INTEGER_RE.fullmatch(stripped):
                return int(stripped)
        raise ValidationError(f"{col.key} must be an integer")

    # Fixed-point money columns
    if isinstance(coltype, Numeric):
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise ValidationError(f"{col.key} must be a number")
        try:
            raw = str(value).strip()
            if not has_at_most_cents(raw):
                raise ValidationError(f"{col.key} must have at most 2 decimal places")
            return to_money(raw)
        except ValidationError:
            raise
        except (ValueError, ArithmeticError):
            raise ValidationError(f"{col.key} must be a number")

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        raise ValidationError(f"{col.key} must be a boolean")

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        if not isinstance(value, str):
            raise ValidationError(f"{col.key} must be a string")
        return value.strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    - the policy's business rules
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)

    All failures are collected and raised together as one ValidationError.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload", [{"field": None, "message": "Request body must be a JSON object"}])

    errors: list[dict] = []

    if not partial:
        for f in sorted(policy.required_on_create):
            if f not in payload or payload[f] is None:
                errors.append({"field": f, "message": f"{f} is required"})

    cols = _columns_by_key(model)
    patch: dict = {}

    for k, raw in payload.items():
        # Reject unknown / non-writable fields
        if k not in policy.writable_fields:
            errors.append({"field": k, "message": f"Field not allowed: {k}"})
            continue

        if k in policy.extra_fields:
            if raw is None:
                continue
            if not isinstance(raw, str):
                errors.append({"field": k, "message": f"{k} must be a string"})
                continue
            patch[k] = raw
            continue

        col = cols.get(k)
        if col is None:
            errors.append({"field": k, "message": f"Unknown field: {k}"})
            continue

        # NULL handling
        if raw is None:
            if not col.nullable:
                if partial:
                    errors.append({"field": k, "message": f"{k} cannot be null"})
                continue
            patch[k] = None
            continue

        try:
            val = _coerce_value(col, raw)
        except ValidationError as e:
            errors.append({"field": k, "message": str(e)})
            continue

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable and val == "":
            errors.append({"field": k, "message": f"{k} cannot be blank"})
            continue

        # Optional text submitted blank is stored as NULL
        if isinstance(val, str) and val == "" and col.nullable:
            val = None

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                errors.append({"field": k, "message": f"{k} exceeds max length {col.type.length}"})
                continue

        patch[k] = val

    if policy.rules is not None:
        policy.rules(patch, errors)

    if errors:
        raise ValidationError("Validation failed", errors)

    return patch


def _length_rule(patch: dict, errors: list, key: str, minimum: int, maximum: int, label: str) -> None:
    value = patch.get(key)
    if value is None:
        return
    if not minimum <= len(value) <= maximum:
        errors.append({"field": key, "message": f"{label} must be between {minimum} and {maximum} characters"})


def _email_rule(patch: dict, errors: list) -> None:
    email = patch.get("email")
    if email is None:
        return
    if not EMAIL_RE.match(email):
        errors.append({"field": "email", "message": "Please provide a valid email"})
        return
    patch["email"] = email.lower()


def enforce_rules_item(patch: dict, errors: list) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    _length_rule(patch, errors, "name", 1, 100, "Item name")
    _length_rule(patch, errors, "category", 1, 50, "Category")

    description = patch.get("description")
    if description is not None and len(description) > 1000:
        errors.append({"field": "description", "message": "Description must be less than 1000 characters"})

    price = patch.get("price")
    if price is not None:
        if price < 0:
            errors.append({"field": "price", "message": "Price must be a non-negative number"})
        elif price > MAX_AMOUNT:
            errors.append({"field": "price", "message": f"Price cannot exceed {MAX_AMOUNT}"})

    stock = patch.get("stock_quantity")
    if stock is not None and stock < 0:
        errors.append({"field": "stock_quantity", "message": "Stock quantity must be a non-negative integer"})


def enforce_rules_customer(patch: dict, errors: list) -> None:
    _length_rule(patch, errors, "name", 2, 100, "Customer name")
    _email_rule(patch, errors)

    phone = patch.get("phone")
    if phone is not None:
        digits = sum(ch.isdigit() for ch in phone)
        if not PHONE_RE.match(phone) or digits < 7:
            errors.append({"field": "phone", "message": "Please provide a valid phone number"})

    address = patch.get("address")
    if address is not None and len(address) > 500:
        errors.append({"field": "address", "message": "Address must be less than 500 characters"})


def enforce_rules_user(patch: dict, errors: list) -> None:
    from .models import USER_ROLES
    from .services.auth_service import PASSWORD_MIN_LENGTH

    _length_rule(patch, errors, "username", 2, 100, "Username")
    _email_rule(patch, errors)

    password = patch.get("password")
    if password is not None and len(password) < PASSWORD_MIN_LENGTH:
        errors.append({
            "field": "password",
            "message": f"Password must be at least {PASSWORD_MIN_LENGTH} characters long",
        })

    role = patch.get("role")
    if role is not None and role not in USER_ROLES:
        errors.append({"field": "role", "message": "Role must be either admin or cashier"})


def _positive_int(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 1 else None
    if isinstance(value, str) and INTEGER_RE.fullmatch(value.strip()):
        parsed = int(value.strip())
        return parsed if parsed >= 1 else None
    return None


def validate_order_payload(payload) -> tuple[int | None, list[tuple[int, int]]]:
    """
    Validate an order creation request.

    Returns (customer_id, [(itemid, quantity), ...]).
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload", [{"field": None, "message": "Request body must be a JSON object"}])

    errors: list[dict] = []

    customer_id = None
    raw_customer = payload.get("customerid")
    if raw_customer is not None:
        customer_id = _positive_int(raw_customer)
        if customer_id is None:
            errors.append({"field": "customerid", "message": "Customer ID must be a positive integer"})

    lines: list[tuple[int, int]] = []
    items = payload.get("items")
    if not isinstance(items, list) or not items:
        errors.append({"field": "items", "message": "Items array is required and must contain at least one item"})
    else:
        for i, entry in enumerate(items):
            if not isinstance(entry, dict):
                errors.append({"field": f"items[{i}]", "message": "Each item must be an object"})
                continue
            itemid = _positive_int(entry.get("itemid"))
            quantity = _positive_int(entry.get("quantity"))
            if itemid is None:
                errors.append({"field": f"items[{i}].itemid", "message": "Each item must have a valid item ID"})
            if quantity is None:
                errors.append({"field": f"items[{i}].quantity", "message": "Quantity must be at least 1"})
            if itemid is not None and quantity is not None:
                lines.append((itemid, quantity))

    if errors:
        raise ValidationError("Validation failed", errors)

    return customer_id, lines


def validate_order_status_payload(payload) -> str:
    from .models import ORDER_STATUSES

    status = payload.get("status") if isinstance(payload, dict) else None
    if status not in ORDER_STATUSES:
        raise ValidationError(
            "Validation failed",
            [{"field": "status", "message": "Status must be pending, completed, or cancelled"}],
        )
    return status
