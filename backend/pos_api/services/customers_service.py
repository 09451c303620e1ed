# backend/pos_api/services/customers_service.py
from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Customer, Order
from ..validation import ConflictError, NotFoundError
from .update_builder import apply_update
from ..time_utils import utcnow

CUSTOMER_MUTABLE_FIELDS = {"name", "email", "phone", "address"}
DUPLICATE_MESSAGE = "Customer with this email or phone already exists"


def _ensure_unique(email: str | None, phone: str | None, exclude_id: int | None = None) -> None:
    clauses = []
    if email:
        clauses.append(Customer.email == email)
    if phone:
        clauses.append(Customer.phone == phone)
    if not clauses:
        return

    query = db.session.query(Customer).filter(db.or_(*clauses))
    if exclude_id is not None:
        query = query.filter(Customer.customerid != exclude_id)
    if query.first():
        raise ConflictError(DUPLICATE_MESSAGE)


def list_customers(search: str | None = None) -> list[Customer]:
    """Customers newest first, optionally matching name/email/phone."""
    query = db.session.query(Customer)
    if search:
        pattern = f"%{search}%"
        query = query.filter(db.or_(
            Customer.name.ilike(pattern),
            Customer.email.ilike(pattern),
            Customer.phone.ilike(pattern),
        ))
    return query.order_by(Customer.created_at.desc(), Customer.customerid.desc()).all()


def get_customer(customer_id: int) -> Customer:
    customer = db.session.get(Customer, customer_id)
    if not customer:
        raise NotFoundError("Customer not found")
    return customer


def create_customer(*, patch: dict) -> Customer:
    _ensure_unique(patch.get("email"), patch.get("phone"))

    now = utcnow()
    customer = Customer(created_at=now, updated_at=now)
    for k, v in patch.items():
        if k in CUSTOMER_MUTABLE_FIELDS:
            setattr(customer, k, v)

    db.session.add(customer)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(DUPLICATE_MESSAGE)
    return customer


def update_customer(*, customer_id: int, patch: dict) -> Customer:
    _ensure_unique(patch.get("email"), patch.get("phone"), exclude_id=customer_id)
    return apply_update(
        Customer,
        customer_id,
        patch,
        CUSTOMER_MUTABLE_FIELDS,
        label="Customer",
        conflict_message=DUPLICATE_MESSAGE,
    )


def delete_customer(*, customer_id: int) -> None:
    """Delete a customer that has no orders; raises ConflictError otherwise."""
    customer = db.session.get(Customer, customer_id)
    if not customer:
        raise NotFoundError("Customer not found")

    has_orders = db.session.query(Order.orderid).filter_by(customerid=customer_id).first()
    if has_orders:
        raise ConflictError("Customer has existing orders and cannot be deleted")

    db.session.delete(customer)
    db.session.commit()
