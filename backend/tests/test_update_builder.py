"""
Sparse update builder tests.
"""

from decimal import Decimal

import pytest

from pos_api.models import Customer, Item
from pos_api.services.update_builder import apply_update, build_update
from pos_api.validation import ConflictError, NoFieldsToUpdateError, NotFoundError


def test_only_allowed_supplied_fields_are_set(app):
    stmt = build_update(Item, 1, {"price": Decimal("2.00"), "itemid": 99}, {"price", "name"})
    params = stmt.compile().params

    assert set(params) == {"price", "updated_at", "itemid_1"}
    assert params["itemid_1"] == 1


def test_empty_patch_raises(app):
    with pytest.raises(NoFieldsToUpdateError) as exc:
        build_update(Item, 1, {"unknown": 1}, {"name"})
    assert str(exc.value) == "No fields to update"


def test_apply_update_refreshes_row(make_item):
    item = make_item("Old name", "1.00", 3)
    before = item.updated_at

    updated = apply_update(Item, item.itemid, {"name": "New name"}, {"name"}, label="Item")

    assert updated.name == "New name"
    assert updated.stock_quantity == 3
    assert updated.updated_at >= before


def test_apply_update_missing_row(app):
    with pytest.raises(NotFoundError) as exc:
        apply_update(Item, 404, {"name": "x"}, {"name"}, label="Item")
    assert str(exc.value) == "Item not found"


def test_apply_update_unique_violation(app, db_session, customer):
    other = Customer(name="Other", phone="555-000-9999")
    db_session.add(other)
    db_session.commit()

    with pytest.raises(ConflictError):
        apply_update(Customer, other.customerid, {"phone": customer.phone}, {"phone"}, label="Customer")
