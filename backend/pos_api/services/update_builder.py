"""
Sparse update statements shared by items, customers and users.

Only the fields a caller actually supplied are written; every update also
refreshes updated_at. Values always travel as bound parameters.
"""
from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..validation import ConflictError, NoFieldsToUpdateError, NotFoundError
from ..time_utils import utcnow


def build_update(model, entity_id: int, patch: dict, allowed_fields: set[str]):
    """
    Build an UPDATE for `model` touching exactly the allowed keys of `patch`
    plus updated_at.

    Raises NoFieldsToUpdateError when nothing updatable was supplied.
    """
    fields = {k: v for k, v in patch.items() if k in allowed_fields}
    if not fields:
        raise NoFieldsToUpdateError()

    pk = model.__mapper__.primary_key[0]
    fields["updated_at"] = utcnow()

    return (
        update(model)
        .where(pk == entity_id)
        .values(**fields)
        .execution_options(synchronize_session=False)
    )


def apply_update(
    model,
    entity_id: int,
    patch: dict,
    allowed_fields: set[str],
    *,
    label: str = "Record",
    conflict_message: str | None = None,
):
    """
    Execute a sparse update and return the refreshed row.

    Raises:
        NoFieldsToUpdateError: empty effective patch (nothing is written)
        NotFoundError: no row with entity_id
        ConflictError: a unique constraint rejected the new values
    """
    stmt = build_update(model, entity_id, patch, allowed_fields)

    try:
        result = db.session.execute(stmt)
        if result.rowcount == 0:
            db.session.rollback()
            raise NotFoundError(f"{label} not found")
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(conflict_message or f"{label} violates a uniqueness constraint")

    return db.session.get(model, entity_id, populate_existing=True)
