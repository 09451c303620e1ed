# backend/pos_api/services/users_service.py
"""
User management for admins (and self-service for every user).

Password changes are hashed here before the sparse update is built, and
revoke every live token of the account.
"""
from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import User
from ..validation import ConflictError, NotFoundError
from . import auth_service, session_service
from .update_builder import apply_update

USER_MUTABLE_FIELDS = {"username", "email", "role", "password_hash"}
DUPLICATE_MESSAGE = "Username or email already exists"


def list_users() -> list[User]:
    return db.session.query(User).order_by(User.username.asc()).all()


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def create_user(*, patch: dict) -> User:
    return auth_service.create_user(
        username=patch["username"],
        email=patch["email"],
        password=patch["password"],
        role=patch.get("role") or "cashier",
    )


def update_user(*, user_id: int, patch: dict) -> User:
    """
    Sparse user update. A supplied `password` is hashed into password_hash.

    Raises NoFieldsToUpdateError, NotFoundError, ConflictError.
    """
    patch = dict(patch)
    password = patch.pop("password", None)
    if password is not None:
        patch["password_hash"] = auth_service.hash_password(
            password, rounds=current_app.config.get("BCRYPT_ROUNDS", 12)
        )

    usernames_or_emails = [v for v in (patch.get("username"), patch.get("email")) if v]
    if usernames_or_emails:
        clash = db.session.query(User).filter(
            db.or_(User.username.in_(usernames_or_emails), User.email.in_(usernames_or_emails)),
            User.userid != user_id,
        ).first()
        if clash:
            raise ConflictError(DUPLICATE_MESSAGE)

    user = apply_update(
        User,
        user_id,
        patch,
        USER_MUTABLE_FIELDS,
        label="User",
        conflict_message=DUPLICATE_MESSAGE,
    )

    if password is not None:
        session_service.revoke_all_user_sessions(user_id, reason="Password changed")
        db.session.commit()

    return user


def delete_user(*, user_id: int, acting_user_id: int) -> None:
    if user_id == acting_user_id:
        raise ConflictError("You cannot delete your own account")

    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    # Session tokens go with the user (ORM cascade)
    db.session.delete(user)
    db.session.commit()
