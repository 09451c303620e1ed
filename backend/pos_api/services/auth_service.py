# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

WHY: Every action must be attributable. Uses bcrypt for secure password
hashing and validates password length.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 6 characters required
- Session tokens managed separately (see session_service.py)
"""

import bcrypt
from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import User
from ..validation import ConflictError

PASSWORD_MIN_LENGTH = 6

DEFAULT_ADMIN_USERNAME = "admin"
DEFAULT_ADMIN_EMAIL = "admin@pos.com"
DEFAULT_ADMIN_PASSWORD = "admin123"


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """Raises PasswordValidationError if the password is too short."""
    if len(password) < PASSWORD_MIN_LENGTH:
        raise PasswordValidationError(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
        )


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash password using bcrypt.

    WHY: Cost factor 12 provides good security/performance balance.
    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed hash in the database
        return False


def _bcrypt_rounds() -> int:
    return current_app.config.get("BCRYPT_ROUNDS", 12)


def create_user(username: str, email: str, password: str, role: str = "cashier") -> User:
    """
    Create new user with bcrypt password hashing.

    Raises:
        ConflictError: If username or email already exists
        PasswordValidationError: If password doesn't meet requirements
    """
    existing = db.session.query(User).filter(
        db.or_(User.username == username, User.email == email)
    ).first()

    if existing:
        raise ConflictError("Username or email already exists")

    user = User(
        username=username,
        email=email,
        role=role,
        password_hash=hash_password(password, rounds=_bcrypt_rounds()),
    )

    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Username or email already exists")
    return user


def authenticate(username: str, password: str) -> User | None:
    """
    Authenticate user with username (or email) and password.

    Returns User if credentials valid, None otherwise.
    """
    user = db.session.query(User).filter(
        db.or_(User.username == username, User.email == username.lower())
    ).first()

    if not user:
        return None

    if verify_password(password, user.password_hash):
        return user

    return None


def create_default_admin() -> User | None:
    """
    Create the bootstrap admin when the users table is empty.

    Returns the created user, or None when users already exist.
    """
    if db.session.query(User).count() > 0:
        return None

    user = create_user(
        username=DEFAULT_ADMIN_USERNAME,
        email=DEFAULT_ADMIN_EMAIL,
        password=DEFAULT_ADMIN_PASSWORD,
        role="admin",
    )
    current_app.logger.warning(
        "Default admin user created (username=%s); change the password after first login",
        DEFAULT_ADMIN_USERNAME,
    )
    return user
