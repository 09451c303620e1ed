# Overview: Service-layer operations for session; encapsulates business logic and database work.

"""
Session Token Management Service

WHY: Secure bearer tokens with expiry and revocation.
Tokens are cryptographically secure, hashed in database, and time-limited.

Login issues a pair:
- access token: presented on every API call (ACCESS_TOKEN_TTL_MINUTES)
- refresh token: exchanged at /api/auth/refresh for a new access token
  (REFRESH_TOKEN_TTL_DAYS)

A validated access token resolves to the owning user, whose claims are
{userId, username, role}. Role is read from the user row on every request,
so demoting an admin takes effect immediately.
"""

import secrets
import hashlib
from dataclasses import dataclass
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import SessionToken, User
from ..time_utils import utcnow


class AuthError(Exception):
    """Authentication/authorization failure mapped to 401 or 403."""

    def __init__(self, message: str, status: int = 401):
        super().__init__(message)
        self.status = status


@dataclass
class SessionContext:
    """Authenticated identity for one request."""
    user: User
    session: SessionToken

    @property
    def claims(self) -> dict:
        return self.user.token_claims()


def generate_token() -> str:
    """
    Generate cryptographically secure random token.

    Returns 64-character hex string (32 bytes of entropy).
    This is the plaintext token sent to client (never stored).
    """
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """
    Hash token for database storage using SHA-256.

    WHY SHA-256 not bcrypt: Tokens are already high-entropy (unlike passwords).
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def _ttl(token_type: str) -> timedelta:
    if token_type == "refresh":
        return timedelta(days=current_app.config["REFRESH_TOKEN_TTL_DAYS"])
    return timedelta(minutes=current_app.config["ACCESS_TOKEN_TTL_MINUTES"])


def _issue(user_id: int, token_type: str) -> str:
    plaintext_token = generate_token()
    now = utcnow()

    db.session.add(SessionToken(
        userid=user_id,
        token_hash=hash_token(plaintext_token),
        token_type=token_type,
        created_at=now,
        last_used_at=now,
        expires_at=now + _ttl(token_type),
        is_revoked=False,
    ))
    return plaintext_token


def create_session(user_id: int) -> tuple[str, str]:
    """
    Issue an access/refresh token pair for a user.

    Returns (access_token, refresh_token). Only hashes are persisted.
    """
    access_token = _issue(user_id, "access")
    refresh_token = _issue(user_id, "refresh")
    db.session.commit()
    return access_token, refresh_token


def _lookup(token: str, token_type: str) -> SessionToken:
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        token_type=token_type,
        is_revoked=False,
    ).first()

    if not session:
        raise AuthError("Invalid token")

    if session.expires_at < utcnow():
        raise AuthError("Token expired")

    return session


def validate_session(token: str) -> SessionContext:
    """
    Validate an access token and return the SessionContext.

    Raises AuthError("Invalid token") for unknown/revoked tokens and
    AuthError("Token expired") past expiry.
    Updates last_used_at on success (activity tracking).
    """
    session = _lookup(token, "access")

    user = session.user
    if not user:
        raise AuthError("Invalid token")

    session.last_used_at = utcnow()
    db.session.commit()

    return SessionContext(user=user, session=session)


def refresh_session(refresh_token: str) -> tuple[str, User]:
    """
    Exchange a refresh token for a new access token.

    Returns (access_token, user).
    """
    session = _lookup(refresh_token, "refresh")

    user = session.user
    if not user:
        raise AuthError("Invalid refresh token")

    session.last_used_at = utcnow()
    access_token = _issue(user.userid, "access")
    db.session.commit()
    return access_token, user


def revoke_session(token: str, reason: str = "User logout") -> bool:
    """
    Revoke a token of either type.

    Returns True if a live token was revoked, False if not found.
    """
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return False

    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason

    db.session.commit()
    return True


def revoke_all_user_sessions(user_id: int, reason: str = "Revoke all sessions") -> int:
    """
    Revoke every live token for a user (password change, role change).

    Returns count of tokens revoked. Caller commits.
    """
    now = utcnow()

    sessions = db.session.query(SessionToken).filter_by(
        userid=user_id,
        is_revoked=False
    ).all()

    for session in sessions:
        session.is_revoked = True
        session.revoked_at = now
        session.revoked_reason = reason

    return len(sessions)


def cleanup_expired_sessions(retention_days: int = 30) -> int:
    """
    Delete expired or revoked tokens created more than retention_days ago.

    Returns count of tokens deleted.
    """
    cutoff = utcnow() - timedelta(days=retention_days)

    deleted = db.session.query(SessionToken).filter(
        db.or_(
            SessionToken.expires_at < utcnow(),
            SessionToken.is_revoked.is_(True),
        ),
        SessionToken.created_at < cutoff
    ).delete(synchronize_session=False)

    db.session.commit()
    return deleted
