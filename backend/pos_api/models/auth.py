from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

USER_ROLES = ("admin", "cashier")


class User(db.Model):
    """
    Staff accounts for authentication and attribution.

    WHY: Every write path runs under an authenticated identity. Admins manage
    inventory, customers, orders and other users; cashiers can browse
    inventory and manage their own account.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.CheckConstraint("role IN ('admin', 'cashier')", name="ck_users_role"),
        {"sqlite_autoincrement": True},
    )

    userid = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(100), nullable=False, unique=True, index=True)
    email = db.Column(db.String(100), nullable=False, unique=True)
    role = db.Column(db.String(50), nullable=False, default="cashier")

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def to_dict(self) -> dict:
        return {
            "userid": self.userid,
            "username": self.username,
            "email": self.email,
            "role": self.role,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

    def token_claims(self) -> dict:
        """Identity carried by a validated bearer token."""
        return {"userId": self.userid, "username": self.username, "role": self.role}


class SessionToken(db.Model):
    """
    Issued bearer tokens (access and refresh).

    SECURITY NOTES:
    - Tokens stored hashed in database (SHA-256), plaintext only sent to client
    - Access and refresh tokens have separate lifetimes
    - Revocable on logout or when the owning user is deleted
    """
    __tablename__ = "session_tokens"
    __table_args__ = (
        db.CheckConstraint("token_type IN ('access', 'refresh')", name="ck_session_tokens_type"),
        db.Index("ix_session_tokens_user_active", "userid", "is_revoked"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    userid = db.Column(
        db.Integer,
        db.ForeignKey("users.userid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Token hash (never store plaintext tokens!)
    token_hash = db.Column(db.String(64), nullable=False, unique=True, index=True)
    token_type = db.Column(db.String(16), nullable=False, default="access")

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    last_used_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False)
    revoked_at = db.Column(db.DateTime, nullable=True)
    revoked_reason = db.Column(db.String(255), nullable=True)

    user = db.relationship(
        "User",
        backref=db.backref("session_tokens", lazy=True, cascade="all, delete-orphan"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userid": self.userid,
            "token_type": self.token_type,
            "created_at": to_utc_z(self.created_at),
            "last_used_at": to_utc_z(self.last_used_at),
            "expires_at": to_utc_z(self.expires_at),
            "is_revoked": self.is_revoked,
        }
