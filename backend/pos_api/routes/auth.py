# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/pos_api/routes/auth.py
"""
Authentication API routes

- POST /api/auth/login    -> {token, refreshToken, user}
- POST /api/auth/refresh  -> {token}  (Authorization: Bearer <refreshToken>)
- POST /api/auth/logout   -> revokes the presented token
- GET  /api/auth/me       -> authenticated user and token claims
"""

from flask import Blueprint, request, current_app, g

from ..responses import success, failure
from ..services import auth_service
from ..services import session_service
from ..services.session_service import AuthError
from ..decorators import require_auth, bearer_token


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and issue an access/refresh token pair.

    Token must be included in Authorization header for protected routes.
    """
    data = request.get_json(silent=True) or {}
    username = data.get("username")
    password = data.get("password")

    errors = []
    if not isinstance(username, str) or not username.strip():
        errors.append({"field": "username", "message": "Username is required"})
    if not isinstance(password, str) or not password:
        errors.append({"field": "password", "message": "Password is required"})
    if errors:
        return failure("Validation failed", 400, data={"errors": errors})

    try:
        user = auth_service.authenticate(username.strip(), password)

        if not user:
            current_app.logger.warning(
                "Failed login for %r from %s", username, request.remote_addr
            )
            return failure("Invalid username or password", 401)

        token, refresh_token = session_service.create_session(user.userid)

        return success(
            {
                "user": user.to_dict(),
                "token": token,
                "refreshToken": refresh_token,
            },
            "Login successful",
        )

    except Exception:
        current_app.logger.exception("Failed to login user")
        return failure("Internal server error", 500)


@auth_bp.post("/refresh")
def refresh_route():
    """Exchange a refresh token (Bearer) for a new access token."""
    token = bearer_token()
    if not token:
        return failure("Refresh token required", 401)

    try:
        access_token, user = session_service.refresh_session(token)
    except AuthError as e:
        return failure(str(e), e.status)
    except Exception:
        current_app.logger.exception("Failed to refresh token")
        return failure("Internal server error", 500)

    return success({"token": access_token, "user": user.to_dict()}, "Token refreshed")


@auth_bp.post("/logout")
def logout_route():
    """
    Revoke session token (logout).

    Expects Authorization header: Bearer <token>
    """
    token = bearer_token()
    if not token:
        return failure("Access token required", 401)

    try:
        revoked = session_service.revoke_session(token, reason="User logout")
    except Exception:
        current_app.logger.exception("Failed to logout user")
        return failure("Internal server error", 500)

    if not revoked:
        return failure("Invalid token", 401)

    return success(message="Logout successful")


@auth_bp.get("/me")
@require_auth
def me_route():
    return success({"user": g.current_user.to_dict(), "claims": g.claims})
