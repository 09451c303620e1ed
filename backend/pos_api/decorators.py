# Overview: Request authentication and authorization decorators for API routes.

from functools import wraps
from flask import request, g

from .responses import failure
from .services import session_service
from .services.session_service import AuthError


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user')


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header.split(" ", 1)[1].strip()
    return token or None


def require_auth(f):
    """
    Require a valid access token.

    Sets:
    - g.current_user: The authenticated User object
    - g.claims: {userId, username, role}
    - g.session_context: The full SessionContext object

    Returns 401 if the Authorization header is missing, or the token is
    unknown, revoked or expired.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if not token:
            return failure("Access token required", 401)

        try:
            context = session_service.validate_session(token)
        except AuthError as e:
            return failure(str(e), e.status)

        g.current_user = context.user
        g.claims = context.claims
        g.session_context = context

        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: str):
    """Require the authenticated user to hold one of `roles`."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Ensure @require_auth was called first
            if not _is_authenticated():
                return failure("Access token required", 401)

            if g.current_user.role not in roles:
                if roles == ("admin",):
                    return failure("Admin access required", 403)
                return failure("Access denied", 403)

            return f(*args, **kwargs)

        return decorated_function
    return decorator


require_admin = require_role("admin")


def require_admin_or_self(param: str = "user_id"):
    """Allow admins, or a user acting on their own record (URL kwarg `param`)."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return failure("Access token required", 401)

            user = g.current_user
            if not user.is_admin and kwargs.get(param) != user.userid:
                return failure("Access denied", 403)

            return f(*args, **kwargs)

        return decorated_function
    return decorator
