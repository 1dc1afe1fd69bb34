# Overview: Request authentication and role decorators for API routes.

from functools import wraps
from flask import request, jsonify, g, current_app

from .extensions import get_services
from .services.session_service import ForbiddenError, require_role as check_role


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization", "")
    kind, _, token = auth_header.partition(" ")
    if kind != "Bearer" or not token:
        return None
    return token


def require_auth(f):
    """
    Require a valid bearer token and establish tenant context.

    Sets the following Flask g attributes:
    - g.session: the immutable Session behind the token
    - g.store_id: the session's store (tenant) id
    - g.token: the raw bearer token (needed for logout)

    Returns 401 if the header is missing or the token does not resolve.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if not token:
            return jsonify({"error": "Missing Bearer token"}), 401

        session = get_services().sessions.validate_session(token)
        if not session:
            return jsonify({"error": "Invalid token"}), 401

        g.session = session
        g.store_id = session.store_id
        g.token = token

        return f(*args, **kwargs)

    return decorated_function


def require_role(role: str):
    """
    Require the authenticated session to hold a role.

    Must be stacked below @require_auth.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not hasattr(g, "session"):
                return jsonify({"error": "Authentication required"}), 401

            try:
                check_role(g.session, role)
            except ForbiddenError as exc:
                current_app.logger.warning(
                    "Forbidden %s %s for user %s (role %s) in store %s",
                    request.method, request.path, g.session.user_id, g.session.role, g.store_id,
                )
                return jsonify({"error": str(exc)}), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
