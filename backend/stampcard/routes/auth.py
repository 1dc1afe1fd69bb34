# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/stampcard/routes/auth.py
"""
Store-first authentication routes.

A login names the store first; the session it creates is bound to that
store and the user's role for its whole lifetime.
"""

from flask import Blueprint, jsonify, g, current_app

from ..extensions import get_services
from ..decorators import require_auth
from ..services.auth_service import InvalidCredentialsError
from ..services.store_service import UnknownStoreError
from ..validation import ValidationError, require_fields
from ._helpers import json_body


auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/auth/login")
def login_route():
    """
    Authenticate user within a store and create a session token.

    Request body: {"storeId": "s1", "username": "staff1", "password": "..."}

    Returns 400 for missing fields or an unknown store, 401 for bad
    credentials.
    """
    # Read outside the try: an oversized body must surface as 413, not 500
    data = json_body()
    try:
        store_id, username, password = require_fields(data, "storeId", "username", "password")

        result = get_services().sessions.login(store_id, username, password)

        current_app.logger.info(
            "Login user %s (%s) in store %s", result.user.id, result.user.role, result.store.id
        )
        return jsonify(result.to_dict()), 200

    except (ValidationError, UnknownStoreError) as exc:
        return jsonify({"error": str(exc)}), 400
    except InvalidCredentialsError as exc:
        current_app.logger.warning("Failed login for %r in store %s", username, store_id)
        return jsonify({"error": str(exc)}), 401
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/auth/logout")
@require_auth
def logout_route():
    """Revoke the bearer token. Any valid token may log itself out."""
    get_services().sessions.revoke_session(g.token)
    current_app.logger.info("Logout user %s in store %s", g.session.user_id, g.store_id)
    return jsonify({"ok": True}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    store = get_services().stores.get_store(g.store_id)
    return jsonify({
        "user": g.session.to_dict(),
        "store": store.to_dict() if store else None,
    }), 200
