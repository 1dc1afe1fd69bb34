# Overview: Flask API routes for wallet balances, earning and resets; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g, current_app

from ..extensions import get_services
from ..decorators import require_auth, require_role
from ..services.auth_service import ROLE_MANAGER
from ..services.rate_limit_service import RateLimitedError
from ..services.session_service import ForbiddenError
from ..services.store_service import UnknownStoreError
from ..validation import ValidationError
from ._helpers import json_body


wallets_bp = Blueprint("wallets", __name__)


@wallets_bp.get("/ledger/<wallet_id>")
def get_ledger_route(wallet_id: str):
    """
    Public balance lookup for customers.

    No token, but storeId is required: a wallet only exists inside a store.
    """
    try:
        ledger = get_services().transactions.get_ledger(request.args.get("storeId"), wallet_id)
        return jsonify(ledger), 200
    except (ValidationError, UnknownStoreError) as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception:
        current_app.logger.exception("Failed to load ledger")
        return jsonify({"error": "Internal server error"}), 500


@wallets_bp.post("/earn")
@require_auth
def earn_route():
    """
    Record a purchase and award stamps.

    Request body: {"walletId": "w-123", "amountCents": 2599}

    The store is taken from the session, never from the body.
    """
    data = json_body()
    try:
        result = get_services().transactions.earn(g.session, data.get("walletId"), data.get("amountCents"))
        return jsonify(result.to_dict()), 200
    except ValidationError as exc:
        return jsonify({"error": str(exc)}), 400
    except RateLimitedError as exc:
        current_app.logger.warning("Rate limit hit by user %s in store %s", g.session.user_id, g.store_id)
        response = jsonify({"error": str(exc)})
        if exc.retry_after_seconds:
            response.headers["Retry-After"] = str(exc.retry_after_seconds)
        return response, 429
    except Exception:
        current_app.logger.exception("Failed to record earn")
        return jsonify({"error": "Internal server error"}), 500


@wallets_bp.post("/wallet/reset")
@require_auth
@require_role(ROLE_MANAGER)
def reset_wallet_route():
    """Manager-only: set a wallet in the manager's store back to 0 stamps."""
    data = json_body()
    try:
        result = get_services().transactions.reset(g.session, data.get("walletId"))
        current_app.logger.info(
            "Wallet %s reset in store %s by user %s (was %s stamps)",
            result.entry.wallet_id, g.store_id, g.session.user_id, result.entry.details["stampsBefore"],
        )
        return jsonify(result.to_dict()), 200
    except ValidationError as exc:
        return jsonify({"error": str(exc)}), 400
    except ForbiddenError as exc:
        return jsonify({"error": str(exc)}), 403
    except Exception:
        current_app.logger.exception("Failed to reset wallet")
        return jsonify({"error": "Internal server error"}), 500
