# Overview: Flask API routes for the audit trail; parses input and returns JSON responses.

from flask import Blueprint, jsonify, g

from ..extensions import get_services
from ..decorators import require_auth, require_role
from ..services.auth_service import ROLE_MANAGER


audit_bp = Blueprint("audit", __name__)


@audit_bp.get("/audit")
@require_auth
@require_role(ROLE_MANAGER)
def list_audit_route():
    """Newest-first audit entries for the manager's own store only."""
    entries = get_services().audit.list_entries(g.store_id)
    return jsonify({
        "storeId": g.store_id,
        "items": [entry.to_dict() for entry in entries],
    }), 200
