# Overview: Flask API routes for store listing; parses input and returns JSON responses.

from flask import Blueprint, jsonify

from ..extensions import get_services


stores_bp = Blueprint("stores", __name__)


@stores_bp.get("/stores")
def list_stores():
    stores = get_services().stores.list_stores()
    return jsonify({"stores": [store.to_dict() for store in stores]}), 200
