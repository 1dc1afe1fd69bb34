# backend/stampcard/__init__.py
import logging

from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException

from .config import Config
from .extensions import init_services


def _log_level(value) -> int:
    """LOG_LEVEL name (any case) or number; unknown names fall back to INFO."""
    if isinstance(value, int):
        return value
    level = logging.getLevelName(str(value).strip().upper())
    return level if isinstance(level, int) else logging.INFO


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.logger.setLevel(_log_level(app.config["LOG_LEVEL"]))

    # In-memory state: stores, users, sessions, ledger, audit, rate windows
    init_services(app)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.stores import stores_bp
    from .routes.auth import auth_bp
    from .routes.wallets import wallets_bp
    from .routes.audit import audit_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(stores_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(wallets_bp)
    app.register_blueprint(audit_bp)

    @app.errorhandler(HTTPException)
    def json_http_error(exc: HTTPException):
        # 404/405/413 and friends answer in the same {"error": ...} shape
        return jsonify({"error": exc.description or exc.name}), exc.code

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ALLOWED_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
