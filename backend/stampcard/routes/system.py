# backend/stampcard/routes/system.py
"""
System health and version endpoints.

State is in memory, so health reports component sizes rather than
connectivity.
"""

import sys
import time
from flask import Blueprint, current_app

from ..extensions import get_services
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)


def check_directory_health() -> dict:
    """Stores and users are loaded once; an empty directory cannot serve logins."""
    services = get_services()
    store_count = len(services.stores)
    user_count = len(services.users)

    if not store_count or not user_count:
        return {
            "status": "degraded",
            "warning": "Directory has no stores or no users",
            "details": {"stores": store_count, "users": user_count},
        }
    return {
        "status": "healthy",
        "details": {"stores": store_count, "users": user_count},
    }


def check_session_service_health() -> dict:
    sessions = get_services().sessions
    purged = sessions.purge_expired()
    return {
        "status": "healthy",
        "details": {
            "active_sessions": sessions.active_count(),
            "expired_purged": purged,
        },
    }


def check_ledger_health() -> dict:
    services = get_services()
    return {
        "status": "healthy",
        "details": {
            "wallets": services.ledger.wallet_count(),
            "audit_entries": services.audit.entry_count(),
            "rate_windows": services.rate_limiter.tracked_keys(),
        },
    }


@system_bp.get("/")
def index():
    return "Backend OK", 200, {"Content-Type": "text/plain; charset=utf-8"}


@system_bp.get("/health")
def health():
    """
    Component health check.

    Returns:
    - 200: healthy or degraded
    - 503: a check raised
    """
    start_time = time.time()

    checks = {}
    for name, check in (
        ("directory", check_directory_health),
        ("session_service", check_session_service_health),
        ("ledger", check_ledger_health),
    ):
        try:
            checks[name] = check()
        except Exception:
            current_app.logger.exception("%s health check failed", name)
            checks[name] = {"status": "unhealthy", "error": f"{name} error"}

    statuses = {check["status"] for check in checks.values()}
    if "unhealthy" in statuses:
        overall_status, http_status = "unhealthy", 503
    elif "degraded" in statuses:
        overall_status, http_status = "degraded", 200
    else:
        overall_status, http_status = "healthy", 200

    return {
        "status": overall_status,
        "timestamp": to_utc_z(utcnow()),
        "total_latency_ms": round((time.time() - start_time) * 1000, 2),
        "checks": checks,
    }, http_status


@system_bp.get("/version")
def version():
    env = "production" if not current_app.debug else "development"
    return {
        "api_version": "1.0.0",
        "environment": env,
        "python_version": sys.version.split()[0],
        "server_time": to_utc_z(utcnow()),
    }
