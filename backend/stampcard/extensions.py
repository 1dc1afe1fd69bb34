# Overview: Per-application service instances that own all in-memory state.

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from flask import Flask, current_app

from .services.audit_service import AuditLog
from .services.auth_service import UserDirectory, default_users, load_directory
from .services.ledger_service import WalletLedger
from .services.rate_limit_service import RateLimiter
from .services.session_service import SessionRegistry
from .services.store_service import StoreDirectory
from .services.transaction_service import TransactionService


EXTENSION_KEY = "stampcard"


@dataclass
class Services:
    stores: StoreDirectory
    users: UserDirectory
    sessions: SessionRegistry
    rate_limiter: RateLimiter
    ledger: WalletLedger
    audit: AuditLog
    transactions: TransactionService


def init_services(app: Flask) -> Services:
    """
    Build fresh, empty state for one application.

    Nothing is persisted; a restart starts from the directory again.
    """
    rounds = app.config["BCRYPT_ROUNDS"]
    directory_file = app.config.get("DIRECTORY_FILE")
    if directory_file:
        store_list, user_list = load_directory(directory_file, rounds)
        stores = StoreDirectory(store_list)
    else:
        stores = StoreDirectory()
        user_list = default_users(rounds)

    ttl_seconds = app.config["SESSION_TTL_SECONDS"]
    ttl = timedelta(seconds=ttl_seconds) if ttl_seconds > 0 else None

    users = UserDirectory(user_list)
    ledger = WalletLedger()
    audit = AuditLog()
    rate_limiter = RateLimiter()

    services = Services(
        stores=stores,
        users=users,
        sessions=SessionRegistry(stores, users, ttl=ttl),
        rate_limiter=rate_limiter,
        ledger=ledger,
        audit=audit,
        transactions=TransactionService(stores, ledger, audit, rate_limiter),
    )
    app.extensions[EXTENSION_KEY] = services
    return services


def get_services() -> Services:
    return current_app.extensions[EXTENSION_KEY]
