"""
Stamp Transaction Service

Composes the rate limiter, wallet ledger and audit log into the two write
operations (earn, reset) plus the public balance read.

Write order for every request:
    authenticate -> authorize -> validate -> rate limit (earn) ->
    mutate ledger -> append audit -> respond

Authentication and authorization happen in the route decorators; by the
time a Session reaches this service it is trusted. Nothing is mutated
until every check has passed, so a failed request leaves no ledger change
and no audit entry behind.

MULTI-TENANT: store_id for writes always comes from the Session.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from .audit_service import EVENT_EARN, EVENT_RESET, AuditEntry, AuditLog
from .auth_service import ROLE_MANAGER
from .ledger_service import WalletLedger, calc_stamps_from_amount_cents
from .rate_limit_service import RateLimiter
from .session_service import Session, require_role
from .store_service import StoreDirectory
from ..time_utils import utcnow
from ..validation import ValidationError, parse_amount_cents, require_wallet_id


@dataclass(frozen=True)
class EarnResult:
    entry: AuditEntry
    stamp_cap: int

    def to_dict(self) -> dict:
        return {"ok": True, **self.entry.to_dict(), "stampCap": self.stamp_cap}


@dataclass(frozen=True)
class ResetResult:
    entry: AuditEntry
    stamp_cap: int

    def to_dict(self) -> dict:
        return {
            "ok": True,
            "storeId": self.entry.store_id,
            "walletId": self.entry.wallet_id,
            "stamps": 0,
            "stampCap": self.stamp_cap,
        }


class TransactionService:
    def __init__(
        self,
        stores: StoreDirectory,
        ledger: WalletLedger,
        audit: AuditLog,
        rate_limiter: RateLimiter,
        *,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.stores = stores
        self.ledger = ledger
        self.audit = audit
        self.rate_limiter = rate_limiter
        self._clock = clock

    def earn(self, session: Session, wallet_id: Any, amount_cents: Any) -> EarnResult:
        wallet_id = require_wallet_id(wallet_id)
        amount_cents = parse_amount_cents(amount_cents)

        store_id = session.store_id
        self.rate_limiter.check(store_id, session.user_id)

        stamps_added = calc_stamps_from_amount_cents(amount_cents)

        with self.ledger.store_lock(store_id):
            stamps_after = self.ledger.apply_delta(store_id, wallet_id, stamps_added)
            entry = self.audit.append(store_id, AuditEntry(
                type=EVENT_EARN,
                store_id=store_id,
                wallet_id=wallet_id,
                actor=session.actor(),
                ts=self._clock(),
                details={
                    "amountCents": amount_cents,
                    "stampsAdded": stamps_added,
                    "stampsAfter": stamps_after,
                },
            ))

        return EarnResult(entry=entry, stamp_cap=self.ledger.stamp_cap)

    def reset(self, session: Session, wallet_id: Any) -> ResetResult:
        require_role(session, ROLE_MANAGER)
        wallet_id = require_wallet_id(wallet_id)

        store_id = session.store_id
        with self.ledger.store_lock(store_id):
            stamps_before = self.ledger.reset_wallet(store_id, wallet_id)
            entry = self.audit.append(store_id, AuditEntry(
                type=EVENT_RESET,
                store_id=store_id,
                wallet_id=wallet_id,
                actor=session.actor(),
                ts=self._clock(),
                details={"stampsBefore": stamps_before, "stampsAfter": 0},
            ))

        return ResetResult(entry=entry, stamp_cap=self.ledger.stamp_cap)

    def get_ledger(self, store_id: Any, wallet_id: Any) -> dict:
        """
        Public balance lookup.

        No session required, but the store must be named explicitly and
        exist. Never creates a ledger entry.
        """
        if not isinstance(store_id, str) or not store_id:
            raise ValidationError("storeId query required")
        wallet_id = require_wallet_id(wallet_id)
        store = self.stores.require_store(store_id)

        return {
            "walletId": wallet_id,
            "storeId": store.id,
            "stamps": self.ledger.get_balance(store.id, wallet_id),
            "stampCap": self.ledger.stamp_cap,
        }
