from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

"""
Stamp Ledger Invariants (authoritative)

- Balances are keyed by (store_id, wallet_id); a store never sees another
  store's wallets.
- 0 <= stamps <= STAMP_CAP after every operation.
- Entries are created lazily by a mutation; reads never create entries.
- Entries are never deleted. A reset writes 0.
- Each store has its own re-entrant lock. Callers that must make a ledger
  update and a follow-up write atomic (e.g. the audit append) hold
  store_lock() around both.
"""

STAMP_CAP = 10
EURO_PER_STAMP = 10


def calc_stamps_from_amount_cents(amount_cents: int) -> int:
    """
    One stamp per full EURO_PER_STAMP euros spent.

    Floors the euro amount, so 1099 cents (10.99 EUR) earns 1 stamp and
    999 cents earns none.
    """
    return (amount_cents // 100) // EURO_PER_STAMP


class WalletLedger:
    def __init__(self, stamp_cap: int = STAMP_CAP):
        self.stamp_cap = stamp_cap
        self._balances: dict[str, dict[str, int]] = {}
        self._store_locks: dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, store_id: str) -> threading.RLock:
        with self._guard:
            lock = self._store_locks.get(store_id)
            if lock is None:
                lock = threading.RLock()
                self._store_locks[store_id] = lock
            return lock

    @contextmanager
    def store_lock(self, store_id: str) -> Iterator[None]:
        with self._lock_for(store_id):
            yield

    def _clamp(self, stamps: int) -> int:
        return min(self.stamp_cap, max(0, stamps))

    def get_balance(self, store_id: str, wallet_id: str) -> int:
        with self.store_lock(store_id):
            return self._balances.get(store_id, {}).get(wallet_id, 0)

    def apply_delta(self, store_id: str, wallet_id: str, delta: int) -> int:
        """Add delta (clamped to [0, stamp_cap]) and return the new balance."""
        with self.store_lock(store_id):
            wallets = self._balances.setdefault(store_id, {})
            new_balance = self._clamp(wallets.get(wallet_id, 0) + delta)
            wallets[wallet_id] = new_balance
            return new_balance

    def reset_wallet(self, store_id: str, wallet_id: str) -> int:
        """Set the balance to 0 and return the previous balance."""
        with self.store_lock(store_id):
            wallets = self._balances.setdefault(store_id, {})
            previous = wallets.get(wallet_id, 0)
            wallets[wallet_id] = 0
            return previous

    def wallet_count(self, store_id: str | None = None) -> int:
        with self._guard:
            store_ids = [store_id] if store_id is not None else list(self._balances)
        total = 0
        for sid in store_ids:
            with self.store_lock(sid):
                total += len(self._balances.get(sid, {}))
        return total
