"""
Per-store audit trail for ledger mutations.

- Append-only: entries are immutable and never updated.
- Bounded: each store keeps its newest AUDIT_CAPACITY entries; older ones
  fall off the end.
- Read order is newest first.
- No authorization here; routes decide who may read.
"""

from __future__ import annotations

import secrets
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping

from ..time_utils import to_utc_z


AUDIT_CAPACITY = 200

EVENT_EARN = "EARN"
EVENT_RESET = "RESET"


@dataclass(frozen=True)
class AuditEntry:
    type: str
    store_id: str
    wallet_id: str
    actor: Mapping
    ts: datetime
    details: Mapping = field(default_factory=dict)
    id: str = field(default_factory=lambda: secrets.token_hex(8))

    def __post_init__(self):
        # Read-only copies; history cannot be edited through a listed entry
        object.__setattr__(self, "actor", MappingProxyType(dict(self.actor)))
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ts": to_utc_z(self.ts),
            "type": self.type,
            "storeId": self.store_id,
            "walletId": self.wallet_id,
            **self.details,
            "actor": dict(self.actor),
        }


class AuditLog:
    def __init__(self, capacity: int = AUDIT_CAPACITY):
        self.capacity = capacity
        self._entries: dict[str, deque[AuditEntry]] = {}
        self._lock = threading.Lock()

    def append(self, store_id: str, entry: AuditEntry) -> AuditEntry:
        if entry.store_id != store_id:
            raise ValueError(f"Audit entry for store {entry.store_id} appended to {store_id}")

        with self._lock:
            entries = self._entries.get(store_id)
            if entries is None:
                entries = deque(maxlen=self.capacity)
                self._entries[store_id] = entries
            # maxlen drops from the right, i.e. the oldest entry
            entries.appendleft(entry)
        return entry

    def list_entries(self, store_id: str) -> list[AuditEntry]:
        with self._lock:
            return list(self._entries.get(store_id, ()))

    def entry_count(self, store_id: str | None = None) -> int:
        with self._lock:
            if store_id is not None:
                return len(self._entries.get(store_id, ()))
            return sum(len(entries) for entries in self._entries.values())
