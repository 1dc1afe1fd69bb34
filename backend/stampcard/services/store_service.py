from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


class UnknownStoreError(Exception):
    """Raised when a store id is not registered."""
    pass


@dataclass(frozen=True)
class Store:
    id: str
    name: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}


DEFAULT_STORES = (
    Store(id="s1", name="Shop A"),
    Store(id="s2", name="Shop B"),
)


class StoreDirectory:
    """
    Static registry of tenants.

    Loaded once at startup and never mutated, so lookups need no lock.
    """

    def __init__(self, stores: Iterable[Store] = DEFAULT_STORES):
        self._stores: dict[str, Store] = {}
        for store in stores:
            if store.id in self._stores:
                raise ValueError(f"Duplicate store id: {store.id}")
            self._stores[store.id] = store

    def get_store(self, store_id: str) -> Store | None:
        return self._stores.get(store_id)

    def require_store(self, store_id: str) -> Store:
        store = self._stores.get(store_id)
        if not store:
            raise UnknownStoreError("Unknown storeId")
        return store

    def list_stores(self) -> list[Store]:
        return list(self._stores.values())

    def __contains__(self, store_id: object) -> bool:
        return store_id in self._stores

    def __len__(self) -> int:
        return len(self._stores)
