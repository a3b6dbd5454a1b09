"""
In-memory `StoreRepository` used by tests and the `memory` backend.

Mirrors the Cassandra repository's semantics (key strategies, conflict and
not-found conditions, token paging) over a dict guarded by a lock.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from store_service.domain.models import KeyStrategy, QuerySpec, Store, StoreId, StoreUpdate
from store_service.errors import AlreadyExistsError, InvalidInputError, NotFoundError
from store_service.infrastructure.repository import Page

Key = Tuple[Optional[int], StoreId]


class InMemoryStoreRepository:
    def __init__(
        self, strategy: KeyStrategy = KeyStrategy.INT, stores: Iterable[Store] = ()
    ) -> None:
        self.strategy = strategy
        self._lock = threading.Lock()
        self._rows: Dict[Key, Store] = {}
        for store in stores:
            store = strategy.assign_id(store)
            self._rows[self._key(store.id, store.area_id)] = store

    def _key(self, store_id: StoreId, area_id: Optional[int]) -> Key:
        if self.strategy.partitioned_by_area:
            if area_id is None:
                raise InvalidInputError("area ID is required")
            return area_id, store_id
        return None, store_id

    def __len__(self) -> int:
        return len(self._rows)

    def execute_query(self, spec: QuerySpec) -> List[Store]:
        with self._lock:
            return [store for store in self._rows.values() if spec.matches(store)]

    def list_stores(self, limit: int, page_token: Optional[str] = None) -> Page:
        offset = 0
        if page_token:
            try:
                offset = int(page_token, 16)
            except ValueError:
                raise InvalidInputError("invalid page token") from None
        with self._lock:
            rows = list(self._rows.values())
        page = rows[offset : offset + limit]
        end = offset + len(page)
        return page, f"{end:08x}" if end < len(rows) else None

    def get_by_id(self, store_id: StoreId, area_id: Optional[int] = None) -> Store:
        key = self._key(store_id, area_id)
        with self._lock:
            store = self._rows.get(key)
        if store is None:
            raise NotFoundError("store not found")
        return store

    def insert(self, store: Store) -> Store:
        store = self.strategy.assign_id(store)
        key = self._key(store.id, store.area_id)
        with self._lock:
            if key in self._rows:
                raise AlreadyExistsError("store with this ID already exists")
            self._rows[key] = store
        return store

    def insert_batch(self, stores: Sequence[Store]) -> List[Store]:
        prepared = [self.strategy.assign_id(store) for store in stores]
        with self._lock:
            for store in prepared:
                self._rows[self._key(store.id, store.area_id)] = store
        return prepared

    def update_by_id(
        self, store_id: StoreId, fields: StoreUpdate, area_id: Optional[int] = None
    ) -> Store:
        changes = fields.changes()
        if self.strategy.partitioned_by_area:
            key_area = changes.pop("area_id", None)
            area_id = area_id if area_id is not None else key_area
        if not changes:
            raise InvalidInputError("no fields to update")
        key = self._key(store_id, area_id)
        with self._lock:
            current = self._rows.get(key)
            if current is None:
                raise NotFoundError("store not found")
            updated = current.model_copy(update=changes)
            self._rows[key] = updated
        return updated

    def delete_by_id(self, store_id: StoreId, area_id: Optional[int] = None) -> None:
        key = self._key(store_id, area_id)
        with self._lock:
            if self._rows.pop(key, None) is None:
                raise NotFoundError("store not found")


__all__ = ["InMemoryStoreRepository"]
