"""
Storage collaborator for the store service.

`StoreRepository` is the narrow interface the HTTP layer and the
scatter-gather executor consume. `CassandraStoreRepository` implements it with
one parameterized CQL statement per operation; writes that must detect a
missing or existing key use lightweight transactions (`IF [NOT] EXISTS`).

Driver failures are re-raised as `CollaboratorError`; lookup misses as
`NotFoundError`.
"""

from __future__ import annotations

import contextlib
from typing import Any, Generator, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from cassandra import DriverException, InvalidRequest
from cassandra.cluster import NoHostAvailable, Session
from cassandra.query import BatchStatement, BatchType, SimpleStatement

from store_service.domain.models import KeyStrategy, QuerySpec, Store, StoreId, StoreUpdate
from store_service.errors import (
    AlreadyExistsError,
    CollaboratorError,
    InvalidInputError,
    NotFoundError,
)
from store_service.infrastructure.schema import TABLE_NAME
from store_service.utils.logging import get_logger

log = get_logger(__name__)

Page = Tuple[List[Store], Optional[str]]

_COLUMNS = "id, area_id, name, location"
_INSERT = f"INSERT INTO {TABLE_NAME} ({_COLUMNS}) VALUES (%s, %s, %s, %s)"


@runtime_checkable
class StoreRepository(Protocol):
    """
    Operations every store backend must provide.

    Identifiers are already parsed for the repository's key strategy.
    `area_id` is required on keyed operations only by the composite strategy.
    """

    strategy: KeyStrategy

    def execute_query(self, spec: QuerySpec) -> List[Store]:
        ...

    def list_stores(self, limit: int, page_token: Optional[str] = None) -> Page:
        ...

    def get_by_id(self, store_id: StoreId, area_id: Optional[int] = None) -> Store:
        ...

    def insert(self, store: Store) -> Store:
        ...

    def insert_batch(self, stores: Sequence[Store]) -> List[Store]:
        ...

    def update_by_id(
        self, store_id: StoreId, fields: StoreUpdate, area_id: Optional[int] = None
    ) -> Store:
        ...

    def delete_by_id(self, store_id: StoreId, area_id: Optional[int] = None) -> None:
        ...


def _to_store(row: Any) -> Store:
    return Store(
        id=row.id,
        area_id=row.area_id if row.area_id is not None else 0,
        name=row.name or "",
        location=row.location or "",
    )


@contextlib.contextmanager
def _translate_errors(operation: str) -> Generator[None, None, None]:
    try:
        yield
    except (DriverException, NoHostAvailable) as exc:
        log.error("Cassandra %s failed: %s", operation, exc, extra={"operation": operation})
        raise CollaboratorError(f"{operation} failed: {exc}") from exc


class CassandraStoreRepository:
    """
    `StoreRepository` backed by a Cassandra session.

    Parameters
    ----------
    session : cassandra.cluster.Session
        A session bound to the service keyspace; shared across threads.
    strategy : KeyStrategy
        Identifier schema the table was created with.
    fetch_size : int
        Driver page size for multi-row reads.
    """

    def __init__(self, session: Session, strategy: KeyStrategy, fetch_size: int = 5000) -> None:
        self._session = session
        self.strategy = strategy
        self.fetch_size = fetch_size

    def _key_clause(
        self, store_id: StoreId, area_id: Optional[int]
    ) -> Tuple[str, Tuple[Any, ...]]:
        if self.strategy.partitioned_by_area:
            if area_id is None:
                raise InvalidInputError("area ID is required")
            return "area_id = %s AND id = %s", (area_id, store_id)
        return "id = %s", (store_id,)

    def execute_query(self, spec: QuerySpec) -> List[Store]:
        """
        Stores matching a spec.

        The area predicate is evaluated by Cassandra (partition key or the
        area index); substring predicates are applied to the returned rows.
        """
        cql = f"SELECT {_COLUMNS} FROM {TABLE_NAME}"
        params: Tuple[Any, ...] = ()
        if spec.area_id is not None:
            cql += " WHERE area_id = %s"
            params = (spec.area_id,)
        statement = SimpleStatement(cql, fetch_size=self.fetch_size)
        with _translate_errors("query"):
            rows = self._session.execute(statement, params)
            stores = [_to_store(row) for row in rows]
        return [store for store in stores if spec.matches_text(store)]

    def list_stores(self, limit: int, page_token: Optional[str] = None) -> Page:
        """
        One page of stores and the token of the next page (None on the last page).
        """
        paging_state = None
        if page_token:
            try:
                paging_state = bytes.fromhex(page_token)
            except ValueError:
                raise InvalidInputError("invalid page token") from None
        statement = SimpleStatement(f"SELECT {_COLUMNS} FROM {TABLE_NAME}", fetch_size=limit)
        with _translate_errors("list"):
            try:
                result = self._session.execute(statement, paging_state=paging_state)
            except InvalidRequest:
                if paging_state is None:
                    raise
                # Well-formed hex that the server does not accept as a paging state.
                raise InvalidInputError("invalid page token") from None
            stores = [_to_store(row) for row in result.current_rows]
        next_state = result.paging_state
        return stores, next_state.hex() if next_state else None

    def get_by_id(self, store_id: StoreId, area_id: Optional[int] = None) -> Store:
        where, params = self._key_clause(store_id, area_id)
        with _translate_errors("get"):
            row = self._session.execute(
                f"SELECT {_COLUMNS} FROM {TABLE_NAME} WHERE {where}", params
            ).one()
        if row is None:
            raise NotFoundError("store not found")
        return _to_store(row)

    def insert(self, store: Store) -> Store:
        store = self.strategy.assign_id(store)
        with _translate_errors("insert"):
            result = self._session.execute(
                _INSERT + " IF NOT EXISTS",
                (store.id, store.area_id, store.name, store.location),
            )
        if not result.was_applied:
            raise AlreadyExistsError("store with this ID already exists")
        return store

    def insert_batch(self, stores: Sequence[Store]) -> List[Store]:
        """Insert all stores in one logged batch (upsert semantics)."""
        prepared = [self.strategy.assign_id(store) for store in stores]
        if not prepared:
            return []
        batch = BatchStatement(batch_type=BatchType.LOGGED)
        for store in prepared:
            batch.add(_INSERT, (store.id, store.area_id, store.name, store.location))
        with _translate_errors("batch insert"):
            self._session.execute(batch)
        log.info("Batch inserted %d store(s)", len(prepared), extra={"records": len(prepared)})
        return prepared

    def update_by_id(
        self, store_id: StoreId, fields: StoreUpdate, area_id: Optional[int] = None
    ) -> Store:
        changes = fields.changes()
        if self.strategy.partitioned_by_area:
            # area_id is part of the primary key and cannot be SET.
            key_area = changes.pop("area_id", None)
            area_id = area_id if area_id is not None else key_area
        if not changes:
            raise InvalidInputError("no fields to update")
        where, key_params = self._key_clause(store_id, area_id)
        assignments = ", ".join(f"{column} = %s" for column in changes)
        with _translate_errors("update"):
            result = self._session.execute(
                f"UPDATE {TABLE_NAME} SET {assignments} WHERE {where} IF EXISTS",
                tuple(changes.values()) + key_params,
            )
        if not result.was_applied:
            raise NotFoundError("store not found")
        return self.get_by_id(store_id, area_id)

    def delete_by_id(self, store_id: StoreId, area_id: Optional[int] = None) -> None:
        where, params = self._key_clause(store_id, area_id)
        with _translate_errors("delete"):
            result = self._session.execute(
                f"DELETE FROM {TABLE_NAME} WHERE {where} IF EXISTS", params
            )
        if not result.was_applied:
            raise NotFoundError("store not found")


__all__ = ["CassandraStoreRepository", "Page", "StoreRepository"]
