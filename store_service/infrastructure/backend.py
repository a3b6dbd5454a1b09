"""
Backend selection: turn settings into a ready-to-use `StoreRepository`.

`open_repository()` is the one place where the process-scoped storage handle
is created and torn down. The Cassandra backend connects, bootstraps the
schema and optionally seeds demo data; the memory backend needs neither.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Optional

from store_service.config import Settings, get_settings
from store_service.domain.models import KeyStrategy
from store_service.errors import StoreServiceError
from store_service.infrastructure.memory import InMemoryStoreRepository
from store_service.infrastructure.repository import CassandraStoreRepository, StoreRepository
from store_service.infrastructure.schema import bootstrap_schema, seed_stores
from store_service.infrastructure.session_factory import SessionManager
from store_service.utils.logging import get_logger

log = get_logger(__name__)


def seed_repository(repository: StoreRepository) -> int:
    """
    Insert the demo stores, skipping (and logging) the ones that fail.

    Returns the number of stores written.
    """
    written = 0
    for store in seed_stores(repository.strategy):
        try:
            repository.insert(store)
        except StoreServiceError as exc:
            log.warning("Failed to seed store %s: %s", store.name, exc.message)
            continue
        written += 1
        log.info("Seeded store: %s", store.name)
    return written


@contextmanager
def open_repository(
    settings: Optional[Settings] = None,
) -> Generator[StoreRepository, None, None]:
    """
    Yield the repository selected by `STORE_BACKEND`, closing it on exit.

    Connection and bootstrap errors propagate; callers treat them as fatal.
    """
    settings = settings or get_settings()
    strategy = KeyStrategy(settings.store_key_strategy)

    if settings.store_backend == "memory":
        repository: StoreRepository = InMemoryStoreRepository(strategy)
        log.info("Using in-memory store backend", extra={"key_strategy": strategy.value})
        if settings.seed_on_startup:
            seed_repository(repository)
        yield repository
        return

    manager = SessionManager(settings)
    session = manager.open()
    try:
        bootstrap_schema(session, settings)
        repository = CassandraStoreRepository(session, strategy)
        if settings.seed_on_startup:
            seed_repository(repository)
        yield repository
    finally:
        manager.close()


__all__ = ["open_repository", "seed_repository"]
