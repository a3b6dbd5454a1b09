"""
Infrastructure package for the store service.

Centralizes storage concerns (session lifecycle, schema bootstrap, store
repositories). Keep this layer focused on I/O and resource management,
decoupled from the HTTP layer and the scatter-gather executor.
"""

from store_service.infrastructure.backend import open_repository, seed_repository
from store_service.infrastructure.memory import InMemoryStoreRepository
from store_service.infrastructure.repository import CassandraStoreRepository, StoreRepository
from store_service.infrastructure.schema import bootstrap_schema, seed_stores
from store_service.infrastructure.session_factory import SessionManager

__all__ = [
    "CassandraStoreRepository",
    "InMemoryStoreRepository",
    "SessionManager",
    "StoreRepository",
    "bootstrap_schema",
    "open_repository",
    "seed_repository",
    "seed_stores",
]
