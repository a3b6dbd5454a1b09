"""
Pytest configuration for the store service.

Provides fixtures for:
- Settings override for unit and integration tests
- In-memory repositories seeded with a small, area-partitioned dataset
- A FastAPI test client wired to an in-memory repository
- Cassandra session management for integration tests
"""

from __future__ import annotations

import os
from typing import Generator, List

import pytest
from fastapi.testclient import TestClient

from store_service.api.app import create_app
from store_service.config import Settings
from store_service.domain.models import KeyStrategy, Store
from store_service.infrastructure.memory import InMemoryStoreRepository

STORES_PER_AREA = 2
AREAS = (0, 1)


def make_stores(areas=AREAS, per_area: int = STORES_PER_AREA) -> List[Store]:
    """Two stores per area with ids unique across areas."""
    stores = []
    for area_id in areas:
        for offset in range(per_area):
            store_id = area_id * 100 + offset + 1
            stores.append(
                Store(
                    id=store_id,
                    area_id=area_id,
                    name=f"Store {store_id}",
                    location="Downtown" if offset == 0 else "Uptown",
                )
            )
    return stores


@pytest.fixture
def store_factory():
    return make_stores


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings fixture pinned to the in-memory backend.
    """
    return Settings(store_backend="memory", store_key_strategy="int", log_level="DEBUG")


@pytest.fixture
def memory_repository() -> InMemoryStoreRepository:
    return InMemoryStoreRepository(KeyStrategy.INT, make_stores())


@pytest.fixture
def client(
    test_settings: Settings, memory_repository: InMemoryStoreRepository
) -> Generator[TestClient, None, None]:
    app = create_app(test_settings, repository=memory_repository)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="session")
def integration_settings() -> Settings:
    """
    Settings for integration tests.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        cassandra_hosts=os.getenv("CASSANDRA_HOSTS", "localhost"),
        cassandra_port=int(os.getenv("CASSANDRA_PORT", "9042")),
        cassandra_keyspace=os.getenv("CASSANDRA_TEST_KEYSPACE", "store_management_test"),
        store_backend="cassandra",
        store_key_strategy="composite",
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def cassandra_session(integration_settings: Settings):
    """
    Provide a session-scoped Cassandra session with the schema bootstrapped.

    Skips tests if no Cassandra node is reachable.
    """
    from cassandra.cluster import NoHostAvailable

    from store_service.infrastructure.schema import bootstrap_schema
    from store_service.infrastructure.session_factory import SessionManager

    manager = SessionManager(integration_settings)
    try:
        session = manager.open()
    except (NoHostAvailable, OSError):
        pytest.skip("Cassandra not available for integration tests")

    try:
        bootstrap_schema(session, integration_settings)
        yield session
    finally:
        manager.close()


@pytest.fixture
def clean_stores_table(cassandra_session):
    """
    Truncate the stores table before and after each test function.
    """
    cassandra_session.execute("TRUNCATE stores")
    yield
    cassandra_session.execute("TRUNCATE stores")
