"""
Idempotent keyspace/table bootstrap for the `stores` table.

Run once at process start. Every statement is create-if-absent, so running
it against an initialized cluster is a no-op. Errors propagate: a failed
bootstrap is fatal to start-up.
"""

from __future__ import annotations

import re
from typing import List

from cassandra.cluster import Session

from store_service.config import Settings
from store_service.domain.models import KeyStrategy, Store
from store_service.utils.logging import get_logger

log = get_logger(__name__)

TABLE_NAME = "stores"

_IDENTIFIER = re.compile(r"^[A-Za-z][A-Za-z0-9_]{0,47}$")

SEED_STORES = (
    ("11111111-1111-1111-1111-111111111111", 1, "Store Alpha", "Downtown"),
    ("22222222-2222-2222-2222-222222222222", 2, "Store Beta", "Uptown"),
    ("33333333-3333-3333-3333-333333333333", 3, "Store Gamma", "Suburbs"),
)


def _check_identifier(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid CQL identifier: {name!r}")
    return name


def keyspace_ddl(keyspace: str, replication_factor: int) -> str:
    return (
        f"CREATE KEYSPACE IF NOT EXISTS {_check_identifier(keyspace)} "
        "WITH REPLICATION = {'class': 'SimpleStrategy', "
        f"'replication_factor': {int(replication_factor)}}}"
    )


def table_ddl(strategy: KeyStrategy) -> List[str]:
    """DDL statements creating the stores table for a key strategy."""
    if strategy is KeyStrategy.COMPOSITE:
        return [
            f"""CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
                id int,
                area_id int,
                name text,
                location text,
                PRIMARY KEY ((area_id), id)
            ) WITH CLUSTERING ORDER BY (id ASC)"""
        ]
    id_type = "uuid" if strategy.uses_uuid else "int"
    return [
        f"""CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
            id {id_type} PRIMARY KEY,
            area_id int,
            name text,
            location text
        )""",
        # Area lookups on a non-partition column need an index.
        f"CREATE INDEX IF NOT EXISTS {TABLE_NAME}_area_id_idx ON {TABLE_NAME} (area_id)",
    ]


def bootstrap_schema(session: Session, settings: Settings) -> None:
    """
    Create the keyspace and the stores table if absent, then bind the session
    to the keyspace.
    """
    strategy = KeyStrategy(settings.store_key_strategy)
    keyspace = settings.cassandra_keyspace

    session.execute(keyspace_ddl(keyspace, settings.cassandra_replication_factor))
    session.set_keyspace(keyspace)
    for statement in table_ddl(strategy):
        session.execute(statement)
    log.info(
        "Table '%s' is ready.",
        TABLE_NAME,
        extra={"keyspace": keyspace, "key_strategy": strategy.value},
    )


def seed_stores(strategy: KeyStrategy) -> List[Store]:
    """Fixed demo stores, with identifiers matching the key strategy."""
    stores = []
    for position, (uuid_id, area_id, name, location) in enumerate(SEED_STORES, start=1):
        store_id = uuid_id if strategy.uses_uuid else position
        stores.append(
            Store(id=strategy.parse_id(store_id), area_id=area_id, name=name, location=location)
        )
    return stores


__all__ = [
    "TABLE_NAME",
    "bootstrap_schema",
    "keyspace_ddl",
    "seed_stores",
    "table_ddl",
]
