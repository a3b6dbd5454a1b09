"""
Store Service - CRUD and concurrent search over stores kept in Cassandra.

This package provides:

- A REST API (FastAPI) exposing create/read/update/delete over stores
- A scatter-gather executor that runs independent searches concurrently and
  merges their results with an explicit failure policy
- Cassandra and in-memory store repositories behind one narrow interface
- A Typer CLI for serving, bootstrapping, seeding and ad-hoc searches
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from store_service.config import Settings, get_settings
from store_service.domain.models import KeyStrategy, QuerySpec, Store, StoreUpdate
from store_service.errors import (
    AllQueriesFailedError,
    AlreadyExistsError,
    CollaboratorError,
    InvalidInputError,
    NotFoundError,
    PartialFailureError,
    StoreServiceError,
)
from store_service.scatter_gather import ScatterGatherExecutor, ScatterGatherResult, UnitFailure
from store_service.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "KeyStrategy",
    "QuerySpec",
    "Store",
    "StoreUpdate",
    # Errors
    "StoreServiceError",
    "NotFoundError",
    "InvalidInputError",
    "AlreadyExistsError",
    "CollaboratorError",
    "PartialFailureError",
    "AllQueriesFailedError",
    # Scatter-gather
    "ScatterGatherExecutor",
    "ScatterGatherResult",
    "UnitFailure",
    # Logging
    "configure_logging",
    "get_logger",
]
