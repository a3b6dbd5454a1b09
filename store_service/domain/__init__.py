"""
Domain package for the store service.

Exports the core domain models used by repositories, the scatter-gather
executor and the HTTP layer. Keep this package focused on data definitions and
validation concerns.
"""

from store_service.domain.models import (
    KeyStrategy,
    QuerySpec,
    Store,
    StoreId,
    StoreUpdate,
    parse_area_id,
    search_specs,
)

__all__ = [
    "KeyStrategy",
    "QuerySpec",
    "Store",
    "StoreId",
    "StoreUpdate",
    "parse_area_id",
    "search_specs",
]
