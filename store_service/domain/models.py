"""
Domain models for the store service.

Defines the `Store` record persisted in the `stores` table, the `StoreUpdate`
field set accepted by updates, the `QuerySpec` filter submitted to the
scatter-gather executor, and the `KeyStrategy` that decides how store
identifiers are typed and partitioned.
"""
from __future__ import annotations

import enum
import uuid
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from store_service.errors import InvalidInputError

StoreId = Union[int, uuid.UUID]


class KeyStrategy(str, enum.Enum):
    """
    Identifier schema of the `stores` table.

    - ``int``: single integer primary key, `area_id` is a regular column.
    - ``composite``: `area_id` partition key with `id` as clustering key.
    - ``uuid``: single UUID primary key, assigned on create when omitted.
    """

    INT = "int"
    COMPOSITE = "composite"
    UUID = "uuid"

    @property
    def uses_uuid(self) -> bool:
        return self is KeyStrategy.UUID

    @property
    def partitioned_by_area(self) -> bool:
        return self is KeyStrategy.COMPOSITE

    def parse_id(self, raw: Any) -> StoreId:
        """
        Parse an identifier coming from a request path or body.

        Raises
        ------
        InvalidInputError
            If the value does not match the identifier type of this strategy.
        """
        if self.uses_uuid:
            if isinstance(raw, uuid.UUID):
                return raw
            try:
                return uuid.UUID(str(raw))
            except ValueError:
                raise InvalidInputError("invalid id") from None
        if isinstance(raw, bool):
            raise InvalidInputError("invalid id")
        if isinstance(raw, int):
            return raw
        try:
            return int(str(raw))
        except ValueError:
            raise InvalidInputError("invalid id") from None

    def assign_id(self, store: "Store") -> "Store":
        """Return the store with a valid identifier for this strategy."""
        if store.id is None:
            if not self.uses_uuid:
                raise InvalidInputError("id is required")
            return store.model_copy(update={"id": uuid.uuid4()})
        return store.model_copy(update={"id": self.parse_id(store.id)})


def parse_area_id(raw: Any) -> int:
    """Parse an area identifier from a request parameter."""
    try:
        return int(str(raw))
    except ValueError:
        raise InvalidInputError("invalid area ID") from None


class Store(BaseModel):
    """
    Representation of a single row in the `stores` table.
    """

    id: Optional[StoreId] = Field(None, description="Store identifier (int or UUID).")
    area_id: int = Field(0, alias="areaId", description="Area the store belongs to.")
    name: str = Field("", description="Store display name.")
    location: str = Field("", description="Free-text store location.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class StoreUpdate(BaseModel):
    """
    Mutable fields of a store. Only fields present in the request are written.
    """

    id: Optional[StoreId] = None
    area_id: Optional[int] = Field(None, alias="areaId")
    name: Optional[str] = None
    location: Optional[str] = None

    model_config = {"populate_by_name": True}

    def changes(self) -> Dict[str, Any]:
        """Column values to write, keyed by column name."""
        fields = self.model_dump(exclude_unset=True, exclude={"id"})
        return {key: value for key, value in fields.items() if value is not None}


class QuerySpec(BaseModel):
    """
    One search submitted to the scatter-gather executor.

    `area_id` is an equality filter on the partition/grouping key; `name` and
    `location` are case-sensitive substring predicates. `None` (or an empty
    string) disables a predicate.
    """

    area_id: Optional[int] = None
    name: Optional[str] = None
    location: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("area_id")
    @classmethod
    def _negative_means_any_area(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            return None
        return value

    @field_validator("name", "location")
    @classmethod
    def _empty_means_no_predicate(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    def matches(self, store: Store) -> bool:
        """Evaluate the whole spec against a store (used by in-memory backends)."""
        if self.area_id is not None and store.area_id != self.area_id:
            return False
        return self.matches_text(store)

    def matches_text(self, store: Store) -> bool:
        """Evaluate only the substring predicates."""
        if self.name is not None and self.name not in store.name:
            return False
        if self.location is not None and self.location not in store.location:
            return False
        return True


def search_specs(area_ids: List[int], name: str = "", location: str = "") -> List[QuerySpec]:
    """
    One spec per requested area. A negative area id means "all areas" and
    collapses the request to a single unfiltered spec; repeated ids are sent
    once so the specs stay disjoint.
    """
    if not area_ids or any(area_id < 0 for area_id in area_ids):
        return [QuerySpec(area_id=None, name=name, location=location)]
    return [
        QuerySpec(area_id=area_id, name=name, location=location)
        for area_id in dict.fromkeys(area_ids)
    ]


__all__ = [
    "KeyStrategy",
    "QuerySpec",
    "Store",
    "StoreId",
    "StoreUpdate",
    "parse_area_id",
    "search_specs",
]
