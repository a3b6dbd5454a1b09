"""
Exception hierarchy for the store service.

Repositories and the scatter-gather executor raise these; the HTTP layer maps
them to status codes in one place (see `store_service.api.errors`).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from store_service.scatter_gather import ScatterGatherResult


class StoreServiceError(Exception):
    """Base class for all service errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(StoreServiceError):
    """Lookup miss for a store identifier."""


class InvalidInputError(StoreServiceError):
    """Unparseable identifier or filter coming from a request."""


class AlreadyExistsError(StoreServiceError):
    """A store with the same key is already persisted."""


class CollaboratorError(StoreServiceError):
    """I/O, timeout, or driver-level failure of the storage collaborator."""


class PartialFailureError(StoreServiceError):
    """
    Some scatter-gather units failed (or the deadline expired).

    The collected result, including the records of the units that succeeded,
    is available on `result`.
    """

    def __init__(self, message: str, result: Optional["ScatterGatherResult"] = None) -> None:
        super().__init__(message)
        self.result = result


class AllQueriesFailedError(PartialFailureError):
    """Every dispatched scatter-gather unit failed."""


__all__ = [
    "StoreServiceError",
    "NotFoundError",
    "InvalidInputError",
    "AlreadyExistsError",
    "CollaboratorError",
    "PartialFailureError",
    "AllQueriesFailedError",
]
