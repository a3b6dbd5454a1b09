"""HTTP surface of the store service (FastAPI)."""

from store_service.api.app import create_app

__all__ = ["create_app"]
