from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from store_service import __version__
from store_service.api.errors import register_error_handlers
from store_service.api.middleware import response_time_middleware
from store_service.api.routes import health_router, router
from store_service.config import Settings, get_settings
from store_service.infrastructure.backend import open_repository
from store_service.infrastructure.repository import StoreRepository
from store_service.scatter_gather import ScatterGatherExecutor
from store_service.utils.logging import get_logger

log = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[StoreRepository] = None,
) -> FastAPI:
    """Create the FastAPI application.

    When `repository` is given it is used as-is and its lifecycle belongs to
    the caller; otherwise the lifespan opens the backend selected by settings
    and closes it on shutdown.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if repository is not None:
            app.state.repository = repository
            yield
            return
        # Bootstrap errors propagate and abort start-up.
        with open_repository(settings) as opened:
            app.state.repository = opened
            log.info("Store service ready", extra={"backend": settings.store_backend})
            yield

    app_instance = FastAPI(
        title="Store Service",
        description="CRUD and concurrent search over stores kept in Cassandra.",
        version=__version__,
        lifespan=lifespan,
    )
    app_instance.state.settings = settings
    app_instance.state.executor = ScatterGatherExecutor(
        max_workers=settings.search_max_workers,
        timeout=settings.search_timeout_seconds,
        failure_policy=settings.search_failure_policy,
    )

    app_instance.middleware("http")(response_time_middleware)
    app_instance.include_router(health_router)
    app_instance.include_router(router)
    register_error_handlers(app_instance)

    return app_instance
