"""HTTP routes for stores.

Every handler validates its identifiers at the boundary (malformed values
raise `InvalidInputError` before the repository is touched) and issues one
repository call; the search route fans out through the scatter-gather
executor.
"""

from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Body, Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse

from store_service.config import Settings
from store_service.domain.models import QuerySpec, Store, StoreUpdate, parse_area_id, search_specs
from store_service.errors import InvalidInputError
from store_service.infrastructure.repository import StoreRepository
from store_service.scatter_gather import ScatterGatherExecutor
from store_service.utils.logging import get_logger

log = get_logger(__name__)

router = APIRouter(prefix="/stores", tags=["stores"])
health_router = APIRouter(tags=["health"])


def get_repository(request: Request) -> StoreRepository:
    return request.app.state.repository


def get_executor(request: Request) -> ScatterGatherExecutor:
    return request.app.state.executor


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _optional_area(raw: Optional[str]) -> Optional[int]:
    return parse_area_id(raw) if raw is not None else None


@health_router.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@router.get("")
def list_stores(
    response: Response,
    limit: Optional[int] = Query(None),
    page_token: Optional[str] = Query(None, alias="pageToken"),
    repository: StoreRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
) -> List[Dict[str, Any]]:
    page_size = limit if limit is not None else settings.default_page_size
    if page_size <= 0 or page_size > settings.max_page_size:
        raise InvalidInputError("invalid limit")
    stores, next_token = repository.list_stores(page_size, page_token)
    if next_token:
        response.headers["X-Next-Page-Token"] = next_token
    return [store.to_json() for store in stores]


@router.get("/search")
def search_stores(
    areaid: List[str] = Query(["-1"]),
    name: str = Query(""),
    location: str = Query(""),
    repository: StoreRepository = Depends(get_repository),
    executor: ScatterGatherExecutor = Depends(get_executor),
) -> JSONResponse:
    specs = search_specs([parse_area_id(raw) for raw in areaid], name, location)
    result = executor.execute(specs, repository.execute_query)

    headers = {}
    if result.failures:
        headers["X-Search-Failures"] = str(len(result.failures))
    if result.timed_out:
        headers["X-Search-Timed-Out"] = "true"
    if result.partial:
        log.warning(
            "Search returned partial results",
            extra={
                "failures": [failure.as_dict() for failure in result.failures],
                "pending": result.pending,
            },
        )

    if not result.records:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"message": "no stores found"},
            headers=headers,
        )
    return JSONResponse(content=[store.to_json() for store in result.records], headers=headers)


@router.get("/area/{areaid}")
def get_stores_by_area(
    areaid: str,
    repository: StoreRepository = Depends(get_repository),
) -> List[Dict[str, Any]]:
    stores = repository.execute_query(QuerySpec(area_id=parse_area_id(areaid)))
    return [store.to_json() for store in stores]


@router.get("/{store_id}")
def get_store(
    store_id: str,
    areaid: Optional[str] = Query(None),
    repository: StoreRepository = Depends(get_repository),
) -> Dict[str, Any]:
    parsed_id = repository.strategy.parse_id(store_id)
    return repository.get_by_id(parsed_id, _optional_area(areaid)).to_json()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_stores(
    payload: Union[List[Store], Store] = Body(...),
    repository: StoreRepository = Depends(get_repository),
) -> Any:
    if isinstance(payload, list):
        created = repository.insert_batch(payload)
        return [store.to_json() for store in created]
    return repository.insert(payload).to_json()


@router.put("/{store_id}")
def update_store(
    store_id: str,
    fields: StoreUpdate,
    areaid: Optional[str] = Query(None),
    repository: StoreRepository = Depends(get_repository),
) -> Dict[str, Any]:
    parsed_id = repository.strategy.parse_id(store_id)
    if fields.id is not None and repository.strategy.parse_id(fields.id) != parsed_id:
        raise InvalidInputError("ID mismatch")
    area_id = _optional_area(areaid)
    if area_id is None:
        area_id = fields.area_id
    return repository.update_by_id(parsed_id, fields, area_id).to_json()


@router.delete("/{store_id}")
def delete_store(
    store_id: str,
    areaid: Optional[str] = Query(None),
    repository: StoreRepository = Depends(get_repository),
) -> Dict[str, str]:
    parsed_id = repository.strategy.parse_id(store_id)
    repository.delete_by_id(parsed_id, _optional_area(areaid))
    return {"message": "store deleted"}
