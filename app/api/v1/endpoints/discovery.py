"""Discovery API: cached full-text search and featured listing."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.v1.dependencies import get_discovery_service
from app.application.dtos.search import SearchFilters
from app.application.use_cases.discovery import DiscoveryService
from app.core.limiter import limit_discovery
from app.schemas.discovery import DiscoveryResponse, SearchDocumentResponse

router = APIRouter()


def _to_response(documents: list[dict]) -> DiscoveryResponse:
    results = [SearchDocumentResponse.model_validate(doc) for doc in documents]
    return DiscoveryResponse(results=results, count=len(results))


@router.get("/search", response_model=DiscoveryResponse, response_model_by_alias=True)
@limit_discovery
async def search(
    request: Request,
    discovery: Annotated[DiscoveryService, Depends(get_discovery_service)],
    q: str = Query("", max_length=500, description="Free text; empty matches everything"),
    category: str | None = Query(None, max_length=100),
    language: str | None = Query(None, max_length=10),
    min_duration: int | None = Query(None, alias="minDuration", ge=0),
    max_duration: int | None = Query(None, alias="maxDuration", ge=0),
):
    """Search shows and episodes; results are cached per query and filter set."""
    filters = SearchFilters(
        category=category,
        language=language,
        min_duration=min_duration,
        max_duration=max_duration,
    )
    return _to_response(await discovery.search(q, filters))


@router.get("/featured", response_model=DiscoveryResponse, response_model_by_alias=True)
@limit_discovery
async def featured(
    request: Request,
    discovery: Annotated[DiscoveryService, Depends(get_discovery_service)],
    limit: int | None = Query(None, ge=1, le=100),
):
    """Newest documents first."""
    return _to_response(await discovery.featured(limit))
