"""Health check endpoints for liveness and readiness probes."""

from fastapi import APIRouter, Request

from app.schemas.health import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get("/ready", response_model=ReadinessResponse)
def readiness_check(request: Request) -> ReadinessResponse:
    """Report which pipeline components were wired at startup.

    status is "degraded" when discovery or the indexing consumer is missing.
    Cache absence alone does not degrade: reads fall through to the index.
    """
    state = request.app.state
    cache = getattr(state, "cache", None)
    components = {
        "search_index": getattr(state, "search_index", None) is not None,
        "indexing_consumer": getattr(state, "sync_service", None) is not None,
        "cache": cache is not None and cache.is_available(),
        "sqs_worker": getattr(state, "sqs_worker", None) is not None,
        "change_listener": getattr(state, "change_listener", None) is not None,
    }
    ready = components["search_index"] and components["indexing_consumer"]
    return ReadinessResponse(status="ok" if ready else "degraded", components=components)
