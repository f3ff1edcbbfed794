"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from app.api.v1.dependencies (no manual service construction).
"""

from fastapi import APIRouter

from app.api.v1.endpoints import content, discovery, health, sync

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(discovery.router, prefix="/discovery", tags=["discovery"])
api_router.include_router(sync.router, prefix="/sync", tags=["sync"])
api_router.include_router(content.router, tags=["content"])
