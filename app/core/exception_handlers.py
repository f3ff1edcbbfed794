"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain and
infrastructure exceptions to HTTP responses. Outbound dependency failures
map to 5xx so queue push deliveries are retried.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.domain.exceptions import CmsException

logger = logging.getLogger(__name__)

# Map error_code to HTTP status; anything unlisted is a 500.
_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "MALFORMED_NOTIFICATION": 400,
    "RESOURCE_NOT_FOUND": 404,
    "MISSING_PARENT_SHOW": 422,
    "RECORD_TYPE_MISMATCH": 500,
    "SEARCH_INDEX_ERROR": 502,
    "QUEUE_PUBLISH_ERROR": 502,
    "CACHE_UNAVAILABLE": 503,
    "SQL_NOT_CONFIGURED": 503,
    "BATCH_PARTIALLY_FAILED": 500,
}


def status_for(exc: CmsException) -> int:
    return _ERROR_CODE_STATUS.get(exc.error_code, 500)


def _cms_exception_handler(request: Request, exc: CmsException) -> JSONResponse:
    """Return JSON from CmsException.to_dict() with the mapped status code."""
    status = status_for(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status, content=exc.to_dict())


def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with validation error details."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": jsonable_errors(exc),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Pydantic error list without non-serializable ctx values."""
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Return JSON for Starlette HTTP exceptions (status + detail)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    detail: Any = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Handlers: CmsException (and subclasses), RequestValidationError,
    StarletteHTTPException, RateLimitExceeded, generic Exception.
    """
    app.add_exception_handler(CmsException, _cms_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
