"""Span helpers: the traced decorator and current-span attribute setters."""

import inspect
from collections.abc import Callable
from functools import wraps
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

# Only these kwarg names are copied onto spans; anything else may carry payloads.
_SAFE_SPAN_ATTR_KEYS = frozenset({
    "entity_type", "entity_id", "index_key", "operation", "limit", "query",
    "count", "batch_size", "fail_fast",
})


def _record_kwargs(span: trace.Span, kwargs: dict[str, Any]) -> None:
    for key, value in kwargs.items():
        if key.lower() in _SAFE_SPAN_ATTR_KEYS:
            span.set_attribute(f"arg.{key}", str(value))


def _mark_failed(span: trace.Span, exc: Exception) -> None:
    span.set_status(Status(StatusCode.ERROR, str(exc)))
    span.record_exception(exc)


def traced(
    operation_name: str | None = None,
    attributes: dict[str, str | int | float | bool] | None = None,
) -> Callable:
    """Decorator that runs a function (sync or async) inside a span.

    Args:
        operation_name: Span name (defaults to module.funcname).
        attributes: Static attributes set on every span.
    """

    def decorator(func: Callable) -> Callable:
        tracer = trace.get_tracer(func.__module__)
        span_name = operation_name or f"{func.__module__}.{func.__name__}"

        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with tracer.start_as_current_span(span_name, attributes=attributes) as span:
                    _record_kwargs(span, kwargs)
                    try:
                        result = await func(*args, **kwargs)
                    except Exception as e:
                        _mark_failed(span, e)
                        raise
                    span.set_status(Status(StatusCode.OK))
                    return result

            return async_wrapper

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(span_name, attributes=attributes) as span:
                _record_kwargs(span, kwargs)
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    _mark_failed(span, e)
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        return sync_wrapper

    return decorator


def add_span_attributes(**attributes: str | int | float | bool) -> None:
    """Add attributes to the current span (no-op when not recording)."""
    span = trace.get_current_span()
    if span.is_recording():
        for key, value in attributes.items():
            span.set_attribute(key, value)
