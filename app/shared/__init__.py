"""Shared utilities: telemetry and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.utils import (
    RetryPolicy,
    ensure_utc,
    generate_cuid,
    retry_async,
    to_iso_utc,
)

__all__ = [
    "RetryPolicy",
    "generate_cuid",
    "retry_async",
    "ensure_utc",
    "to_iso_utc",
]
