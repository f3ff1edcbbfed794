"""Shared utilities: datetime, generators, retry."""

from app.shared.utils.datetime import ensure_utc, to_iso_utc
from app.shared.utils.generators import generate_cuid
from app.shared.utils.retry import RetryPolicy, retry_async

__all__ = [
    "generate_cuid",
    "ensure_utc",
    "to_iso_utc",
    "RetryPolicy",
    "retry_async",
]
