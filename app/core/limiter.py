"""Rate limiter instance for SlowAPI.

Shared so main (app.state.limiter) and route modules use the same instance
without circular imports. Limits are per client address.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import get_settings

limiter = Limiter(key_func=get_remote_address)

WRITE_ENDPOINT_LIMIT = "120/minute"


def _discovery_limit() -> str:
    return get_settings().rate_limit_discovery


limit_discovery = limiter.limit(_discovery_limit)
limit_writes = limiter.limit(WRITE_ENDPOINT_LIMIT)
