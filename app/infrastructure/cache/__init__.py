"""Cache: Redis service for discovery results.

Key format lives in app.application.services.cache_keys.
"""

from app.infrastructure.cache.redis_cache import CacheService

__all__ = ["CacheService"]
