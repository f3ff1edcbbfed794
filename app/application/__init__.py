"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (search index, cache, queue, record store).
"""

from app.application.interfaces import (
    ICacheService,
    IContentReader,
    IContentRepository,
    IIndexQueue,
    ISearchIndex,
)

__all__ = [
    "ICacheService",
    "IContentReader",
    "IContentRepository",
    "IIndexQueue",
    "ISearchIndex",
]
