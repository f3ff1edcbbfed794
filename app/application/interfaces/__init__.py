"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure.
"""

from app.application.interfaces.repositories import IContentReader, IContentRepository
from app.application.interfaces.services import ICacheService, IIndexQueue, ISearchIndex

__all__ = [
    "ICacheService",
    "IContentReader",
    "IContentRepository",
    "IIndexQueue",
    "ISearchIndex",
]
