"""Domain layer: entities, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import ChangeNotification
from app.domain.enums import ChangeOperation, EntityType, IndexingState
from app.domain.exceptions import (
    CmsException,
    ExternalServiceError,
    MalformedNotificationError,
    MissingParentShowError,
    NotificationBatchError,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    ValidationException,
)

__all__ = [
    "ChangeNotification",
    "ChangeOperation",
    "CmsException",
    "EntityType",
    "ExternalServiceError",
    "IndexingState",
    "MalformedNotificationError",
    "MissingParentShowError",
    "NotificationBatchError",
    "ResourceNotFoundException",
    "SqlNotConfiguredException",
    "ValidationException",
]
