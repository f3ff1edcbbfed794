"""Domain exceptions for the content catalog.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class CmsException(Exception):
    """Base exception for all catalog application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(CmsException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(CmsException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'show', 'episode').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class MalformedNotificationError(CmsException):
    """Raised when a change notification payload cannot be parsed.

    Structurally unprocessable; callers report it and do not retry locally.
    """

    def __init__(self, reason: str, payload: Any = None) -> None:
        details: dict[str, Any] = {"reason": reason}
        if payload is not None:
            details["payload"] = payload if isinstance(payload, (str, dict)) else repr(payload)
        super().__init__(
            f"Malformed change notification: {reason}",
            "MALFORMED_NOTIFICATION",
            details,
        )


class MissingParentShowError(CmsException):
    """Raised when an episode's parent show cannot be resolved.

    The search document would lack category/language, so the notification
    fails instead of indexing a structurally invalid document.
    """

    def __init__(self, episode_id: str, show_id: str | None) -> None:
        super().__init__(
            f"Episode {episode_id} has no resolvable parent show",
            "MISSING_PARENT_SHOW",
            {"episode_id": episode_id, "show_id": show_id},
        )


class RecordTypeMismatchError(CmsException):
    """Raised when the record store returns a record of the wrong entity type."""

    def __init__(self, index_key: str, record_type: str) -> None:
        super().__init__(
            f"Record store returned {record_type} for {index_key}",
            "RECORD_TYPE_MISMATCH",
            {"index_key": index_key, "record_type": record_type},
        )


class ExternalServiceError(CmsException):
    """Base for failures of an outbound dependency (search index, queue, cache).

    Treated as transient: the retry executor retries these. Concrete
    subclasses live in app.infrastructure.exceptions.
    """


class NotificationBatchError(CmsException):
    """Raised when one or more notifications in a delivered batch failed.

    Surfaced to the delivery mechanism so it redelivers the batch; already
    processed siblings are idempotent on redelivery.
    """

    def __init__(self, failed: int, total: int, errors: list[dict[str, Any]]) -> None:
        super().__init__(
            f"{failed} of {total} notification(s) failed",
            "BATCH_PARTIALLY_FAILED",
            {"failed": failed, "total": total, "errors": errors},
        )


class SqlNotConfiguredException(CmsException):
    """Raised when the SQL record store is used but DATABASE_URL is not set."""

    def __init__(self) -> None:
        super().__init__(
            "SQL database is not configured. Set DATABASE_URL.",
            "SQL_NOT_CONFIGURED",
            {},
        )
