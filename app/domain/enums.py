"""Domain enumerations for the content catalog and its search sync.

Enums represent fixed sets of domain values (entity kinds, change operations,
indexing pipeline states).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class EntityType(_ValuesMixin, str, Enum):
    """Kind of catalog record that can be indexed for search."""

    SHOW = "show"
    EPISODE = "episode"


class ChangeOperation(_ValuesMixin, str, Enum):
    """What happened to a record. Created and updated are handled identically."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"

    @classmethod
    def from_db_operation(cls, value: str) -> "ChangeOperation":
        """Map a trigger operation (TG_OP: INSERT/UPDATE/DELETE) to a change operation.

        Raises:
            ValueError: If value is not a known trigger operation.
        """
        mapping = {
            "INSERT": cls.CREATED,
            "UPDATE": cls.UPDATED,
            "DELETE": cls.DELETED,
        }
        try:
            return mapping[value.upper()]
        except KeyError:
            raise ValueError(f"Unknown trigger operation: {value!r}") from None


class IndexingState(_ValuesMixin, str, Enum):
    """States a notification passes through in the indexing consumer.

    Received -> Resolved -> Transformed -> Applied -> Invalidated -> Acknowledged,
    with Failed reachable once an index write exhausts its retries.
    """

    RECEIVED = "received"
    RESOLVED = "resolved"
    TRANSFORMED = "transformed"
    APPLIED = "applied"
    INVALIDATED = "invalidated"
    ACKNOWLEDGED = "acknowledged"
    FAILED = "failed"
