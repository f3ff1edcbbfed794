"""Change notification domain entity.

Transient description of a record-store change ("entity X of type T was
created/updated/deleted"). Not a source of truth: the consumer always re-reads
the record before indexing. Produced by the DB trigger channel and by the
application write path; both share this shape.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from app.domain.enums import ChangeOperation, EntityType
from app.domain.exceptions import MalformedNotificationError

# Legacy queue message types (e.g. "SHOW_UPDATED") still accepted on input.
_MESSAGE_TYPE_SEP = "_"


@dataclass(frozen=True)
class ChangeNotification:
    """Immutable change notification.

    index_key is the idempotency boundary in the search index: repeated
    upserts or deletes for the same key converge to the same state.
    """

    entity_type: EntityType
    entity_id: str
    operation: ChangeOperation

    def __post_init__(self) -> None:
        if not self.entity_id or not str(self.entity_id).strip():
            raise MalformedNotificationError("entityId is required")

    @property
    def index_key(self) -> str:
        """Search index document id: '{entityType}_{entityId}'."""
        return f"{self.entity_type.value}_{self.entity_id}"

    @property
    def message_type(self) -> str:
        """Queue message type, e.g. 'EPISODE_UPDATED'."""
        return f"{self.entity_type.value.upper()}{_MESSAGE_TYPE_SEP}{self.operation.value.upper()}"

    @property
    def is_delete(self) -> bool:
        return self.operation is ChangeOperation.DELETED

    def to_dict(self) -> dict[str, str]:
        """Serialize for the queue message body."""
        return {
            "type": self.message_type,
            "entityType": self.entity_type.value,
            "entityId": self.entity_id,
            "operation": self.operation.value,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Any) -> ChangeNotification:
        """Parse a queue message body.

        Accepts {"entityType", "entityId", "operation"} or the message-type form
        {"type": "SHOW_CREATED", "entityType", "entityId"}.

        Raises:
            MalformedNotificationError: If required fields are missing or unknown.
        """
        if not isinstance(data, dict):
            raise MalformedNotificationError("body must be a JSON object", data)
        entity_id = data.get("entityId")
        if not isinstance(entity_id, str) or not entity_id.strip():
            raise MalformedNotificationError("entityId must be a non-empty string", data)

        raw_type = data.get("entityType")
        raw_operation = data.get("operation")
        message_type = data.get("type")
        if isinstance(message_type, str) and _MESSAGE_TYPE_SEP in message_type:
            type_part, _, op_part = message_type.partition(_MESSAGE_TYPE_SEP)
            raw_type = raw_type or type_part.lower()
            raw_operation = raw_operation or op_part.lower()

        try:
            entity_type = EntityType(str(raw_type).lower())
        except ValueError:
            raise MalformedNotificationError(f"unknown entityType {raw_type!r}", data) from None
        try:
            operation = ChangeOperation(str(raw_operation).lower())
        except ValueError:
            raise MalformedNotificationError(f"unknown operation {raw_operation!r}", data) from None
        return cls(entity_type=entity_type, entity_id=entity_id.strip(), operation=operation)

    @classmethod
    def from_json(cls, body: str | bytes) -> ChangeNotification:
        """Parse a JSON queue message body. Raises MalformedNotificationError."""
        try:
            data = json.loads(body)
        except (json.JSONDecodeError, TypeError, UnicodeDecodeError) as e:
            raise MalformedNotificationError(f"invalid JSON: {e}", body if isinstance(body, str) else None) from e
        return cls.from_dict(data)

    @classmethod
    def from_db_payload(cls, channel_entity_type: EntityType, payload: str) -> ChangeNotification:
        """Parse a pg_notify payload: {"operation": "INSERT|UPDATE|DELETE", "id": "..."}.

        The entity type comes from the channel the payload arrived on.

        Raises:
            MalformedNotificationError: If payload is not the expected JSON shape.
        """
        try:
            data = json.loads(payload)
        except (json.JSONDecodeError, TypeError) as e:
            raise MalformedNotificationError(f"invalid JSON: {e}", payload) from e
        if not isinstance(data, dict):
            raise MalformedNotificationError("payload must be a JSON object", payload)
        entity_id = data.get("id")
        if not isinstance(entity_id, str) or not entity_id.strip():
            raise MalformedNotificationError("id must be a non-empty string", payload)
        try:
            operation = ChangeOperation.from_db_operation(str(data.get("operation", "")))
        except ValueError as e:
            raise MalformedNotificationError(str(e), payload) from None
        return cls(entity_type=channel_entity_type, entity_id=entity_id.strip(), operation=operation)
