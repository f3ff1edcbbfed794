"""Messaging: SQS indexing queue and Postgres change listener."""

from app.infrastructure.messaging.pg_listener import ChangeListener
from app.infrastructure.messaging.sqs_queue import SqsIndexQueue, SqsIndexWorker, create_sqs_client

__all__ = [
    "ChangeListener",
    "SqsIndexQueue",
    "SqsIndexWorker",
    "create_sqs_client",
]
