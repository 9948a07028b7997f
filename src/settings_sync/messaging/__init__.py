"""Message transport for settings-sync — RabbitMQ and in-memory."""

from __future__ import annotations

from .dead_letter import DeadLetterTopology
from .envelope import SettingsEnvelope
from .exceptions import (
    CloseFailed,
    ConnectionFailed,
    MessagingError,
    MessagingSerializationError,
    PublishFailed,
    PublishRejected,
    SubscribeFailed,
)
from .memory import InMemoryBrokerClient
from .retry import Backoff, RetryPolicy
from .serialization import EnvelopeSerializer

__all__ = [
    "Backoff",
    "CloseFailed",
    "ConnectionFailed",
    "DeadLetterTopology",
    "EnvelopeSerializer",
    "InMemoryBrokerClient",
    "MessagingError",
    "MessagingSerializationError",
    "PublishFailed",
    "PublishRejected",
    "RetryPolicy",
    "SettingsEnvelope",
    "SubscribeFailed",
]
