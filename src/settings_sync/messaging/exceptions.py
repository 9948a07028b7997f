"""Messaging-specific exceptions for settings-sync."""

from __future__ import annotations

from ..primitives.exceptions import InfrastructureError


class MessagingError(InfrastructureError):
    """Base class for all messaging-related infrastructure errors."""


class ConnectionFailed(MessagingError):
    """Raised when connectivity to the message broker cannot be established."""


class PublishFailed(MessagingError):
    """Raised when a publish call fails before the broker could confirm it."""


class PublishRejected(PublishFailed):
    """Raised when the broker refused or negatively confirmed a publish."""


class SubscribeFailed(MessagingError):
    """Raised when queue topology setup or consumer registration fails."""


class CloseFailed(MessagingError):
    """Raised when closing the channel or connection fails."""


class MessagingSerializationError(MessagingError):
    """Raised when message serialization or deserialization fails."""
