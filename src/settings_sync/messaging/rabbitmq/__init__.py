"""RabbitMQ transport adapter built on aio-pika."""

from __future__ import annotations

from .client import RabbitMQBrokerClient
from .connection import ConnectionState, RabbitMQConnectionManager
from .consumer import RabbitMQConsumer
from .publisher import RabbitMQPublisher

__all__ = [
    "ConnectionState",
    "RabbitMQBrokerClient",
    "RabbitMQConnectionManager",
    "RabbitMQConsumer",
    "RabbitMQPublisher",
]
