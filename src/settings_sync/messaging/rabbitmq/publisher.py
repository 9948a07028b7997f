"""RabbitMQPublisher — confirmed publishes to durable topic exchanges."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import aio_pika
from aio_pika.exceptions import DeliveryError
from pamqp.commands import Basic

from ...ports.messaging import IMessagePublisher
from ..exceptions import PublishFailed, PublishRejected
from ..serialization import EnvelopeSerializer

if TYPE_CHECKING:
    from aio_pika.abc import AbstractExchange
    from pydantic import BaseModel

    from .connection import RabbitMQConnectionManager

logger = logging.getLogger("settings_sync.messaging.rabbitmq")


class RabbitMQPublisher(IMessagePublisher):
    """RabbitMQ adapter implementing IMessagePublisher.

    Every call is an independent, persistent, confirmed round trip: there is
    no local buffering or batching.
    """

    def __init__(
        self,
        connection: RabbitMQConnectionManager,
        *,
        serializer: EnvelopeSerializer | None = None,
    ) -> None:
        self._connection = connection
        self._serializer = serializer or EnvelopeSerializer()
        self._exchanges: dict[str, AbstractExchange] = {}

    async def _ensure_exchange(self, name: str) -> AbstractExchange:
        """Declare *name* as a durable topic exchange (cached per channel)."""
        exchange = self._exchanges.get(name)
        if exchange is not None:
            return exchange
        channel = self._connection.channel
        exchange = await channel.declare_exchange(
            name,
            aio_pika.ExchangeType.TOPIC,
            durable=True,
        )
        self._exchanges[name] = exchange
        return exchange

    def reset(self) -> None:
        """Forget declared exchanges (after the channel was closed)."""
        self._exchanges.clear()

    async def publish(
        self,
        exchange: str,
        routing_key: str,
        message: BaseModel | Mapping[str, Any],
    ) -> None:
        """Publish *message* and wait for the broker confirmation.

        Raises:
            PublishRejected: The broker did not positively confirm the message.
            PublishFailed: Anything else went wrong before a confirmation.
        """
        try:
            target = await self._ensure_exchange(exchange)
            body = self._serializer.serialize(message)
            request_id = _request_id_of(message)
            confirmation = await target.publish(
                aio_pika.Message(
                    body=body,
                    content_type="application/json",
                    delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
                    message_id=request_id,
                ),
                routing_key=routing_key,
                # unroutable notifications are not an error; success is the broker ack
                mandatory=False,
            )
        except DeliveryError as e:
            logger.error("Message not accepted by broker: %s", e)
            raise PublishRejected("Message not accepted") from e
        except Exception as e:  # noqa: BLE001
            logger.error("Failed to publish message: %s", e)
            raise PublishFailed("Failed to publish message") from e

        if not isinstance(confirmation, Basic.Ack):
            logger.error(
                "Message not confirmed by broker",
                extra={
                    "exchange": exchange,
                    "routing_key": routing_key,
                    "confirmation": type(confirmation).__name__,
                },
            )
            raise PublishRejected("Message not accepted")

    async def health_check(self) -> bool:
        """Return True if the connection is healthy."""
        return await self._connection.health_check()


def _request_id_of(message: Any) -> str | None:
    if isinstance(message, Mapping):
        value = message.get("request_id")
    else:
        value = getattr(message, "request_id", None)
    return str(value) if value is not None else None
