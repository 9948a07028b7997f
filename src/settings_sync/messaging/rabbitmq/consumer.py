"""RabbitMQConsumer — IMessageConsumer with dead-letter topology and
in-process retry."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any

import aio_pika

from ...ports.messaging import IMessageConsumer
from ..dead_letter import DeadLetterTopology
from ..exceptions import SubscribeFailed
from ..retry import RetryPolicy
from ..serialization import EnvelopeSerializer

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Mapping

    from aio_pika.abc import AbstractIncomingMessage

    from .connection import RabbitMQConnectionManager

    MessageHandler = Callable[[Mapping[str, Any]], Coroutine[Any, Any, None]]

logger = logging.getLogger("settings_sync.messaging.rabbitmq")


class _Subscription:
    """Bounded buffer of deliveries for one queue plus the task draining it."""

    def __init__(self, queue: str, handler: MessageHandler, buffer_size: int) -> None:
        self.queue = queue
        self.handler = handler
        self.deliveries: asyncio.Queue[AbstractIncomingMessage] = asyncio.Queue(
            maxsize=buffer_size
        )
        self.task: asyncio.Task[None] | None = None


class RabbitMQConsumer(IMessageConsumer):
    """RabbitMQ adapter implementing IMessageConsumer.

    Each subscribed queue gets a dead-letter exchange/queue pair, manual
    acknowledgement, and a dedicated task that handles deliveries one at a
    time. Failed handling is retried in-process; once the retry policy is
    exhausted the delivery is rejected without requeue so the broker
    dead-letters it.
    """

    def __init__(
        self,
        connection: RabbitMQConnectionManager,
        *,
        serializer: EnvelopeSerializer | None = None,
        retry_policy: RetryPolicy | None = None,
        prefetch_count: int = 10,
    ) -> None:
        """Configure consumer.

        Args:
            connection: Shared connection manager.
            serializer: For decoding message bodies; default EnvelopeSerializer().
            retry_policy: Attempts and backoff for failing handlers.
            prefetch_count: QoS prefetch, also the size of each delivery buffer.
        """
        self._connection = connection
        self._serializer = serializer or EnvelopeSerializer()
        self._retry_policy = retry_policy or RetryPolicy()
        self._prefetch_count = prefetch_count
        self._subscriptions: list[_Subscription] = []

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    async def subscribe(
        self,
        exchange: str,
        routing_key: str,
        queue: str,
        handler: MessageHandler,
    ) -> None:
        """Declare topology for *queue* and start consuming it.

        The dead-letter side is declared first so rejected messages always
        have somewhere to land. Declares are idempotent on the broker, so a
        failed subscribe can simply be retried.
        """
        dead_letter = DeadLetterTopology.for_subscription(exchange, queue, routing_key)
        subscription = _Subscription(queue, handler, self._prefetch_count)
        try:
            channel = self._connection.channel
            await channel.set_qos(prefetch_count=self._prefetch_count)

            dlx = await channel.declare_exchange(
                dead_letter.exchange,
                aio_pika.ExchangeType.TOPIC,
                durable=True,
            )
            dlq = await channel.declare_queue(dead_letter.queue, durable=True)
            await dlq.bind(dlx, routing_key=dead_letter.routing_key)

            primary_exchange = await channel.declare_exchange(
                exchange,
                aio_pika.ExchangeType.TOPIC,
                durable=True,
            )
            primary = await channel.declare_queue(
                queue,
                durable=True,
                arguments=dead_letter.queue_arguments(),
            )
            await primary.bind(primary_exchange, routing_key=routing_key)

            subscription.task = asyncio.create_task(
                self._process(subscription), name=f"consume:{queue}"
            )
            await primary.consume(self._on_message(subscription), no_ack=False)
        except Exception as e:  # noqa: BLE001
            if subscription.task is not None:
                subscription.task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await subscription.task
            logger.error("Failed to subscribe to queue %s: %s", queue, e)
            raise SubscribeFailed(f"Failed to subscribe to queue {queue}") from e

        self._subscriptions.append(subscription)
        logger.info("Subscribed to queue %s", queue)

    def _on_message(
        self, subscription: _Subscription
    ) -> Callable[[AbstractIncomingMessage | None], Coroutine[Any, Any, None]]:
        async def on_message(raw: AbstractIncomingMessage | None) -> None:
            if raw is None or not raw.body:
                # left unacked for the broker's own redelivery
                logger.error("Invalid message received on %s", subscription.queue)
                return
            await subscription.deliveries.put(raw)

        return on_message

    async def _process(self, subscription: _Subscription) -> None:
        while True:
            message = await subscription.deliveries.get()
            try:
                await self.handle_with_retry(message, subscription.handler)
            except Exception:  # noqa: BLE001
                # ack/nack failures must not stop the subscription
                logger.exception("Failed to settle message on %s", subscription.queue)
            finally:
                subscription.deliveries.task_done()

    async def handle_with_retry(
        self,
        message: AbstractIncomingMessage,
        handler: MessageHandler,
    ) -> bool:
        """Run *handler* on *message* with bounded in-process retries.

        Returns True when the message was acked, False when it was rejected
        without requeue (dead-lettered).
        """
        attempts = 0
        max_attempts = self._retry_policy.max_attempts
        while attempts < max_attempts:
            try:
                content = self._serializer.deserialize(message.body)
                await handler(content)
            except Exception as e:  # noqa: BLE001
                attempts += 1
                logger.warning(
                    "Attempt %d of %d failed: %s",
                    attempts,
                    max_attempts,
                    e,
                    extra={"message_id": message.message_id, "attempt": attempts},
                )
                if self._retry_policy.should_retry(attempts):
                    await self._retry_policy.wait_before_retry(attempts)
                continue

            await message.ack()
            return True

        logger.error(
            "Failed to handle message after %d attempts",
            max_attempts,
            extra={"message_id": message.message_id},
        )
        await message.nack(requeue=False)
        return False

    async def stop(self) -> None:
        """Cancel every subscription task."""
        tasks = [s.task for s in self._subscriptions if s.task is not None]
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._subscriptions.clear()

    async def health_check(self) -> bool:
        """Return True if the connection is healthy."""
        return await self._connection.health_check()
