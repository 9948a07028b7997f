"""InMemoryBrokerClient — IBrokerClient with assertion helpers for tests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from ...ports.messaging import IBrokerClient

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine

    MessageHandler = Callable[[Mapping[str, Any]], Coroutine[Any, Any, None]]


def _as_mapping(message: BaseModel | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(message, BaseModel):
        return message.model_dump(mode="json")
    return dict(message)


class InMemoryBrokerClient(IBrokerClient):
    """In-memory broker that records publishes and dispatches synchronously.

    ``publish`` to an (exchange, routing_key) pair that has subscribers awaits
    every handler in subscription order, with the message body as a plain
    mapping exactly like the RabbitMQ consumer delivers it. Handler errors
    propagate to the publisher.
    """

    name = "memory-broker"

    def __init__(self) -> None:
        self._messages: list[tuple[str, str, dict[str, Any]]] = []
        self._handlers: dict[tuple[str, str], list[MessageHandler]] = {}
        self._queues: list[str] = []
        self.initialized = False

    async def init(self) -> None:
        self.initialized = True

    async def close(self) -> None:
        self.initialized = False

    async def subscribe(
        self,
        exchange: str,
        routing_key: str,
        queue: str,
        handler: MessageHandler,
    ) -> None:
        """Register handler for (exchange, routing_key); queue is recorded only."""
        self._queues.append(queue)
        self._handlers.setdefault((exchange, routing_key), []).append(handler)

    async def publish(
        self,
        exchange: str,
        routing_key: str,
        message: BaseModel | Mapping[str, Any],
    ) -> None:
        """Append message and invoke all handlers for the route."""
        body = _as_mapping(message)
        self._messages.append((exchange, routing_key, body))
        for h in self._handlers.get((exchange, routing_key), []):
            await h(body)

    def get_published(
        self, routing_key: str | None = None
    ) -> list[tuple[str, str, dict[str, Any]]]:
        """Return published (exchange, routing_key, body) in order."""
        if routing_key is None:
            return list(self._messages)
        return [m for m in self._messages if m[1] == routing_key]

    def assert_published(self, routing_key: str, count: int = 1) -> None:
        """Assert that exactly `count` messages were published with *routing_key*."""
        matching = self.get_published(routing_key)
        assert len(matching) == count, (
            f"Expected {count} message(s) on {routing_key!r}, "
            f"got {len(matching)}. Published: "
            f"{[key for _, key, _ in self._messages]}"
        )

    @property
    def queues(self) -> list[str]:
        return list(self._queues)

    def clear(self) -> None:
        """Clear published messages and handlers (for test teardown)."""
        self._messages.clear()
        self._handlers.clear()
        self._queues.clear()
