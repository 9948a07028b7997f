from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Mapping

    from pydantic import BaseModel

    MessageHandler = Callable[[Mapping[str, Any]], Coroutine[Any, Any, None]]


@runtime_checkable
class IMessagePublisher(Protocol):
    """
    Port for publishing messages to a topic exchange.

    Infrastructure packages provide concrete adapters.
    """

    async def publish(
        self,
        exchange: str,
        routing_key: str,
        message: BaseModel | Mapping[str, Any],
    ) -> None:
        """
        Publish *message* to *exchange* under *routing_key*.

        Returns only once the transport has confirmed the message.
        """
        ...


@runtime_checkable
class IMessageConsumer(Protocol):
    """
    Port for subscribing to messages from a topic exchange.

    Infrastructure packages provide concrete adapters.
    """

    async def subscribe(
        self,
        exchange: str,
        routing_key: str,
        queue: str,
        handler: MessageHandler,
    ) -> None:
        """
        Bind *queue* to *exchange* with *routing_key* and consume it.

        Args:
            exchange: Topic exchange to bind to.
            routing_key: Binding key.
            queue: Durable queue name; its dead-letter topology is derived.
            handler: Async callable invoked with each decoded message body.
        """
        ...


@runtime_checkable
class IBrokerClient(IMessagePublisher, IMessageConsumer, Protocol):
    """Publisher and consumer sharing one broker connection."""

    name: str

    async def init(self) -> None: ...

    async def close(self) -> None: ...
