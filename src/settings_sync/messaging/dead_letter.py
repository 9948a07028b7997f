"""DeadLetterTopology — derived names for a queue's dead-letter route."""

from __future__ import annotations

from dataclasses import dataclass

DLX_SUFFIX = ".dlx"
DLQ_SUFFIX = ".dlq"
DEAD_ROUTING_SUFFIX = ".dead"


@dataclass(frozen=True)
class DeadLetterTopology:
    """Dead-letter exchange, queue and routing key for one subscription.

    Names are always derived from the primary topology and are never
    configured on their own.
    """

    exchange: str
    queue: str
    routing_key: str

    @classmethod
    def for_subscription(
        cls, exchange: str, queue: str, routing_key: str
    ) -> DeadLetterTopology:
        return cls(
            exchange=f"{exchange}{DLX_SUFFIX}",
            queue=f"{queue}{DLQ_SUFFIX}",
            routing_key=f"{routing_key}{DEAD_ROUTING_SUFFIX}",
        )

    def queue_arguments(self) -> dict[str, str]:
        """Arguments that route rejected messages of the primary queue here."""
        return {
            "x-dead-letter-exchange": self.exchange,
            "x-dead-letter-routing-key": self.routing_key,
        }
