"""Bootstrap — ordered service start-up with partial degradation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger("settings_sync.bootstrap")


@runtime_checkable
class Service(Protocol):
    """Anything the bootstrap can start."""

    name: str

    async def init(self) -> None: ...


class Bootstrap:
    """Initialises services in order.

    A failing service is logged and skipped so the rest of the process keeps
    starting; the broker client must come before the services consuming it.
    """

    def __init__(self, services: Sequence[Service]) -> None:
        self._services = list(services)

    async def init(self) -> list[str]:
        """Initialise every service; return the names of those that failed."""
        logger.info("Initializing services")
        failed: list[str] = []
        for service in self._services:
            try:
                logger.info("Initializing %s service", service.name)
                await service.init()
            except Exception:  # noqa: BLE001
                logger.exception("Failed to initialize %s service", service.name)
                failed.append(service.name)
        logger.info("Services initialized", extra={"failed_services": failed})
        return failed
