"""
Application composition root.

Every component is constructed here and passed to its dependants; nothing in
the package keeps module-level service instances. Tests build the engine
directly with in-memory fakes instead.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from .bootstrap import Bootstrap
from .messaging.rabbitmq import RabbitMQBrokerClient
from .messaging.retry import RetryPolicy
from .persistence import SQLAlchemySettingsStore, create_schema
from .settings.engine import SettingsReconciliationEngine

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from .config import AppSettings
    from .ports.messaging import IBrokerClient
    from .ports.store import ISettingsStore

logger = logging.getLogger("settings_sync.container")


class _SchemaService:
    """Creates the settings table before consumers start."""

    name = "database"

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def init(self) -> None:
        await create_schema(self._engine)


class ApplicationContainer:
    """
    Lazily builds and owns the process's services.

    Usage:
        ```python
        container = ApplicationContainer(get_settings())
        await container.bootstrap.init()
        ...
        await container.aclose()
        ```
    """

    def __init__(self, settings: AppSettings) -> None:
        self._settings = settings
        self._db_engine: AsyncEngine | None = None
        self._store: ISettingsStore | None = None
        self._broker: IBrokerClient | None = None
        self._engine: SettingsReconciliationEngine | None = None
        self._bootstrap: Bootstrap | None = None

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def db_engine(self) -> AsyncEngine:
        if self._db_engine is None:
            self._db_engine = create_async_engine(self._settings.database_url)
        return self._db_engine

    @property
    def store(self) -> ISettingsStore:
        if self._store is None:
            factory = async_sessionmaker(self.db_engine, expire_on_commit=False)
            self._store = SQLAlchemySettingsStore(factory)
        return self._store

    @property
    def retry_policy(self) -> RetryPolicy:
        delay = self._settings.retry_delay_seconds
        return RetryPolicy(
            max_attempts=self._settings.rabbitmq_max_retries,
            base_delay=delay,
            max_delay=max(delay, 60.0),
            backoff=self._settings.rabbitmq_retry_backoff,
        )

    @property
    def broker(self) -> IBrokerClient:
        if self._broker is None:
            self._broker = RabbitMQBrokerClient(
                self._settings.rabbitmq_url,
                retry_policy=self.retry_policy,
                prefetch_count=self._settings.rabbitmq_prefetch_count,
            )
        return self._broker

    @property
    def engine(self) -> SettingsReconciliationEngine:
        if self._engine is None:
            s = self._settings
            self._engine = SettingsReconciliationEngine(
                self.store,
                self.broker,
                exchange=s.rabbitmq_exchange,
                input_queue=s.rabbitmq_settings_input_queue,
                input_routing_key=s.rabbitmq_settings_input_routing_key,
                output_routing_key=s.rabbitmq_settings_output_routing_key,
                batch_size=s.sync_batch_size,
                sync_process_delay=s.sync_process_delay_seconds,
            )
        return self._engine

    @property
    def bootstrap(self) -> Bootstrap:
        if self._bootstrap is None:
            self._bootstrap = Bootstrap(
                [_SchemaService(self.db_engine), self.broker, self.engine]
            )
        return self._bootstrap

    async def aclose(self) -> None:
        """Close the broker connection and dispose of the database engine."""
        if self._broker is not None:
            try:
                await self._broker.close()
            except Exception:  # noqa: BLE001
                logger.exception("Failed to close broker client")
        if self._db_engine is not None:
            await self._db_engine.dispose()
