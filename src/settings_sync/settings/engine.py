"""SettingsReconciliationEngine — versioned updates and full broadcasts."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..messaging.envelope import SettingsEnvelope
from .exceptions import AlreadyExists, RecordNotFound, StaleVersion
from .records import SettingsRecord
from .validation import SettingsSchemaValidator

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from ..ports.messaging import IBrokerClient
    from ..ports.store import ISettingsStore
    from .schemas import UpdateSettingsMessage

logger = logging.getLogger("settings_sync.settings")

SETTINGS_NOTIFICATION_SOURCE = "registration"

DEFAULT_EXCHANGE = "settings"
DEFAULT_INPUT_QUEUE = "user.settings.input"
DEFAULT_INPUT_ROUTING_KEY = "user.settings.update"
DEFAULT_OUTPUT_ROUTING_KEY = "user.settings.updated"


@dataclass
class SyncReport:
    """Outcome of one reconciliation sweep."""

    batches: int = 0
    published: int = 0
    failed: int = 0

    @property
    def attempted(self) -> int:
        return self.published + self.failed


class SettingsReconciliationEngine:
    """
    Applies settings updates under optimistic concurrency and re-broadcasts
    stored state.

    An update is accepted only when its version is strictly greater than the
    stored one; timestamps never break ties. Accepted updates are followed by
    a best-effort notification carrying the full record.

    Usage:
        ```python
        engine = SettingsReconciliationEngine(store, broker)
        await engine.init()                # consume user.settings.update
        report = await engine.synchronize_all()
        ```
    """

    name = "settings"

    def __init__(
        self,
        store: ISettingsStore,
        broker: IBrokerClient,
        *,
        validator: SettingsSchemaValidator | None = None,
        exchange: str = DEFAULT_EXCHANGE,
        input_queue: str = DEFAULT_INPUT_QUEUE,
        input_routing_key: str = DEFAULT_INPUT_ROUTING_KEY,
        output_routing_key: str = DEFAULT_OUTPUT_ROUTING_KEY,
        batch_size: int = 100,
        sync_process_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        """
        Args:
            store: Settings record store.
            broker: Broker client used for subscribing and publishing.
            validator: Schema validator for inbound messages.
            exchange: Topic exchange for both directions.
            input_queue: Durable queue consuming update messages.
            input_routing_key: Routing key of inbound update messages.
            output_routing_key: Routing key of outbound notifications.
            batch_size: Page size of ``synchronize_all``.
            sync_process_delay: Seconds to pause between full pages.
            sleep: Async sleep used between pages; ``asyncio.sleep`` if None.
        """
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self._store = store
        self._broker = broker
        self._validator = validator or SettingsSchemaValidator()
        self._exchange = exchange
        self._input_queue = input_queue
        self._input_routing_key = input_routing_key
        self._output_routing_key = output_routing_key
        self._batch_size = batch_size
        self._sync_process_delay = sync_process_delay
        self._sleep = sleep or asyncio.sleep

    async def init(self) -> None:
        """Subscribe to inbound update messages."""
        await self._broker.subscribe(
            self._exchange,
            self._input_routing_key,
            self._input_queue,
            self.handle_update_message,
        )

    # ── Inbound messages ─────────────────────────────────────────

    async def handle_update_message(self, raw: Mapping[str, Any]) -> None:
        """Validate, apply and announce one update message.

        Raises:
            InvalidPayload, RecordNotFound, StaleVersion: the message was not
                applied; the broker client counts this as a failed attempt.
        """
        logger.info(
            "Handling update settings message",
            extra={"nickname": raw.get("nickname"), "request_id": raw.get("request_id")},
        )
        result = self._validator.check_update(raw)
        if not result.is_valid:
            logger.error("Invalid user settings payload", extra={"errors": result.errors})
        message = result.unwrap()

        await self.apply_update(message.nickname, message)
        await self.send_settings_update_notification(message.nickname)

    async def handle_create_message(self, raw: Mapping[str, Any]) -> SettingsRecord:
        """Provision a record from a create message, then announce it."""
        message = self._validator.validate_create(raw)
        record = await self.create_record(
            message.nickname,
            message.payload.model_dump(mode="json"),
            message.version,
        )
        await self.send_settings_update_notification(message.nickname)
        return record

    # ── Records ──────────────────────────────────────────────────

    async def get_record(self, nickname: str) -> SettingsRecord | None:
        return await self._store.get(nickname)

    async def apply_update(
        self, nickname: str, message: UpdateSettingsMessage
    ) -> SettingsRecord:
        """Merge *message* into the stored record if it is strictly newer.

        Raises:
            RecordNotFound: No record for *nickname*.
            StaleVersion: ``message.version`` is not above the stored version,
                checked here and again by the store's conditional update.
        """
        logger.info("Updating settings for %s", nickname)
        current = await self._store.get(nickname)
        if current is None:
            logger.error("Failed to get current settings for %s", nickname)
            raise RecordNotFound(nickname)

        if message.version <= current.version:
            logger.error(
                "Outdated settings version %d for %s",
                message.version,
                nickname,
                extra={"version": message.version, "current_version": current.version},
            )
            raise StaleVersion(nickname, message.version, current.version)

        attributes = current.merge(message.payload)
        if not await self._store.update(nickname, attributes, message.version):
            # a concurrent writer got there first
            raise StaleVersion(nickname, message.version)

        return SettingsRecord(nickname=nickname, version=message.version, attributes=attributes)

    async def create_record(
        self, nickname: str, attributes: Mapping[str, Any], version: int = 1
    ) -> SettingsRecord:
        """Insert a new record.

        The lookup is only a shortcut; the store's insert-if-absent is what
        guarantees uniqueness under concurrent creation.
        """
        logger.info("Creating settings for %s", nickname)
        if await self._store.get(nickname) is not None:
            logger.info("Settings already exist for %s", nickname)
            raise AlreadyExists(nickname)

        record = SettingsRecord(nickname=nickname, version=version, attributes=dict(attributes))
        await self._store.insert(record)
        logger.info("Settings created for %s", nickname)
        return record

    # ── Outbound notifications ───────────────────────────────────

    def build_notification(self, record: SettingsRecord) -> SettingsEnvelope:
        """Full-state envelope for *record* with a fresh request id."""
        return SettingsEnvelope(
            source=SETTINGS_NOTIFICATION_SOURCE,
            nickname=record.nickname,
            version=record.version,
            payload=dict(record.attributes),
        )

    async def broadcast(self, record: SettingsRecord) -> None:
        """Publish the current state of *record*. Publish errors propagate."""
        await self._broker.publish(
            self._exchange,
            self._output_routing_key,
            self.build_notification(record),
        )
        logger.debug("Settings notification for %s sent", record.nickname)

    async def send_settings_update_notification(self, nickname: str) -> bool:
        """Announce the current state of *nickname*; never raises.

        Returns True when the notification was confirmed by the broker.
        """
        logger.info("Sending settings update notification for %s", nickname)
        try:
            record = await self._store.get(nickname)
            if record is None:
                logger.error("Failed to get latest settings for %s", nickname)
                return False
            await self.broadcast(record)
        except Exception as e:  # noqa: BLE001
            # the triggering update already succeeded; notification is best-effort
            logger.error("Failed to send settings update notification: %s", e)
            return False
        return True

    async def synchronize_all(self) -> SyncReport:
        """Re-broadcast every stored record, page by page.

        Per-record publish failures are logged and skipped; a failing page
        read aborts the sweep.
        """
        report = SyncReport()
        cursor: str | None = None
        logger.info("Starting settings synchronization")

        while True:
            batch = await self._store.scan(cursor, self._batch_size)
            if not batch:
                break
            report.batches += 1

            for record in batch:
                try:
                    await self.broadcast(record)
                    report.published += 1
                except Exception as e:  # noqa: BLE001
                    report.failed += 1
                    logger.error(
                        "Failed to publish settings for %s: %s",
                        record.nickname,
                        e,
                        extra={"nickname": record.nickname},
                    )

            cursor = batch[-1].nickname
            if len(batch) < self._batch_size:
                break
            await self._sleep(self._sync_process_delay)

        logger.info(
            "Finished settings synchronization",
            extra={
                "batches": report.batches,
                "published": report.published,
                "failed": report.failed,
            },
        )
        return report
