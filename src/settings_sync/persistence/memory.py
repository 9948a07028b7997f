"""InMemorySettingsStore — dict-backed fake for unit tests."""

from __future__ import annotations

from typing import Any

from ..ports.store import ISettingsStore
from ..settings.exceptions import AlreadyExists
from ..settings.records import SettingsRecord


class InMemorySettingsStore(ISettingsStore):
    """In-memory implementation of ``ISettingsStore``.

    Same semantics as the SQL store: insert-if-absent, conditional update,
    nickname-ordered scans. Calls to ``scan`` are recorded for assertions.
    """

    def __init__(self, records: list[SettingsRecord] | None = None) -> None:
        self._store: dict[str, SettingsRecord] = {}
        self.scan_calls: list[tuple[str | None, int]] = []
        for record in records or []:
            self._store[record.nickname] = record

    async def get(self, nickname: str) -> SettingsRecord | None:
        return self._store.get(nickname)

    async def insert(self, record: SettingsRecord) -> None:
        if record.nickname in self._store:
            raise AlreadyExists(record.nickname)
        self._store[record.nickname] = record

    async def update(
        self, nickname: str, attributes: dict[str, Any], version: int
    ) -> bool:
        current = self._store.get(nickname)
        if current is None or current.version >= version:
            return False
        self._store[nickname] = SettingsRecord(
            nickname=nickname, version=version, attributes=dict(attributes)
        )
        return True

    async def scan(self, after: str | None, limit: int) -> list[SettingsRecord]:
        self.scan_calls.append((after, limit))
        keys = sorted(k for k in self._store if after is None or k > after)
        return [self._store[k] for k in keys[:limit]]

    # ── Test helpers ─────────────────────────────────────────────

    def clear(self) -> None:
        self._store.clear()
        self.scan_calls.clear()

    def __len__(self) -> int:
        return len(self._store)
