"""ISettingsStore — keyed settings record store protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..settings.records import SettingsRecord


@runtime_checkable
class ISettingsStore(Protocol):
    """
    Durable keyed store of :class:`SettingsRecord` objects.

    ``scan`` is the cursor primitive behind full synchronisation::

        after = None
        while batch := await store.scan(after, limit=100):
            ...
            after = batch[-1].nickname
    """

    async def get(self, nickname: str) -> SettingsRecord | None: ...

    async def insert(self, record: SettingsRecord) -> None:
        """Insert *record* if its nickname is absent.

        Raises:
            AlreadyExists: The store already holds a record for the nickname.
        """
        ...

    async def update(
        self, nickname: str, attributes: dict[str, Any], version: int
    ) -> bool:
        """Replace attributes and version if the stored version is lower.

        Returns False when no row was changed (missing or not older).
        """
        ...

    async def scan(self, after: str | None, limit: int) -> list[SettingsRecord]:
        """Return up to *limit* records with nickname > *after*, ascending."""
        ...
