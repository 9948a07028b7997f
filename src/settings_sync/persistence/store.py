"""
SQLAlchemy implementation of the settings store.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..ports.store import ISettingsStore
from ..settings.exceptions import AlreadyExists
from ..settings.records import SettingsRecord
from .exceptions import SettingsStoreError
from .models import Base, UserSettingsModel

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

logger = logging.getLogger("settings_sync.persistence")


def _to_record(model: UserSettingsModel) -> SettingsRecord:
    return SettingsRecord(
        nickname=model.nickname,
        version=model.version,
        attributes=dict(model.settings or {}),
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create the ``user_settings`` table if it does not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


class SQLAlchemySettingsStore(ISettingsStore):
    """
    Settings store backed by an async SQLAlchemy engine.

    Every operation runs in its own session and transaction::

        factory = async_sessionmaker(engine, expire_on_commit=False)
        store = SQLAlchemySettingsStore(factory)
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, nickname: str) -> SettingsRecord | None:
        try:
            async with self._session_factory() as session:
                model = await session.get(UserSettingsModel, nickname)
                return _to_record(model) if model is not None else None
        except SQLAlchemyError as e:
            raise SettingsStoreError(f"Failed to load settings for {nickname!r}: {e}") from e

    async def insert(self, record: SettingsRecord) -> None:
        """
        Insert a new row; the primary key decides whether the nickname is free.
        """
        try:
            async with self._session_factory() as session, session.begin():
                session.add(
                    UserSettingsModel(
                        nickname=record.nickname,
                        settings=dict(record.attributes),
                        version=record.version,
                    )
                )
        except IntegrityError as e:
            logger.info("Settings row for %s already exists", record.nickname)
            raise AlreadyExists(record.nickname) from e
        except SQLAlchemyError as e:
            raise SettingsStoreError(
                f"Failed to insert settings for {record.nickname!r}: {e}"
            ) from e

    async def update(
        self, nickname: str, attributes: dict[str, Any], version: int
    ) -> bool:
        """
        Conditional replace: only rows whose version is below *version* change.
        """
        stmt = (
            update(UserSettingsModel)
            .where(
                UserSettingsModel.nickname == nickname,
                UserSettingsModel.version < version,
            )
            .values(settings=dict(attributes), version=version)
        )
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(stmt)
        except SQLAlchemyError as e:
            raise SettingsStoreError(f"Failed to update settings for {nickname!r}: {e}") from e
        return bool(result.rowcount)  # type: ignore[attr-defined]

    async def scan(self, after: str | None, limit: int) -> list[SettingsRecord]:
        """
        Keyset page of records ordered by nickname.
        """
        stmt = select(UserSettingsModel).order_by(UserSettingsModel.nickname).limit(limit)
        if after is not None:
            stmt = stmt.where(UserSettingsModel.nickname > after)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [_to_record(m) for m in result.scalars().all()]
        except SQLAlchemyError as e:
            raise SettingsStoreError(f"Failed to scan settings: {e}") from e
