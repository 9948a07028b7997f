from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from settings_sync.persistence import (
    SettingsStoreError,
    SQLAlchemySettingsStore,
    create_schema,
)
from settings_sync.settings.exceptions import AlreadyExists
from settings_sync.settings.records import SettingsRecord


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def sql_store(engine: AsyncEngine) -> SQLAlchemySettingsStore:
    return SQLAlchemySettingsStore(async_sessionmaker(engine, expire_on_commit=False))


@pytest.mark.asyncio
async def test_insert_and_get(sql_store: SQLAlchemySettingsStore) -> None:
    record = SettingsRecord("alice", 1, {"timezone": "UTC", "language": "en"})
    await sql_store.insert(record)

    loaded = await sql_store.get("alice")
    assert loaded == record
    assert await sql_store.get("bob") is None


@pytest.mark.asyncio
async def test_insert_duplicate_raises_already_exists(
    sql_store: SQLAlchemySettingsStore,
) -> None:
    await sql_store.insert(SettingsRecord("alice", 1, {"timezone": "UTC"}))
    with pytest.raises(AlreadyExists):
        await sql_store.insert(SettingsRecord("alice", 5, {"timezone": "CET"}))

    loaded = await sql_store.get("alice")
    assert loaded is not None
    assert loaded.version == 1
    assert loaded.attributes == {"timezone": "UTC"}


@pytest.mark.asyncio
async def test_conditional_update_applies_newer_version(
    sql_store: SQLAlchemySettingsStore,
) -> None:
    await sql_store.insert(SettingsRecord("alice", 1, {"timezone": "UTC"}))

    assert await sql_store.update("alice", {"timezone": "CET"}, 2) is True

    loaded = await sql_store.get("alice")
    assert loaded == SettingsRecord("alice", 2, {"timezone": "CET"})


@pytest.mark.asyncio
@pytest.mark.parametrize("version", [1, 2])
async def test_conditional_update_rejects_equal_or_older(
    sql_store: SQLAlchemySettingsStore, version: int
) -> None:
    await sql_store.insert(SettingsRecord("alice", 2, {"timezone": "UTC"}))

    assert await sql_store.update("alice", {"timezone": "CET"}, version) is False

    loaded = await sql_store.get("alice")
    assert loaded == SettingsRecord("alice", 2, {"timezone": "UTC"})


@pytest.mark.asyncio
async def test_update_missing_row_returns_false(sql_store: SQLAlchemySettingsStore) -> None:
    assert await sql_store.update("ghost", {"timezone": "CET"}, 2) is False


@pytest.mark.asyncio
async def test_scan_pages_by_nickname(sql_store: SQLAlchemySettingsStore) -> None:
    for nickname in ["carol", "alice", "bob"]:
        await sql_store.insert(SettingsRecord(nickname, 1, {}))

    first = await sql_store.scan(None, 2)
    assert [r.nickname for r in first] == ["alice", "bob"]

    second = await sql_store.scan(first[-1].nickname, 2)
    assert [r.nickname for r in second] == ["carol"]

    assert await sql_store.scan("carol", 2) == []


@pytest.mark.asyncio
async def test_errors_are_wrapped() -> None:
    other = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    # no schema created on this engine
    store = SQLAlchemySettingsStore(async_sessionmaker(other, expire_on_commit=False))
    try:
        with pytest.raises(SettingsStoreError):
            await store.get("alice")
        with pytest.raises(SettingsStoreError):
            await store.scan(None, 10)
    finally:
        await other.dispose()
