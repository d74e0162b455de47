"""Tests for snapshot storage."""

from pathlib import Path

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from decksmith.db.database import session_scope
from decksmith.db.operations import (
    ENTRIES_KEY,
    NAME_KEY,
    clear_snapshot,
    load_snapshot,
    save_snapshot,
)
from decksmith.models.db import SnapshotValueDB
from decksmith.models.deck import DeckSnapshot
from decksmith.models.failure import FailureKind, PersistenceError
from decksmith.services.persistence import SnapshotAdapter


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


class TestSnapshotOperations:
    async def test_load_without_save_returns_none(self, session: AsyncSession) -> None:
        assert await load_snapshot(session, "Default") is None

    async def test_save_and_load(self, session: AsyncSession) -> None:
        await save_snapshot(session, DeckSnapshot(name="Tour", entries=[("AA-1", 2)]))
        await session.commit()

        snapshot = await load_snapshot(session, "Default")

        assert snapshot == DeckSnapshot(name="Tour", entries=[("AA-1", 2)])

    async def test_entries_stored_as_id_count_records(self, session: AsyncSession) -> None:
        await save_snapshot(session, DeckSnapshot(name="Tour", entries=[("AA-1", 2)]))

        row = await session.get(SnapshotValueDB, ENTRIES_KEY)
        name_row = await session.get(SnapshotValueDB, NAME_KEY)

        assert row.value == [{"id": "AA-1", "count": 2}]
        assert name_row.value == "Tour"

    async def test_save_overwrites(self, session: AsyncSession) -> None:
        await save_snapshot(session, DeckSnapshot(name="One", entries=[("AA-1", 1)]))
        await save_snapshot(session, DeckSnapshot(name="Two", entries=[("BB-3", 3)]))
        await session.commit()

        snapshot = await load_snapshot(session, "Default")

        assert snapshot.name == "Two"
        assert snapshot.entries == [("BB-3", 3)]

    async def test_keys_are_independent(self, session: AsyncSession) -> None:
        """A missing name falls back to the default; entries still load."""
        session.add(SnapshotValueDB(key=ENTRIES_KEY, value=[{"id": "AA-1", "count": 1}]))
        await session.commit()

        snapshot = await load_snapshot(session, "Default")

        assert snapshot.name == "Default"
        assert snapshot.entries == [("AA-1", 1)]

    async def test_name_only(self, session: AsyncSession) -> None:
        session.add(SnapshotValueDB(key=NAME_KEY, value="Named"))
        await session.commit()

        snapshot = await load_snapshot(session, "Default")

        assert snapshot == DeckSnapshot(name="Named", entries=[])

    @pytest.mark.parametrize(
        "stored",
        [
            "not a list",
            ["AA-1"],
            [{"id": "AA-1"}],
            [{"id": 5, "count": 1}],
            [{"id": "AA-1", "count": "2"}],
            [{"id": "AA-1", "count": True}],
        ],
    )
    async def test_malformed_entries_raise(self, session: AsyncSession, stored) -> None:
        session.add(SnapshotValueDB(key=ENTRIES_KEY, value=stored))
        await session.commit()

        with pytest.raises(ValueError):
            await load_snapshot(session, "Default")

    async def test_clear(self, session: AsyncSession) -> None:
        await save_snapshot(session, DeckSnapshot(name="Tour", entries=[("AA-1", 2)]))
        await session.commit()

        assert await clear_snapshot(session) is True
        await session.commit()

        assert await load_snapshot(session, "Default") is None
        assert await clear_snapshot(session) is False

    async def test_session_scope_commits(self, async_engine) -> None:
        factory = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

        async with session_scope(factory) as session:
            await save_snapshot(session, DeckSnapshot(name="Scoped"))

        async with factory() as session:
            snapshot = await load_snapshot(session, "Default")

        assert snapshot.name == "Scoped"


class TestSnapshotAdapter:
    async def test_round_trip(self, adapter: SnapshotAdapter) -> None:
        await adapter.save(DeckSnapshot(name="Tour", entries=[("AA-1", 2), ("CC-1", 1)]))

        snapshot = await adapter.load("Default")

        assert snapshot.entries == [("AA-1", 2), ("CC-1", 1)]
        assert snapshot.name == "Tour"

    async def test_clear(self, adapter: SnapshotAdapter) -> None:
        await adapter.save(DeckSnapshot(name="Tour", entries=[("AA-1", 2)]))

        await adapter.clear()

        assert await adapter.load("Default") is None

    async def test_creates_tables_on_first_use(self, tmp_path: Path) -> None:
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'fresh.db'}")
        try:
            adapter = SnapshotAdapter(engine)

            assert await adapter.load("Default") is None
        finally:
            await engine.dispose()

    async def test_malformed_data_raises_persistence_error(
        self, adapter: SnapshotAdapter, async_engine
    ) -> None:
        factory = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
        async with session_scope(factory) as session:
            session.add(SnapshotValueDB(key=ENTRIES_KEY, value="garbage"))

        with pytest.raises(PersistenceError) as exc_info:
            await adapter.load("Default")

        assert exc_info.value.kind == FailureKind.PERSISTENCE_FAILED

    async def test_storage_failure_raises_persistence_error(
        self, adapter: SnapshotAdapter, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        async def broken_save(*_args, **_kwargs):
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))

        monkeypatch.setattr("decksmith.services.persistence.save_snapshot", broken_save)

        with pytest.raises(PersistenceError) as exc_info:
            await adapter.save(DeckSnapshot(name="Tour"))

        assert exc_info.value.operation == "saved"
