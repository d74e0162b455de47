"""
Snapshot CRUD operations.

The deck entries and the deck name are two independent keys: either one
may be present without the other.
"""

from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from decksmith.models.db import SnapshotValueDB
from decksmith.models.deck import DeckSnapshot

ENTRIES_KEY = "deck_entries"
NAME_KEY = "deck_name"


async def _put_value(session: AsyncSession, key: str, value: Any) -> None:
    """Insert or replace a single snapshot key."""
    existing = await session.get(SnapshotValueDB, key)
    if existing is None:
        session.add(SnapshotValueDB(key=key, value=value))
    else:
        existing.value = value


async def _get_values(session: AsyncSession) -> dict[str, Any]:
    """All stored snapshot keys."""
    result = await session.execute(select(SnapshotValueDB))
    return {row.key: row.value for row in result.scalars()}


async def save_snapshot(session: AsyncSession, snapshot: DeckSnapshot) -> None:
    """Write both snapshot keys, replacing any previous values."""
    await _put_value(session, ENTRIES_KEY, snapshot.to_records())
    await _put_value(session, NAME_KEY, snapshot.name)
    await session.flush()


async def load_snapshot(session: AsyncSession, default_name: str) -> DeckSnapshot | None:
    """
    Read the stored snapshot.

    Returns None if nothing has been saved. A missing name falls back to
    `default_name`; missing entries mean an empty deck.

    Raises:
        ValueError: If a stored value does not have the expected shape
    """
    values = await _get_values(session)
    if ENTRIES_KEY not in values and NAME_KEY not in values:
        return None

    name = values.get(NAME_KEY) or default_name
    if not isinstance(name, str):
        raise ValueError(f"Stored deck name is not a string: {name!r}")

    return DeckSnapshot(name=name, entries=_parse_records(values.get(ENTRIES_KEY) or []))


def _parse_records(records: Any) -> list[tuple[str, int]]:
    """Validate stored {"id", "count"} records."""
    if not isinstance(records, list):
        raise ValueError(f"Stored deck entries are not a list: {type(records).__name__}")

    entries: list[tuple[str, int]] = []
    for record in records:
        if not isinstance(record, dict):
            raise ValueError(f"Stored deck entry is not a record: {record!r}")
        card_id = record.get("id")
        count = record.get("count")
        if not isinstance(card_id, str) or not isinstance(count, int) or isinstance(count, bool):
            raise ValueError(f"Stored deck entry has invalid fields: {record!r}")
        entries.append((card_id, count))
    return entries


async def clear_snapshot(session: AsyncSession) -> bool:
    """
    Delete both snapshot keys.

    Returns True if anything was deleted.
    """
    result = await session.execute(
        delete(SnapshotValueDB).where(SnapshotValueDB.key.in_([ENTRIES_KEY, NAME_KEY]))
    )
    return bool(result.rowcount)
