"""
Snapshot persistence adapter.

Writes and reads the deck snapshot in the local SQLite database. Every
storage failure surfaces as PersistenceError so callers can report it
and carry on with the in-memory deck.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from decksmith.db.database import init_db, session_scope
from decksmith.db.operations import clear_snapshot, load_snapshot, save_snapshot
from decksmith.models.deck import DeckSnapshot
from decksmith.models.failure import PersistenceError

logger = logging.getLogger(__name__)


class SnapshotAdapter:
    """
    Durable storage for the single active deck.

    Usage:
        adapter = SnapshotAdapter(engine)
        await adapter.initialize()
        await adapter.save(store.snapshot())
    """

    def __init__(self, engine: AsyncEngine):
        self._engine = engine
        self._factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        self._initialized = False

    async def initialize(self) -> None:
        """
        Create the snapshot table if needed.

        Raises:
            PersistenceError: If the database cannot be opened
        """
        if self._initialized:
            return
        try:
            await init_db(self._engine)
        except SQLAlchemyError as e:
            raise PersistenceError("opened", str(e)) from e
        self._initialized = True

    async def save(self, snapshot: DeckSnapshot) -> None:
        """
        Replace the stored snapshot.

        Raises:
            PersistenceError: If the write fails
        """
        await self.initialize()
        try:
            async with session_scope(self._factory) as session:
                await save_snapshot(session, snapshot)
        except SQLAlchemyError as e:
            raise PersistenceError("saved", str(e)) from e
        logger.debug("Saved deck %r (%d cards)", snapshot.name, snapshot.total_cards())

    async def load(self, default_name: str) -> DeckSnapshot | None:
        """
        Read the stored snapshot.

        Returns:
            The snapshot, or None if nothing was saved

        Raises:
            PersistenceError: If the read fails or the stored data is malformed
        """
        await self.initialize()
        try:
            async with session_scope(self._factory) as session:
                return await load_snapshot(session, default_name)
        except (SQLAlchemyError, ValueError) as e:
            raise PersistenceError("restored", str(e)) from e

    async def clear(self) -> None:
        """
        Discard the stored snapshot.

        Raises:
            PersistenceError: If the delete fails
        """
        await self.initialize()
        try:
            async with session_scope(self._factory) as session:
                deleted = await clear_snapshot(session)
        except SQLAlchemyError as e:
            raise PersistenceError("cleared", str(e)) from e
        logger.debug("Cleared saved deck (existed=%s)", deleted)
