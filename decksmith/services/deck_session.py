"""
Deck session.

Owns everything for one user session: the catalog, the deck store, the
snapshot adapter and the pending user notifications. Front ends call
the methods here in response to user gestures.

Deck mutations are synchronous and never wait on storage. The store
announces each change; the session keeps the latest one and writes it
when the front end calls `flush()`. A storage failure is reported once
and never blocks later mutations.

If the catalog fails to load the session runs degraded: the failure is
a persistent notification and every catalog-dependent call raises
CatalogLoadError.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from decksmith.config import Settings
from decksmith.models.card import Card
from decksmith.models.deck import ClampReport, DeckEntry
from decksmith.models.failure import (
    CatalogLoadError,
    ImportDecodeError,
    KnownError,
    Notification,
    PersistenceError,
)
from decksmith.services.card_filter import FilterCriteria, filter_cards
from decksmith.services.catalog import Catalog, load_catalog
from decksmith.services.deck_code import decode_deck, encode_deck
from decksmith.services.deck_stats import DeckSummary, summarize_deck
from decksmith.services.deck_store import DeckStore, StoreEvent
from decksmith.services.ordering import sort_cards
from decksmith.services.persistence import SnapshotAdapter

logger = logging.getLogger(__name__)


class DeckSession:
    """
    One user's deck-building session.

    Usage:
        session = await DeckSession.open(settings, adapter)
        await session.restore()
        session.add("AA-1")
        await session.flush()
    """

    def __init__(
        self,
        catalog: Catalog | None,
        adapter: SnapshotAdapter | None = None,
        store: DeckStore | None = None,
        catalog_error: CatalogLoadError | None = None,
    ):
        self._catalog = catalog
        self._catalog_error = catalog_error
        self._adapter = adapter
        self.store = store or DeckStore()
        self._notifications: list[Notification] = []
        self._pending: StoreEvent | None = None
        self._persistence_reported = False

        # Derived view caches: (key, value)
        self._pool_cache: tuple[FilterCriteria, list[Card]] | None = None
        self._deck_cache: tuple[int, list[DeckEntry]] | None = None

        self.store.subscribe(self._on_store_event)

        if catalog is None:
            self._notify(catalog_error or CatalogLoadError())

    @classmethod
    async def open(cls, config: Settings, adapter: SnapshotAdapter | None = None) -> "DeckSession":
        """
        Load the catalog once and start a session.

        A catalog failure does not raise; it yields a degraded session.
        """
        store = DeckStore(config.default_deck_name)
        try:
            catalog = await load_catalog(config)
        except CatalogLoadError as e:
            logger.error("Catalog unavailable: %s", e.detail)
            return cls(None, adapter, store, catalog_error=e)
        return cls(catalog, adapter, store)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def available(self) -> bool:
        """False if the catalog failed to load."""
        return self._catalog is not None

    @property
    def catalog(self) -> Catalog:
        """
        The loaded catalog.

        Raises:
            CatalogLoadError: If the session is degraded
        """
        return self._require_catalog()

    @property
    def notifications(self) -> list[Notification]:
        return list(self._notifications)

    def drain_notifications(self) -> list[Notification]:
        """Return pending notifications and forget the transient ones."""
        drained = self._notifications
        self._notifications = [n for n in drained if n.persistent]
        return drained

    @property
    def has_unsaved_changes(self) -> bool:
        return self._pending is not None

    # -------------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------------

    def pool(self, criteria: FilterCriteria | None = None) -> list[Card]:
        """Catalog cards passing the criteria, in canonical display order."""
        criteria = criteria or FilterCriteria()
        catalog = self.catalog
        if self._pool_cache is None or self._pool_cache[0] != criteria:
            self._pool_cache = (criteria, sort_cards(filter_cards(catalog, criteria)))
        return list(self._pool_cache[1])

    def deck_view(self) -> list[DeckEntry]:
        """Deck entries in canonical display order."""
        version = self.store.version
        if self._deck_cache is None or self._deck_cache[0] != version:
            self._deck_cache = (version, self.store.entries)
        return list(self._deck_cache[1])

    def summary(self) -> DeckSummary:
        return summarize_deck(self.deck_view())

    # -------------------------------------------------------------------------
    # Gestures
    # -------------------------------------------------------------------------

    def add(self, card_id: str) -> bool:
        """
        Add one copy of a catalog card.

        Returns:
            False if the card is already at the copy limit

        Raises:
            CapacityError: If the deck is full
            CardNotFoundError: If the id is not in the catalog
            CatalogLoadError: If the session is degraded
        """
        with self._reporting():
            card = self.catalog.require(card_id)
            return self.store.add_card(card)

    def increment(self, card_id: str) -> bool:
        with self._reporting():
            self._require_catalog()
            return self.store.increment_count(card_id)

    def decrement(self, card_id: str) -> bool:
        return self.store.decrement_count(card_id)

    def remove(self, card_id: str) -> bool:
        return self.store.remove_card(card_id)

    def rename(self, name: str) -> None:
        self.store.set_name(name)

    def reset(self) -> None:
        """Empty the deck and discard the saved snapshot on next flush."""
        self.store.reset()

    def export_code(self) -> str:
        """Deck code for the current deck."""
        return encode_deck(self.store.entries)

    def import_code(self, code: str) -> ClampReport:
        """
        Replace the deck with the cards in a deck code.

        Counts beyond the deck limits are dropped and reported. The deck
        name is kept.

        Raises:
            ImportDecodeError: If the code contains no catalog card; deck unchanged
            CatalogLoadError: If the session is degraded
        """
        with self._reporting():
            entries = decode_deck(code, self.catalog)
            if not entries:
                raise ImportDecodeError(code)
            return self.store.replace_entries(entries)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def restore(self) -> ClampReport | None:
        """
        Load the saved deck into the store.

        Cards no longer in the catalog are dropped silently. A storage
        failure falls back to the empty default deck and is reported.

        Returns:
            ClampReport if a snapshot was restored, else None
        """
        if self._adapter is None or not self.available:
            return None

        try:
            snapshot = await self._adapter.load(self.store.default_name)
        except PersistenceError as e:
            self._report_persistence(e)
            return None
        if snapshot is None:
            return None

        entries: list[DeckEntry] = []
        missing: list[str] = []
        for card_id, count in snapshot.entries:
            card = self.catalog.get(card_id)
            if card is None:
                missing.append(card_id)
                continue
            entries.append(DeckEntry(card=card, count=count))
        if missing:
            logger.info("Saved deck references %d cards not in catalog: %s", len(missing), missing)

        report = self.store.replace_entries(entries, name=snapshot.name)
        # Restoring is not a user change; don't write it back
        self._pending = None
        return report

    async def flush(self) -> bool:
        """
        Write the latest deck change to storage.

        Returns:
            True if something was written successfully
        """
        event = self._pending
        if event is None or self._adapter is None:
            return False

        self._pending = None
        try:
            if event.kind == "reset":
                await self._adapter.clear()
            else:
                await self._adapter.save(event.snapshot)
        except PersistenceError as e:
            # Keep the change queued unless a newer one arrived
            if self._pending is None:
                self._pending = event
            self._report_persistence(e)
            return False
        return True

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _require_catalog(self) -> Catalog:
        if self._catalog is None:
            raise self._catalog_error or CatalogLoadError()
        return self._catalog

    def _on_store_event(self, event: StoreEvent) -> None:
        # Reset followed by further edits is just a save of the new state
        self._pending = event

    def _notify(self, error: KnownError) -> None:
        self._notifications.append(error.to_notification())

    def _report_persistence(self, error: PersistenceError) -> None:
        logger.warning("Persistence failure: %s (%s)", error.message, error.detail)
        if not self._persistence_reported:
            self._persistence_reported = True
            self._notify(error)

    @contextmanager
    def _reporting(self) -> Iterator[None]:
        """Turn KnownErrors into notifications, then re-raise."""
        try:
            yield
        except CatalogLoadError:
            # Already reported persistently when the session opened
            raise
        except KnownError as e:
            self._notify(e)
            raise
