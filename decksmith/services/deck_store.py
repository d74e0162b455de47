"""
Deck store.

Holds the authoritative state of the single active deck and is the only
way to change it.

INVARIANTS (hold after every operation):
- Total copies across all entries <= DECK_SIZE_LIMIT
- Every entry's count is within [1, COPY_LIMIT]
- No zero-count entries exist; a card has at most one entry

Only two requests are refused: adding past DECK_SIZE_LIMIT raises
CapacityError, and adding past COPY_LIMIT is a silent no-op. Anything
else that would break an invariant is a programming error.

Every change bumps `version` and is announced to subscribers as a
StoreEvent carrying a plain snapshot, which is how the persistence
adapter learns what to write. Listeners run synchronously and must not
block.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Literal

from decksmith.config import COPY_LIMIT, DECK_SIZE_LIMIT, settings
from decksmith.models.card import Card
from decksmith.models.deck import ClampReport, DeckEntry, DeckSnapshot
from decksmith.models.failure import CapacityError
from decksmith.services.ordering import sort_cards

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreEvent:
    """A change to the deck, announced to subscribers."""

    kind: Literal["changed", "reset"]
    snapshot: DeckSnapshot
    version: int


Listener = Callable[[StoreEvent], None]


class DeckStore:
    """
    The active deck.

    Usage:
        store = DeckStore()
        store.add_card(card)
        store.decrement_count(card.id)
        entries = store.entries  # canonical display order
    """

    def __init__(self, default_name: str | None = None):
        self._default_name = default_name or settings.default_deck_name
        self._name = self._default_name
        self._counts: dict[str, int] = {}
        self._cards: dict[str, Card] = {}
        self._version = 0
        self._listeners: list[Listener] = []

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def default_name(self) -> str:
        return self._default_name

    @property
    def version(self) -> int:
        """Increments on every change; usable as a cache key."""
        return self._version

    @property
    def total_count(self) -> int:
        return sum(self._counts.values())

    @property
    def is_full(self) -> bool:
        return self.total_count >= DECK_SIZE_LIMIT

    @property
    def entries(self) -> list[DeckEntry]:
        """Entries in canonical display order."""
        return sort_cards(
            DeckEntry(card=self._cards[card_id], count=count)
            for card_id, count in self._counts.items()
        )

    def count_of(self, card_id: str) -> int:
        """Copies of a card in the deck (0 if absent)."""
        return self._counts.get(card_id, 0)

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._counts

    def __len__(self) -> int:
        """Number of distinct cards."""
        return len(self._counts)

    def snapshot(self) -> DeckSnapshot:
        """Plain serializable form of the current deck."""
        return DeckSnapshot(
            name=self._name,
            entries=[(entry.card_id, entry.count) for entry in self.entries],
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a change listener.

        Returns:
            A callable that unsubscribes the listener
        """
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_card(self, card: Card) -> bool:
        """
        Add one copy of a card.

        Returns:
            True if the deck changed, False if the card is already at COPY_LIMIT

        Raises:
            CapacityError: If the deck already holds DECK_SIZE_LIMIT cards
        """
        if self.is_full:
            raise CapacityError(DECK_SIZE_LIMIT, card.id)

        current = self._counts.get(card.id, 0)
        if current >= COPY_LIMIT:
            return False

        self._cards[card.id] = card
        self._counts[card.id] = current + 1
        self._commit("changed")
        return True

    def increment_count(self, card_id: str) -> bool:
        """
        Add one more copy of a card already in the deck.

        Returns:
            True if the deck changed; False if the card is absent or at COPY_LIMIT

        Raises:
            CapacityError: If the card is in the deck and the deck is full
        """
        card = self._cards.get(card_id)
        if card is None:
            return False
        return self.add_card(card)

    def decrement_count(self, card_id: str) -> bool:
        """
        Remove one copy of a card; the entry goes away with its last copy.

        Returns:
            True if the deck changed, False if the card is absent
        """
        current = self._counts.get(card_id)
        if current is None:
            return False

        if current <= 1:
            self._drop(card_id)
        else:
            self._counts[card_id] = current - 1
        self._commit("changed")
        return True

    def remove_card(self, card_id: str) -> bool:
        """
        Remove every copy of a card.

        Returns:
            True if the deck changed, False if the card is absent
        """
        if card_id not in self._counts:
            return False
        self._drop(card_id)
        self._commit("changed")
        return True

    def set_name(self, name: str) -> None:
        """
        Rename the deck.

        Raises:
            ValueError: If name is empty
        """
        if not name:
            raise ValueError("Deck name must not be empty")
        if name == self._name:
            return
        self._name = name
        self._commit("changed")

    def reset(self) -> None:
        """
        Empty the deck and restore the default name.

        Destructive: callers gate this behind user confirmation.
        Subscribers receive a "reset" event, which tells the persistence
        adapter to discard the saved snapshot.
        """
        self._counts.clear()
        self._cards.clear()
        self._name = self._default_name
        self._commit("reset")

    def replace_entries(
        self,
        entries: Iterable[DeckEntry],
        name: str | None = None,
    ) -> ClampReport:
        """
        Replace the whole deck in one step (code import, snapshot restore).

        Counts are clamped to COPY_LIMIT per card and DECK_SIZE_LIMIT in
        total, in the order given; excess copies are dropped and reported.
        Repeated cards are merged before clamping.

        Args:
            entries: New entries; counts may exceed the limits
            name: New deck name, or None to keep the current one

        Returns:
            ClampReport of dropped copies per card id
        """
        merged: dict[str, int] = {}
        cards: dict[str, Card] = {}
        for entry in entries:
            merged[entry.card_id] = merged.get(entry.card_id, 0) + entry.count
            cards[entry.card_id] = entry.card

        report = ClampReport()
        counts: dict[str, int] = {}
        total = 0
        for card_id, requested in merged.items():
            if requested <= 0:
                continue
            allowed = min(requested, COPY_LIMIT, DECK_SIZE_LIMIT - total)
            if allowed < requested:
                report.dropped[card_id] = requested - allowed
            if allowed > 0:
                counts[card_id] = allowed
                total += allowed

        if report.clamped:
            logger.info(
                "Clamped %d copies while loading deck: %s",
                report.total_dropped,
                report.dropped,
            )

        self._counts = counts
        self._cards = {card_id: cards[card_id] for card_id in counts}
        if name:
            self._name = name
        self._commit("changed")
        return report

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _drop(self, card_id: str) -> None:
        del self._counts[card_id]
        del self._cards[card_id]

    def _check_invariants(self) -> None:
        total = self.total_count
        if total > DECK_SIZE_LIMIT:
            raise RuntimeError(f"Deck holds {total} cards, limit is {DECK_SIZE_LIMIT}")
        for card_id, count in self._counts.items():
            if not 1 <= count <= COPY_LIMIT:
                raise RuntimeError(f"Card {card_id} has count {count}")
        if self._counts.keys() != self._cards.keys():
            raise RuntimeError("Deck counts and cards are out of sync")

    def _commit(self, kind: Literal["changed", "reset"]) -> None:
        self._check_invariants()
        self._version += 1
        event = StoreEvent(kind=kind, snapshot=self.snapshot(), version=self._version)
        for listener in list(self._listeners):
            listener(event)
