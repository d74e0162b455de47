from dataclasses import dataclass, field

from decksmith.models.card import Card


@dataclass(frozen=True, slots=True)
class DeckEntry:
    """A card and how many copies of it are in the deck (1-4)."""

    card: Card
    count: int

    @property
    def card_id(self) -> str:
        return self.card.id

    # Card-shaped accessors so entries sort with the same comparators as cards
    @property
    def id(self) -> str:
        return self.card.id

    @property
    def kind(self) -> str:
        return self.card.kind

    @property
    def types(self) -> tuple[str, ...]:
        return self.card.types


@dataclass
class DeckSnapshot:
    """
    Plain serializable form of a deck.

    Only ids are stored, never full card objects, so a snapshot
    survives catalog reloads.

    Attributes:
        name: Deck name
        entries: (card_id, count) pairs
    """

    name: str
    entries: list[tuple[str, int]] = field(default_factory=list)

    def total_cards(self) -> int:
        """Total number of cards in the snapshot."""
        return sum(count for _, count in self.entries)

    def to_records(self) -> list[dict[str, object]]:
        """Entries as {"id", "count"} records for storage."""
        return [{"id": card_id, "count": count} for card_id, count in self.entries]


@dataclass
class ClampReport:
    """Copies dropped while loading entries into a deck."""

    dropped: dict[str, int] = field(default_factory=dict)

    @property
    def total_dropped(self) -> int:
        return sum(self.dropped.values())

    @property
    def clamped(self) -> bool:
        return bool(self.dropped)
