"""
Deck statistics.

Summaries a front end shows next to the deck list.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from decksmith.config import DECK_SIZE_LIMIT
from decksmith.models.card import KIND_ORDER, TYPE_ORDER
from decksmith.models.deck import DeckEntry


@dataclass
class DeckSummary:
    """Card counts for a deck."""

    total_cards: int = 0
    unique_cards: int = 0
    by_kind: dict[str, int] = field(default_factory=dict)
    by_type: dict[str, int] = field(default_factory=dict)

    @property
    def slots_remaining(self) -> int:
        return max(DECK_SIZE_LIMIT - self.total_cards, 0)

    @property
    def is_complete(self) -> bool:
        """True if the deck is at DECK_SIZE_LIMIT."""
        return self.total_cards == DECK_SIZE_LIMIT


def summarize_deck(entries: Iterable[DeckEntry]) -> DeckSummary:
    """
    Count cards by kind and by type.

    A card with several types counts toward each of them, so the type
    counts can add up to more than total_cards. Keys follow display
    priority, with unknown values after the known ones.
    """
    summary = DeckSummary()
    by_kind: dict[str, int] = {}
    by_type: dict[str, int] = {}

    for entry in entries:
        summary.total_cards += entry.count
        summary.unique_cards += 1
        by_kind[entry.kind] = by_kind.get(entry.kind, 0) + entry.count
        for card_type in entry.types:
            by_type[card_type] = by_type.get(card_type, 0) + entry.count

    summary.by_kind = _ordered(by_kind, KIND_ORDER)
    summary.by_type = _ordered(by_type, TYPE_ORDER)
    return summary


def _ordered(counts: dict[str, int], order: tuple[str, ...]) -> dict[str, int]:
    keys = [key for key in order if key in counts]
    keys += sorted(set(counts).difference(order))
    return {key: counts[key] for key in keys}
