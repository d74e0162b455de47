"""
Card filtering.

A card passes a FilterCriteria when it matches EVERY category that is
set (AND across categories) and ANY value within a category (OR within).
Empty categories do not restrict.

Filtering never touches the catalog. Each call is a single pass over the
cards given, so it is safe to run on every keystroke.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from decksmith.models.card import KIND_ORDER, TYPE_ORDER, Card


@dataclass(frozen=True)
class FilterCriteria:
    """
    What the user is searching for.

    Attributes:
        text: Case-insensitive substring of name, id, or any tag
        kinds: Allowed kinds (empty = any)
        types: Allowed types; a card needs at least one (empty = any)
        tags: Tags; a card needs at least one (empty = any)
    """

    text: str = ""
    kinds: frozenset[str] = field(default_factory=frozenset)
    types: frozenset[str] = field(default_factory=frozenset)
    tags: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def build(
        cls,
        text: str | None = None,
        kinds: Iterable[str] | None = None,
        types: Iterable[str] | None = None,
        tags: Iterable[str] | None = None,
    ) -> "FilterCriteria":
        """Build criteria from loose inputs (None and lists allowed)."""
        return cls(
            text=text or "",
            kinds=frozenset(kinds or ()),
            types=frozenset(types or ()),
            tags=frozenset(tags or ()),
        )

    @property
    def is_empty(self) -> bool:
        """True if the criteria restrict nothing."""
        return not (self.text or self.kinds or self.types or self.tags)


def _matches_text(card: Card, needle: str) -> bool:
    if needle in card.name.lower() or needle in card.id.lower():
        return True
    return any(needle in tag.lower() for tag in card.tags)


def matches(card: Card, criteria: FilterCriteria) -> bool:
    """Check if a card passes every category of the criteria."""
    if criteria.text and not _matches_text(card, criteria.text.lower()):
        return False

    if criteria.kinds and card.kind not in criteria.kinds:
        return False

    if criteria.types and criteria.types.isdisjoint(card.types):
        return False

    if criteria.tags and criteria.tags.isdisjoint(card.tags):
        return False

    return True


def filter_cards(cards: Iterable[Card], criteria: FilterCriteria) -> list[Card]:
    """
    Cards passing the criteria, in input order.

    Ordering is applied separately with ordering.sort_cards.
    """
    if criteria.is_empty:
        return list(cards)
    return [card for card in cards if matches(card, criteria)]


@dataclass
class Facets:
    """Filter choices present in a set of cards."""

    kinds: list[str]
    types: list[str]
    tags: list[str]


def available_facets(cards: Iterable[Card]) -> Facets:
    """
    Collect the kinds, types and tags a front end can offer as filters.

    Known kinds and types come in display priority order, followed by
    any unknown values alphabetically. Tags are alphabetical.
    """
    kinds: set[str] = set()
    types: set[str] = set()
    tags: set[str] = set()
    for card in cards:
        kinds.add(card.kind)
        types.update(card.types)
        tags.update(card.tags)

    return Facets(
        kinds=_in_priority_order(kinds, KIND_ORDER),
        types=_in_priority_order(types, TYPE_ORDER),
        tags=sorted(tags),
    )


def _in_priority_order(values: set[str], order: tuple[str, ...]) -> list[str]:
    known = [value for value in order if value in values]
    return known + sorted(values.difference(order))
