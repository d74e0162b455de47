"""
Card ordering.

Defines the total orders used to display cards:

- Natural id order: "AA-2" sorts before "AA-10"
- Kind order: fixed KIND_ORDER priority
- Type order: fixed TYPE_ORDER priority of a card's earliest type

The canonical display order composes kind, type, then natural id. The
selectable pool and the deck list are both sorted with it so the two
lists always agree.

Unknown kinds and cards with no known type both sort last.

The uppercase-before-lowercase rule for id runs applies to ASCII letters
only; other characters compare by code point.
"""

import re
from collections.abc import Iterable
from functools import cmp_to_key
from typing import Protocol, TypeVar

from decksmith.models.card import KIND_ORDER, TYPE_ORDER

_TOKEN_PATTERN = re.compile(r"\d+|\D+")

_KIND_INDEX: dict[str, int] = {kind: i for i, kind in enumerate(KIND_ORDER)}
_TYPE_INDEX: dict[str, int] = {card_type: i for i, card_type in enumerate(TYPE_ORDER)}


class Sortable(Protocol):
    """Anything exposing the fields the comparators read."""

    @property
    def id(self) -> str: ...

    @property
    def kind(self) -> str: ...

    @property
    def types(self) -> tuple[str, ...]: ...


S = TypeVar("S", bound=Sortable)


def _sign(a: object, b: object) -> int:
    return (a > b) - (a < b)  # type: ignore[operator]


def tokenize_id(card_id: str) -> list[str]:
    """Split an id into alternating maximal runs of digits and non-digits."""
    return _TOKEN_PATTERN.findall(card_id)


def _compare_tokens(a: str, b: str) -> int:
    a_digit = a.isdecimal()
    b_digit = b.isdecimal()

    if a_digit and b_digit:
        return _sign(int(a), int(b))

    if not a_digit and not b_digit:
        # Uppercase-leading runs come before lowercase-leading ones (ASCII only)
        a_lead, b_lead = a[0], b[0]
        if a_lead.isascii() and b_lead.isascii():
            if a_lead.isupper() and b_lead.islower():
                return -1
            if a_lead.islower() and b_lead.isupper():
                return 1

    return _sign(a, b)


def compare_natural_id(a: str, b: str) -> int:
    """
    Compare two ids in natural order.

    Digit runs compare numerically, so "AA-2" < "AA-10". When one id's
    tokens are a strict prefix of the other's, the shorter sorts first.
    Ids that cannot be tokenized fall back to plain string comparison.
    """
    a_tokens = tokenize_id(a)
    b_tokens = tokenize_id(b)
    if not a_tokens or not b_tokens:
        return _sign(a, b)

    for a_token, b_token in zip(a_tokens, b_tokens):
        result = _compare_tokens(a_token, b_token)
        if result:
            return result

    return _sign(len(a_tokens), len(b_tokens))


def kind_rank(kind: str) -> int:
    """Position of a kind in KIND_ORDER; unknown kinds rank last."""
    return _KIND_INDEX.get(kind, len(KIND_ORDER))


def type_rank(types: Iterable[str]) -> int:
    """Position of the earliest known type; no known type ranks last."""
    return min((_TYPE_INDEX[t] for t in types if t in _TYPE_INDEX), default=len(TYPE_ORDER))


def compare_kind(a: Sortable, b: Sortable) -> int:
    return _sign(kind_rank(a.kind), kind_rank(b.kind))


def compare_type(a: Sortable, b: Sortable) -> int:
    return _sign(type_rank(a.types), type_rank(b.types))


def compare_cards(a: Sortable, b: Sortable) -> int:
    """Canonical display comparator: kind, then type, then natural id."""
    return compare_kind(a, b) or compare_type(a, b) or compare_natural_id(a.id, b.id)


card_sort_key = cmp_to_key(compare_cards)


def sort_cards(cards: Iterable[S]) -> list[S]:
    """
    Return cards (or deck entries) in canonical display order.

    The sort is stable, so equal items keep their input order.
    """
    return sorted(cards, key=card_sort_key)
