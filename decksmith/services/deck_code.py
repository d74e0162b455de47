"""
Deck code codec.

A deck code is every card id in the deck, repeated once per copy and
joined with CODE_DELIMITER:

    "X-1/X-1/Y-2"  ->  {X-1: 2, Y-2: 1}

Entry order inside a code does not matter; decoding re-aggregates by id.
The deck name is not part of the code.
"""

import logging
from collections import Counter
from collections.abc import Iterable

from decksmith.config import CODE_DELIMITER
from decksmith.models.deck import DeckEntry
from decksmith.services.catalog import Catalog

logger = logging.getLogger(__name__)


def encode_deck(entries: Iterable[DeckEntry]) -> str:
    """Encode deck entries as a delimiter-joined multiset of ids."""
    ids: list[str] = []
    for entry in entries:
        ids.extend([entry.card_id] * entry.count)
    return CODE_DELIMITER.join(ids)


def decode_deck(code: str, catalog: Catalog) -> list[DeckEntry]:
    """
    Decode a deck code against the catalog.

    Ids not in the catalog are dropped. Counts are NOT clamped to the
    deck limits here; DeckStore.replace_entries does that on import.

    Returns:
        One entry per distinct known id, in order of first appearance.
        An empty list means nothing could be decoded; callers treat that
        as a failed import.
    """
    tokens = [token.strip() for token in code.strip().split(CODE_DELIMITER)]
    counts = Counter(token for token in tokens if token)

    entries: list[DeckEntry] = []
    unknown: list[str] = []
    for card_id, count in counts.items():
        card = catalog.get(card_id)
        if card is None:
            unknown.append(card_id)
            continue
        entries.append(DeckEntry(card=card, count=count))

    if unknown:
        logger.debug("Dropped %d unknown ids from deck code: %s", len(unknown), unknown)

    return entries
