from decksmith.services.card_filter import (
    Facets,
    FilterCriteria,
    available_facets,
    filter_cards,
    matches,
)
from decksmith.services.catalog import (
    Catalog,
    CardRecord,
    build_catalog,
    download_catalog,
    fetch_catalog,
    load_catalog,
    load_catalog_file,
)
from decksmith.services.deck_code import decode_deck, encode_deck
from decksmith.services.deck_session import DeckSession
from decksmith.services.deck_stats import DeckSummary, summarize_deck
from decksmith.services.deck_store import DeckStore, StoreEvent
from decksmith.services.ordering import (
    compare_cards,
    compare_kind,
    compare_natural_id,
    compare_type,
    sort_cards,
)
from decksmith.services.persistence import SnapshotAdapter

__all__ = [
    "CardRecord",
    "Catalog",
    "DeckSession",
    "DeckStore",
    "DeckSummary",
    "Facets",
    "FilterCriteria",
    "SnapshotAdapter",
    "StoreEvent",
    "available_facets",
    "build_catalog",
    "compare_cards",
    "compare_kind",
    "compare_natural_id",
    "compare_type",
    "decode_deck",
    "download_catalog",
    "encode_deck",
    "fetch_catalog",
    "filter_cards",
    "load_catalog",
    "load_catalog_file",
    "matches",
    "sort_cards",
    "summarize_deck",
]
