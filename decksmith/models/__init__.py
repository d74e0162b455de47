from decksmith.models.card import KIND_ORDER, TYPE_ORDER, Card
from decksmith.models.deck import ClampReport, DeckEntry, DeckSnapshot
from decksmith.models.failure import (
    CapacityError,
    CardNotFoundError,
    CatalogLoadError,
    FailureKind,
    ImportDecodeError,
    KnownError,
    Notification,
    PersistenceError,
)

__all__ = [
    "Card",
    "CapacityError",
    "CardNotFoundError",
    "CatalogLoadError",
    "ClampReport",
    "DeckEntry",
    "DeckSnapshot",
    "FailureKind",
    "ImportDecodeError",
    "KIND_ORDER",
    "KnownError",
    "Notification",
    "PersistenceError",
    "TYPE_ORDER",
]
