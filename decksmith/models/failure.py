"""
Failure classification and user-visible notifications.

Every failure the core reports to a user is one of the KnownError
subclasses below. Each one is terminal to the single operation that
raised it; none of them abort unrelated operations.

Notification severity:
- Transient: capacity reached, import failed, persistence failed
- Persistent: catalog unavailable (session runs degraded until restart)
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Deck constraints
    CAPACITY_EXCEEDED = "capacity_exceeded"

    # Input failures
    IMPORT_FAILED = "import_failed"
    NOT_FOUND = "not_found"

    # Collaborator failures
    CATALOG_UNAVAILABLE = "catalog_unavailable"
    PERSISTENCE_FAILED = "persistence_failed"


class Notification(BaseModel):
    """A user-visible, non-fatal report of a failed operation."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )
    persistent: bool = Field(
        default=False,
        description="True if the notice should stay visible until restart",
    )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    persistent: bool = False

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        super().__init__(message)

    def to_notification(self) -> Notification:
        """Convert to a user-visible Notification."""
        return Notification(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
            persistent=self.persistent,
        )


class CapacityError(KnownError):
    """
    Raised when a card cannot be added because the deck is full.

    The deck is left unchanged.
    """

    def __init__(self, limit: int, card_id: str | None = None):
        self.limit = limit
        self.card_id = card_id
        super().__init__(
            kind=FailureKind.CAPACITY_EXCEEDED,
            message=f"The deck already holds {limit} cards.",
            detail=f"Rejected card: {card_id}" if card_id else None,
            suggestion="Remove a card before adding another.",
        )


class CatalogLoadError(KnownError):
    """
    Raised when the card catalog cannot be fetched or parsed.

    Without a catalog nothing can be filtered, sorted or added.
    """

    persistent = True

    def __init__(self, detail: str | None = None):
        super().__init__(
            kind=FailureKind.CATALOG_UNAVAILABLE,
            message="The card catalog could not be loaded.",
            detail=detail,
            suggestion="Check your connection and restart the application.",
        )


class ImportDecodeError(KnownError):
    """Raised when a deck code contains no card from the catalog."""

    def __init__(self, code: str):
        # Truncate for display
        self.code = code[:200]
        super().__init__(
            kind=FailureKind.IMPORT_FAILED,
            message="That deck code does not contain any known card.",
            detail=f"Code: {self.code!r}" if self.code else "Code was empty",
            suggestion="Check that the code was copied completely.",
        )


class PersistenceError(KnownError):
    """Raised when the saved deck cannot be written or read back."""

    def __init__(self, operation: str, detail: str | None = None):
        self.operation = operation
        super().__init__(
            kind=FailureKind.PERSISTENCE_FAILED,
            message=f"The saved deck could not be {operation}.",
            detail=detail,
            suggestion="Your deck is still available for this session.",
        )


class CardNotFoundError(KnownError):
    """Raised when a card id is not in the catalog."""

    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"No card with id '{card_id}' in the catalog.",
            suggestion="Use `decksmith list` to browse card ids.",
        )
