from dataclasses import dataclass, field

# Display priority of card kinds (first sorts first)
KIND_ORDER: tuple[str, ...] = ("Artist", "Song", "Event", "Venue")

# Display priority of card types (first sorts first)
TYPE_ORDER: tuple[str, ...] = (
    "Pop",
    "Rock",
    "Hip-Hop",
    "R&B",
    "Electronic",
    "Jazz",
    "Classical",
    "Country",
    "Folk",
)


@dataclass(frozen=True, slots=True)
class Card:
    """
    A card from the catalog.

    Attributes:
        id: Unique catalog id, also the stable sort key (e.g., "AA-10")
        name: Display name
        kind: One of KIND_ORDER
        types: One or more of TYPE_ORDER, in catalog order
        tags: Free-form search tags
    """

    id: str
    name: str
    kind: str
    types: tuple[str, ...]
    tags: frozenset[str] = field(default_factory=frozenset)
