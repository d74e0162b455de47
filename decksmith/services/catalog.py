"""
Card catalog service.

Loads the immutable card catalog once, from a local JSON file or over
HTTP, and validates every record before the rest of the core sees it.

Malformed records are skipped with a warning instead of leaking missing
fields downstream. A catalog that cannot be read at all raises
CatalogLoadError; there is no automatic retry.
"""

import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from decksmith.config import CODE_DELIMITER, Settings
from decksmith.models.card import KIND_ORDER, TYPE_ORDER, Card
from decksmith.models.failure import CardNotFoundError, CatalogLoadError

logger = logging.getLogger(__name__)


class CardRecord(BaseModel):
    """Raw catalog record, validated at load time."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    id: str
    name: str = Field(min_length=1)
    kind: str = Field(min_length=1)
    type: list[str]
    tags: list[str] = []

    @field_validator("id")
    @classmethod
    def check_id(cls, value: str) -> str:
        if not value:
            raise ValueError("id must not be empty")
        if CODE_DELIMITER in value:
            raise ValueError(f"id must not contain {CODE_DELIMITER!r}")
        return value

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, value: Any) -> Any:
        # The catalog stores a single type as a bare string
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("type")
    @classmethod
    def check_type(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("type must not be empty")
        return value

    def to_card(self) -> Card:
        return Card(
            id=self.id,
            name=self.name,
            kind=self.kind,
            types=tuple(self.type),
            tags=frozenset(self.tags),
        )


class Catalog:
    """
    Immutable, ordered collection of cards indexed by id.

    Iteration yields cards in catalog order.
    """

    def __init__(self, cards: Iterable[Card]):
        self._cards: tuple[Card, ...] = tuple(cards)
        self._by_id: dict[str, Card] = {card.id: card for card in self._cards}
        if len(self._by_id) != len(self._cards):
            raise ValueError("Catalog card ids must be unique")

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._by_id

    def __repr__(self) -> str:
        return f"<Catalog(cards={len(self._cards)})>"

    def get(self, card_id: str) -> Card | None:
        """Card by id, or None if not in the catalog."""
        return self._by_id.get(card_id)

    def require(self, card_id: str) -> Card:
        """
        Card by id.

        Raises:
            CardNotFoundError: If the id is not in the catalog
        """
        card = self._by_id.get(card_id)
        if card is None:
            raise CardNotFoundError(card_id)
        return card


def build_catalog(records: Iterable[Any]) -> Catalog:
    """
    Validate raw records and build a Catalog.

    Skips (with a warning) records that fail validation and records
    whose id was already seen. Unknown kinds and types are kept; they
    sort last.
    """
    cards: list[Card] = []
    seen: set[str] = set()
    skipped = 0

    for position, raw in enumerate(records):
        try:
            record = CardRecord.model_validate(raw)
        except ValidationError as e:
            skipped += 1
            logger.warning(
                "Skipping malformed catalog record %d: %s",
                position,
                "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()),
            )
            continue

        if record.id in seen:
            skipped += 1
            logger.warning("Skipping duplicate catalog id %s at record %d", record.id, position)
            continue
        seen.add(record.id)

        if record.kind not in KIND_ORDER:
            logger.info("Card %s has unknown kind %r", record.id, record.kind)
        unknown_types = set(record.type).difference(TYPE_ORDER)
        if unknown_types:
            logger.info("Card %s has unknown types %s", record.id, sorted(unknown_types))

        cards.append(record.to_card())

    logger.info("Loaded catalog with %d cards (%d skipped)", len(cards), skipped)
    return Catalog(cards)


def _records_from_payload(payload: Any, source: str) -> list[Any]:
    if not isinstance(payload, list):
        raise CatalogLoadError(f"Catalog at {source} is not a JSON array")
    return payload


def load_catalog_file(path: Path) -> Catalog:
    """
    Load the catalog from a JSON file.

    Raises:
        CatalogLoadError: If the file is missing, unreadable or not a JSON array
    """
    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, ValueError) as e:
        raise CatalogLoadError(f"Failed to read catalog at {path}: {e}") from e

    return build_catalog(_records_from_payload(payload, str(path)))


async def fetch_catalog(url: str, client: httpx.AsyncClient | None = None) -> Catalog:
    """
    Fetch the catalog over HTTP.

    Args:
        url: URL serving the catalog JSON array
        client: Optional client to reuse; one is created if omitted

    Raises:
        CatalogLoadError: If the request fails or the body is not a JSON array
    """
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=30.0, follow_redirects=True) as owned:
                response = await owned.get(url)
        else:
            response = await client.get(url)
        response.raise_for_status()
        payload = response.json()
    except httpx.HTTPStatusError as e:
        raise CatalogLoadError(
            f"Failed to fetch catalog: HTTP {e.response.status_code}"
        ) from e
    except httpx.RequestError as e:
        raise CatalogLoadError(f"Failed to fetch catalog: {e}") from e
    except ValueError as e:
        raise CatalogLoadError(f"Catalog response is not valid JSON: {e}") from e

    return build_catalog(_records_from_payload(payload, url))


async def load_catalog(config: Settings) -> Catalog:
    """
    Load the catalog from the configured source.

    The local file is used when it exists; otherwise the catalog is
    fetched from `catalog_url`.

    Raises:
        CatalogLoadError: If no source is available or loading fails
    """
    if config.catalog_path.exists():
        logger.debug("Loading catalog from %s", config.catalog_path)
        return load_catalog_file(config.catalog_path)

    if config.catalog_url:
        logger.debug("Fetching catalog from %s", config.catalog_url)
        return await fetch_catalog(config.catalog_url)

    raise CatalogLoadError(
        f"No catalog found at {config.catalog_path} and no catalog_url configured"
    )


async def download_catalog(url: str, output_path: Path) -> Catalog:
    """
    Download the catalog JSON to a local file.

    The body is streamed to a sibling ".part" file and validated before
    it replaces `output_path`, so a failed or garbled download leaves
    the previous catalog in place.

    Returns:
        The validated catalog that was written.

    Raises:
        CatalogLoadError: If the download fails or the body is not a usable catalog
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    part_path = output_path.with_suffix(".part")

    try:
        try:
            async with (
                httpx.AsyncClient(timeout=60.0, follow_redirects=True) as client,
                client.stream("GET", url) as response,
            ):
                response.raise_for_status()
                with open(part_path, "wb") as f:
                    async for chunk in response.aiter_bytes(8192):
                        f.write(chunk)
        except httpx.HTTPStatusError as e:
            raise CatalogLoadError(
                f"Failed to download catalog: HTTP {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise CatalogLoadError(f"Failed to download catalog: {e}") from e

        catalog = load_catalog_file(part_path)
        if not len(catalog):
            raise CatalogLoadError(f"Downloaded catalog from {url} has no valid cards")
    except Exception:
        part_path.unlink(missing_ok=True)
        raise

    part_path.replace(output_path)
    return catalog
