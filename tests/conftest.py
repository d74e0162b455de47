from collections.abc import Callable
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from decksmith.config import Settings
from decksmith.db.database import drop_db, init_db
from decksmith.models.card import Card
from decksmith.services.catalog import Catalog
from decksmith.services.persistence import SnapshotAdapter

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def make_card(
    card_id: str,
    kind: str = "Song",
    types: tuple[str, ...] = ("Pop",),
    name: str | None = None,
    tags: frozenset[str] = frozenset(),
) -> Card:
    """Build a card with sensible defaults for tests."""
    return Card(id=card_id, name=name or f"Card {card_id}", kind=kind, types=types, tags=tags)


@pytest.fixture
def card_factory() -> Callable[..., Card]:
    return make_card


@pytest.fixture
def sample_catalog() -> Catalog:
    """Small catalog covering every kind and several types."""
    return Catalog(
        [
            make_card("AA-10", "Song", ("Pop",), "Neon Anthem", frozenset({"anthem", "dance"})),
            make_card("AA-2", "Song", ("Rock", "Pop"), "Static Hearts", frozenset({"ballad"})),
            make_card("AA-1", "Artist", ("Pop",), "Mira Vale", frozenset({"headliner"})),
            make_card("BB-3", "Artist", ("Jazz",), "The Low Tones"),
            make_card("BB-4", "Event", ("Jazz",), "Midnight Session", frozenset({"late"})),
            make_card("CC-1", "Venue", ("Folk", "Country"), "Harbor Hall"),
            make_card("CC-2", "Song", ("Rock",), "Broken Record"),
        ]
    )


@pytest.fixture
def big_catalog() -> Catalog:
    """Enough distinct cards to fill a deck several times over."""
    return Catalog(make_card(f"ZZ-{i}") for i in range(1, 41))


@pytest.fixture
def sample_catalog_path() -> Path:
    return FIXTURES_DIR / "catalog_sample.json"


@pytest.fixture
def settings_for(tmp_path: Path) -> Callable[..., Settings]:
    """Settings pointing at a given catalog file and a throwaway database."""

    def build(catalog_path: Path | None = None, catalog_url: str = "") -> Settings:
        return Settings(
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'deck.db'}",
            catalog_path=catalog_path or tmp_path / "missing-catalog.json",
            catalog_url=catalog_url,
        )

    return build


@pytest.fixture
async def async_engine(tmp_path: Path):
    """Create a file-backed SQLite engine for testing."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    await init_db(engine)
    yield engine
    await drop_db(engine)
    await engine.dispose()


@pytest.fixture
async def adapter(async_engine) -> SnapshotAdapter:
    return SnapshotAdapter(async_engine)
