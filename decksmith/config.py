from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "Decksmith"
    debug: bool = False

    # Local snapshot storage (client-resident, no server)
    database_url: str = "sqlite+aiosqlite:///decksmith.db"

    # Catalog source: the local file wins when present, otherwise fetched once
    catalog_url: str = ""
    catalog_path: Path = Path(__file__).parent.parent / "data" / "catalog.json"

    default_deck_name: str = "New Deck"


settings = Settings()


# =============================================================================
# DECK LIMITS
# =============================================================================

# Maximum number of cards in a deck
DECK_SIZE_LIMIT = 60

# Maximum copies of a single card
COPY_LIMIT = 4

# Separator between card ids in a deck code
CODE_DELIMITER = "/"
