"""
Download the card catalog.

Run this job once to keep a local copy of the catalog so the deck
builder can start without a network connection.
"""

import asyncio
import logging

from decksmith.config import settings
from decksmith.services.catalog import download_catalog

logger = logging.getLogger(__name__)


async def run_download() -> None:
    """Download the catalog to the configured catalog_path."""
    if not settings.catalog_url:
        raise SystemExit("catalog_url is not configured")

    logger.info("Downloading card catalog from %s...", settings.catalog_url)

    try:
        catalog = await download_catalog(settings.catalog_url, settings.catalog_path)
    except Exception as e:
        logger.error("Failed to download card catalog: %s", e)
        raise

    logger.info("Downloaded %d cards to %s", len(catalog), settings.catalog_path)


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_download())


if __name__ == "__main__":
    main()
