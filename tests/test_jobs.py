"""Tests for scheduled jobs."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from decksmith.config import Settings
from decksmith.jobs.download_catalog import run_download
from decksmith.services.catalog import Catalog


class TestDownloadCatalog:
    async def test_downloads_to_catalog_path(
        self, tmp_path: Path, sample_catalog: Catalog
    ) -> None:
        config = Settings(catalog_url="https://cards.example.com/c.json", catalog_path=tmp_path)

        with (
            patch("decksmith.jobs.download_catalog.settings", config),
            patch(
                "decksmith.jobs.download_catalog.download_catalog",
                new_callable=AsyncMock,
                return_value=sample_catalog,
            ) as download,
        ):
            await run_download()

        download.assert_awaited_once_with("https://cards.example.com/c.json", tmp_path)

    async def test_requires_url(self) -> None:
        with (
            patch("decksmith.jobs.download_catalog.settings", Settings(catalog_url="")),
            pytest.raises(SystemExit),
        ):
            await run_download()

    async def test_propagates_download_failure(self) -> None:
        config = Settings(catalog_url="https://cards.example.com/c.json")

        with (
            patch("decksmith.jobs.download_catalog.settings", config),
            patch(
                "decksmith.jobs.download_catalog.download_catalog",
                new_callable=AsyncMock,
                side_effect=RuntimeError("boom"),
            ),
            pytest.raises(RuntimeError),
        ):
            await run_download()
