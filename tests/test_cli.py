"""Tests for the command-line front end."""

from pathlib import Path

import pytest

from decksmith.cli import (
    EXIT_FAILURE,
    EXIT_OK,
    EXIT_UNAVAILABLE,
    build_parser,
    run_command,
)
from decksmith.config import Settings
from decksmith.services.persistence import SnapshotAdapter


@pytest.fixture
def config(settings_for, sample_catalog_path: Path):
    return settings_for(catalog_path=sample_catalog_path)


async def _run(argv: list[str], config, adapter: SnapshotAdapter | None) -> int:
    return await run_command(build_parser().parse_args(argv), config, adapter)


class TestParser:
    def test_requires_command(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_list_filters_are_repeatable(self) -> None:
        args = build_parser().parse_args(["list", "--kind", "Song", "--kind", "Artist"])

        assert args.kind == ["Song", "Artist"]

    def test_description_names_the_app(self, monkeypatch) -> None:
        monkeypatch.setattr("decksmith.cli.settings", Settings(app_name="Setlist Builder"))

        assert build_parser().description.startswith("Setlist Builder:")


class TestCommands:
    async def test_list_prints_sorted_pool(self, config, adapter, capsys) -> None:
        assert await _run(["list", "--kind", "Song"], config, adapter) == EXIT_OK

        out = capsys.readouterr().out
        assert out.index("AA-2") < out.index("AA-10") < out.index("CC-2")
        assert "3 of 7 cards" in out

    async def test_facets(self, config, adapter, capsys) -> None:
        assert await _run(["facets"], config, adapter) == EXIT_OK

        assert "Kinds: Artist, Song, Event, Venue" in capsys.readouterr().out

    async def test_add_persists_between_runs(self, config, adapter, capsys) -> None:
        await _run(["add", "AA-1"], config, adapter)
        await _run(["add", "AA-1"], config, adapter)
        capsys.readouterr()

        assert await _run(["show"], config, adapter) == EXIT_OK
        assert "2x AA-1" in capsys.readouterr().out

    async def test_add_unknown_card_fails(self, config, adapter, capsys) -> None:
        assert await _run(["add", "ZZ-404"], config, adapter) == EXIT_FAILURE

        assert "ZZ-404" in capsys.readouterr().err

    async def test_export_and_import(self, config, adapter, capsys) -> None:
        await _run(["import", "AA-1/AA-1/CC-1"], config, adapter)
        capsys.readouterr()

        assert await _run(["export"], config, adapter) == EXIT_OK
        assert capsys.readouterr().out.strip() == "AA-1/AA-1/CC-1"

    async def test_import_failure(self, config, adapter, capsys) -> None:
        assert await _run(["import", "Z-9"], config, adapter) == EXIT_FAILURE

        assert "does not contain any known card" in capsys.readouterr().err

    async def test_reset_requires_confirmation(self, config, adapter, capsys) -> None:
        await _run(["add", "AA-1"], config, adapter)

        assert await _run(["reset"], config, adapter) == EXIT_FAILURE
        assert await _run(["reset", "--yes"], config, adapter) == EXIT_OK
        capsys.readouterr()

        await _run(["export"], config, adapter)
        assert capsys.readouterr().out.strip() == ""

    async def test_rename(self, config, adapter, capsys) -> None:
        await _run(["rename", "Summer Tour"], config, adapter)
        capsys.readouterr()

        await _run(["show"], config, adapter)
        assert "Summer Tour (0/60)" in capsys.readouterr().out

    async def test_stats(self, config, adapter, capsys) -> None:
        await _run(["import", "AA-2/AA-2/BB-3"], config, adapter)
        capsys.readouterr()

        assert await _run(["stats"], config, adapter) == EXIT_OK
        out = capsys.readouterr().out
        assert "Cards: 3/60 (2 unique)" in out
        assert "Kind Song: 2" in out

    async def test_catalog_unavailable(self, settings_for, adapter, capsys) -> None:
        assert await _run(["show"], settings_for(), adapter) == EXIT_UNAVAILABLE

        assert "catalog could not be loaded" in capsys.readouterr().err
