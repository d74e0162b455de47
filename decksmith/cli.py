"""
Command-line front end.

Each invocation opens a session, restores the saved deck, performs one
gesture, saves, and prints any notifications.

Exit codes:
    0  success
    1  the gesture failed (deck full, bad code, unknown card, ...)
    2  catalog unavailable
"""

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from decksmith.config import COPY_LIMIT, DECK_SIZE_LIMIT, Settings, settings
from decksmith.models.failure import KnownError
from decksmith.services.card_filter import FilterCriteria, available_facets
from decksmith.services.deck_session import DeckSession
from decksmith.services.persistence import SnapshotAdapter

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_UNAVAILABLE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="decksmith",
        description=f"{settings.app_name}: build a {DECK_SIZE_LIMIT}-card deck from the card catalog",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    list_cmd = commands.add_parser("list", help="List catalog cards")
    list_cmd.add_argument("--text", default="", help="Search name, id and tags")
    list_cmd.add_argument("--kind", action="append", default=[], help="Allowed kind (repeatable)")
    list_cmd.add_argument("--type", action="append", default=[], help="Allowed type (repeatable)")
    list_cmd.add_argument("--tag", action="append", default=[], help="Wanted tag (repeatable)")

    commands.add_parser("facets", help="Show the kinds, types and tags available as filters")
    commands.add_parser("show", help="Show the current deck")
    commands.add_parser("stats", help="Show deck statistics")
    commands.add_parser("export", help="Print the deck code")

    for name, help_text in (
        ("add", "Add one copy of a card"),
        ("inc", "Add one copy of a card already in the deck"),
        ("dec", "Remove one copy of a card"),
        ("remove", "Remove every copy of a card"),
    ):
        cmd = commands.add_parser(name, help=help_text)
        cmd.add_argument("card_id", help="Card id, e.g. AA-10")

    rename_cmd = commands.add_parser("rename", help="Rename the deck")
    rename_cmd.add_argument("name")

    import_cmd = commands.add_parser("import", help="Replace the deck from a deck code")
    import_cmd.add_argument("code")

    reset_cmd = commands.add_parser("reset", help="Empty the deck and forget the saved copy")
    reset_cmd.add_argument("--yes", action="store_true", help="Confirm the reset")

    return parser


def _print_pool(session: DeckSession, args: argparse.Namespace) -> None:
    criteria = FilterCriteria.build(args.text, args.kind, args.type, args.tag)
    cards = session.pool(criteria)
    for card in cards:
        count = session.store.count_of(card.id)
        marker = f"[{count}]" if count else "   "
        print(f"{marker} {card.id:<12} {card.kind:<8} {'/'.join(card.types):<20} {card.name}")
    print(f"{len(cards)} of {len(session.catalog)} cards")


def _print_facets(session: DeckSession) -> None:
    facets = available_facets(session.catalog)
    print(f"Kinds: {', '.join(facets.kinds)}")
    print(f"Types: {', '.join(facets.types)}")
    print(f"Tags:  {', '.join(facets.tags) or '-'}")


def _print_deck(session: DeckSession) -> None:
    print(f"{session.store.name} ({session.store.total_count}/{DECK_SIZE_LIMIT})")
    for entry in session.deck_view():
        print(f"  {entry.count}x {entry.card_id:<12} {entry.card.name}")


def _print_stats(session: DeckSession) -> None:
    summary = session.summary()
    print(f"Cards: {summary.total_cards}/{DECK_SIZE_LIMIT} ({summary.unique_cards} unique)")
    for label, counts in (("Kind", summary.by_kind), ("Type", summary.by_type)):
        for key, count in counts.items():
            print(f"  {label} {key}: {count}")


def _dispatch(session: DeckSession, args: argparse.Namespace) -> int:
    """Run one gesture. Returns an exit code."""
    command = args.command

    if command == "list":
        _print_pool(session, args)
    elif command == "facets":
        _print_facets(session)
    elif command == "show":
        _print_deck(session)
    elif command == "stats":
        _print_stats(session)
    elif command == "export":
        print(session.export_code())
    elif command == "add":
        if not session.add(args.card_id):
            print(f"{args.card_id} is already at {COPY_LIMIT} copies")
        _print_deck(session)
    elif command == "inc":
        if not session.increment(args.card_id):
            print(f"{args.card_id} is not in the deck or already at {COPY_LIMIT} copies")
        _print_deck(session)
    elif command == "dec":
        session.decrement(args.card_id)
        _print_deck(session)
    elif command == "remove":
        session.remove(args.card_id)
        _print_deck(session)
    elif command == "rename":
        if not args.name:
            print("Deck name must not be empty", file=sys.stderr)
            return EXIT_FAILURE
        session.rename(args.name)
        _print_deck(session)
    elif command == "import":
        report = session.import_code(args.code)
        if report.clamped:
            print(f"Dropped {report.total_dropped} copies over the deck limits")
        _print_deck(session)
    elif command == "reset":
        if not args.yes:
            print("Refusing to reset without --yes", file=sys.stderr)
            return EXIT_FAILURE
        session.reset()
        print("Deck reset")

    return EXIT_OK


def _print_notifications(session: DeckSession) -> None:
    for notice in session.drain_notifications():
        line = notice.message
        if notice.suggestion:
            line = f"{line} {notice.suggestion}"
        print(line, file=sys.stderr)


async def run_command(
    args: argparse.Namespace,
    config: Settings,
    adapter: SnapshotAdapter | None,
) -> int:
    """Open a session, run one gesture and save."""
    session = await DeckSession.open(config, adapter)
    if not session.available:
        _print_notifications(session)
        return EXIT_UNAVAILABLE

    await session.restore()
    try:
        exit_code = _dispatch(session, args)
    except KnownError as e:
        logger.debug("Gesture %s failed: %s", args.command, e.kind.value)
        exit_code = EXIT_FAILURE

    await session.flush()
    _print_notifications(session)
    return exit_code


async def _main_async(args: argparse.Namespace) -> int:
    # Imported here so `--help` works without touching the database
    from decksmith.db.database import engine

    try:
        return await run_command(args, settings, SnapshotAdapter(engine))
    finally:
        await engine.dispose()


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose or settings.debug else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return asyncio.run(_main_async(args))


if __name__ == "__main__":
    sys.exit(main())
