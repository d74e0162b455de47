from decksmith.db.database import init_db, session_scope
from decksmith.db.operations import (
    ENTRIES_KEY,
    NAME_KEY,
    clear_snapshot,
    load_snapshot,
    save_snapshot,
)

__all__ = [
    "ENTRIES_KEY",
    "NAME_KEY",
    "clear_snapshot",
    "init_db",
    "load_snapshot",
    "save_snapshot",
    "session_scope",
]
