"""Small helper to build a SmartNotes app context for the TUI."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import os

from smartnotes.core.note_manager import NoteManager
from smartnotes.database.connection import DatabaseConnection


DEFAULT_DB_PATH = Path.home() / ".smartnotes" / "notes.db"

WELCOME_CONTENT = (
    "<h2>Welcome to Smart Notes</h2>"
    "<p>Your notes live in a local SQLite database.</p>"
    "<ul>"
    "<li><strong>Pin</strong> important notes to keep them on top</li>"
    "<li><strong>Tags</strong> help you filter related notes</li>"
    "<li><strong>Encryption:</strong> protect sensitive notes with a password</li>"
    "</ul>"
    "<p>Encrypted notes can only be opened with the password used to encrypt "
    "them. The password is never stored, so there is no way to recover it.</p>"
)


@dataclass
class AppContext:
    """Container for runtime objects the UI needs."""

    db: DatabaseConnection
    notes: NoteManager
    first_run: bool = False


def resolve_db_path(db_path: Optional[str | Path] = None) -> Path:
    # explicit argument > SMARTNOTES_DB_PATH > ~/.smartnotes/notes.db
    if db_path is not None:
        return Path(db_path)
    env_path = os.getenv("SMARTNOTES_DB_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_DB_PATH


def build_context(db_path: Optional[str | Path] = None) -> AppContext:
    """
    Initialize the database and NoteManager.

    First-run behaviour:

    - When the database file does not exist yet, the schema is created and a
      pinned welcome note is added so the UI does not start empty.
    """
    path = resolve_db_path(db_path)
    first_run = not path.exists()

    db = DatabaseConnection(str(path))
    db.initialize()

    notes = NoteManager(db)
    if first_run:
        notes.create_note(
            title="Welcome to Smart Notes",
            content=WELCOME_CONTENT,
            tags=["welcome", "guide"],
            is_pinned=True,
        )

    return AppContext(db=db, notes=notes, first_run=first_run)
