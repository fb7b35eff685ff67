"""ORM-style helpers for note database operations."""

from datetime import datetime
import sqlite3

from ..core.models import Note
from ..core.exceptions import StorageError


def _iso(value):
    return value.isoformat() if value else None


class BaseModel:
    """Base class for DB models."""

    __slots__ = ("db",)

    def __init__(self, db):
        """Initialize with a DatabaseConnection."""
        self.db = db

    def _execute(self, query, params, cursor=None):
        """Run on ``cursor`` when inside a transaction, else on the connection."""
        if cursor is None:
            return self.db.execute(query, params)
        try:
            cursor.execute(query, params)
            return cursor.rowcount
        except sqlite3.Error as e:
            raise StorageError(f"Query failed: {e}") from e

    def _fetch_one(self, query, params, cursor=None):
        if cursor is None:
            return self.db.fetch_one(query, params)
        try:
            cursor.execute(query, params)
            row = cursor.fetchone()
            return dict(row) if row else None
        except sqlite3.Error as e:
            raise StorageError(f"Query failed: {e}") from e


class NoteModel(BaseModel):
    """DB model for notes."""

    def create(self, note):
        """Insert a note and its tags; return the note id."""
        query = """
            INSERT INTO notes (
                note_id, title, content, created_at, updated_at, is_pinned,
                is_encrypted, word_count, char_count, encrypted_at, decrypted_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """

        params = (
            note.note_id,
            note.title,
            note.content,
            _iso(note.created_at),
            _iso(note.updated_at),
            int(note.is_pinned),
            int(note.is_encrypted),
            note.word_count,
            note.char_count,
            _iso(note.encrypted_at),
            _iso(note.decrypted_at),
        )

        with self.db.get_transaction_context() as cursor:
            self._execute(query, params, cursor)
            self._set_tags(note.note_id, note.tags, cursor)

        return note.note_id

    def get(self, note_id):
        """Get Note by ID or None."""
        row = self.db.fetch_one("SELECT * FROM notes WHERE note_id = ?", (note_id,))
        if not row:
            return None
        return row_to_note(row, self._get_tags(note_id))

    def list_all(self):
        """List all notes, most recently updated first."""
        rows = self.db.fetch_all("SELECT * FROM notes ORDER BY updated_at DESC")
        return self._rows_to_notes(rows)

    def list_pinned(self):
        """List pinned notes."""
        rows = self.db.fetch_all(
            "SELECT * FROM notes WHERE is_pinned = 1 ORDER BY updated_at DESC"
        )
        return self._rows_to_notes(rows)

    def list_recent(self, limit=5):
        """List the ``limit`` most recently updated notes."""
        rows = self.db.fetch_all(
            "SELECT * FROM notes ORDER BY updated_at DESC LIMIT ?", (limit,)
        )
        return self._rows_to_notes(rows)

    def list_by_tag(self, tag_name):
        """List notes carrying ``tag_name``."""
        query = """
            SELECT n.*
            FROM notes n
            JOIN note_tags nt ON nt.note_id = n.note_id
            JOIN tags t ON t.tag_id = nt.tag_id
            WHERE t.tag_name = ?
            ORDER BY n.updated_at DESC
        """
        rows = self.db.fetch_all(query, (tag_name,))
        return self._rows_to_notes(rows)

    def update(self, note, cursor=None):
        """
        Write every field of ``note`` (and its tags).

        Pass ``cursor`` from ``get_transaction_context()`` to make the write
        part of a larger transaction; otherwise a transaction is opened here.
        """
        query = """
            UPDATE notes SET
                title = ?,
                content = ?,
                updated_at = ?,
                is_pinned = ?,
                is_encrypted = ?,
                word_count = ?,
                char_count = ?,
                encrypted_at = ?,
                decrypted_at = ?
            WHERE note_id = ?
        """

        params = (
            note.title,
            note.content,
            _iso(note.updated_at),
            int(note.is_pinned),
            int(note.is_encrypted),
            note.word_count,
            note.char_count,
            _iso(note.encrypted_at),
            _iso(note.decrypted_at),
            note.note_id,
        )

        if cursor is not None:
            updated = self._execute(query, params, cursor)
            self._set_tags(note.note_id, note.tags, cursor)
            return updated > 0

        with self.db.get_transaction_context() as tx:
            updated = self._execute(query, params, tx)
            self._set_tags(note.note_id, note.tags, tx)
        return updated > 0

    def delete(self, note_id):
        """Delete note by ID (cascades to its tag links)."""
        return self.db.execute("DELETE FROM notes WHERE note_id = ?", (note_id,)) > 0

    def all_tags(self):
        """Return every tag name that is attached to at least one note."""
        query = """
            SELECT DISTINCT t.tag_name
            FROM tags t
            JOIN note_tags nt ON nt.tag_id = t.tag_id
            ORDER BY t.tag_name
        """
        return [row["tag_name"] for row in self.db.fetch_all(query)]

    def _rows_to_notes(self, rows):
        tm = self._tags_map([r["note_id"] for r in rows])
        return [row_to_note(r, tm.get(r["note_id"], [])) for r in rows]

    def _tags_map(self, note_ids):
        """note_id to [tag] map in one query"""
        if not note_ids:
            return {}
        placeholders = ",".join(["?"] * len(note_ids))
        query = (
            "SELECT nt.note_id, t.tag_name "
            "FROM note_tags nt JOIN tags t ON t.tag_id = nt.tag_id "
            f"WHERE nt.note_id IN ({placeholders}) "
            "ORDER BY t.tag_name"
        )
        m = {}
        for r in self.db.fetch_all(query, tuple(note_ids)):
            m.setdefault(r["note_id"], []).append(r["tag_name"])
        return m

    def _get_tags(self, note_id):
        """Return tag names for a note."""
        query = """
            SELECT t.tag_name
            FROM tags t
            JOIN note_tags nt ON t.tag_id = nt.tag_id
            WHERE nt.note_id = ?
            ORDER BY t.tag_name
        """
        return [row["tag_name"] for row in self.db.fetch_all(query, (note_id,))]

    def _set_tags(self, note_id, tags, cursor):
        """Replace tags for a note."""
        self._execute("DELETE FROM note_tags WHERE note_id = ?", (note_id,), cursor)
        for tag in tags or []:
            tag_id = self._get_or_create_tag(tag, cursor)
            self._execute(
                "INSERT OR IGNORE INTO note_tags (note_id, tag_id) VALUES (?, ?)",
                (note_id, tag_id),
                cursor,
            )

    def _get_or_create_tag(self, tag_name, cursor):
        """Return tag_id for name, creating the tag if missing."""
        self._execute("INSERT OR IGNORE INTO tags (tag_name) VALUES (?)", (tag_name,), cursor)
        row = self._fetch_one("SELECT tag_id FROM tags WHERE tag_name = ?", (tag_name,), cursor)
        return row["tag_id"]


def row_to_note(row, tags):
    """Convert a row dict + tag list to a Note."""

    def _dt(value):
        if isinstance(value, str):
            return datetime.fromisoformat(value)
        return value

    return Note(
        note_id=row["note_id"],
        title=row["title"],
        content=row["content"],
        created_at=_dt(row["created_at"]),
        updated_at=_dt(row["updated_at"]),
        is_pinned=bool(row["is_pinned"]),
        is_encrypted=bool(row["is_encrypted"]),
        tags=tags,
        word_count=row["word_count"],
        char_count=row["char_count"],
        encrypted_at=_dt(row["encrypted_at"]),
        decrypted_at=_dt(row["decrypted_at"]),
    )
