"""
NoteManager for SmartNotes: note CRUD over SQLite plus per-note encryption.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from ..database.connection import DatabaseConnection
from ..database.models import NoteModel
from ..database.search import search_by_tag, search_by_tags, search_notes, sort_notes
from ..security.encryption import (
    decrypt_text,
    decrypt_text_async,
    encrypt_text,
    encrypt_text_async,
)
from .exceptions import (
    AlreadyEncryptedError,
    EncryptionError,
    NoteNotFoundError,
    NotEncryptedError,
)
from .models import (
    DEFAULT_TITLE,
    Note,
    apply_decryption,
    apply_encryption,
    plaintext_fields,
    utcnow,
)
from .textutils import (
    char_count,
    reading_time,
    sanitize_tag,
    strip_html,
    word_count,
)


logger = logging.getLogger(__name__)


def _clean_tags(tags: Optional[Iterable[str]]) -> List[str]:
    out = []
    for tag in tags or []:
        cleaned = sanitize_tag(tag)
        if cleaned and cleaned not in out:
            out.append(cleaned)
    return out


class NoteManager:
    """High-level note operations over the database.

    Encryption is per note and per call: the password is only used for the
    duration of ``encrypt_note`` / ``decrypt_note`` and is never kept.
    """

    def __init__(self, db_connection: DatabaseConnection):
        self.db = db_connection
        self.note_model = NoteModel(self.db)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create_note(
        self,
        title: str = "",
        content: str = "",
        tags: Optional[Iterable[str]] = None,
        is_pinned: bool = False,
    ) -> Note:
        """Create and persist a new plaintext note."""
        note = Note(
            title=title or DEFAULT_TITLE,
            content=content or "",
            tags=_clean_tags(tags),
            is_pinned=is_pinned,
            word_count=word_count(content),
            char_count=char_count(content),
        )
        self.note_model.create(note)
        logger.info("Created note %s", note.note_id)
        return note

    def get_note(self, note_id: str) -> Note:
        note = self.note_model.get(note_id)
        if note is None:
            raise NoteNotFoundError(f"Note with ID '{note_id}' not found.")
        return note

    def update_note(
        self,
        note_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> Note:
        """
        Update title/content/tags of a note.

        Title and content of an encrypted note cannot be edited (that would
        replace ciphertext with plaintext); tags can.
        """
        note = self.get_note(note_id)

        if note.is_encrypted and (title is not None or content is not None):
            raise AlreadyEncryptedError(
                f"Note '{note_id}' is encrypted; decrypt it before editing"
            )

        changes = {"updated_at": utcnow()}
        if title is not None:
            changes["title"] = title
        if content is not None:
            changes["content"] = content
            changes["word_count"] = word_count(content)
            changes["char_count"] = char_count(content)
        if tags is not None:
            changes["tags"] = _clean_tags(tags)

        updated = note.copy(**changes)
        self._write(updated)
        return updated

    def delete_note(self, note_id: str) -> None:
        if not self.note_model.delete(note_id):
            raise NoteNotFoundError(f"Note with ID '{note_id}' not found.")
        logger.info("Deleted note %s", note_id)

    def toggle_pin(self, note_id: str) -> Note:
        note = self.get_note(note_id)
        updated = note.copy(is_pinned=not note.is_pinned)
        self._write(updated)
        return updated

    # ------------------------------------------------------------------
    # Listing and search
    # ------------------------------------------------------------------

    def list_notes(self) -> List[Note]:
        """All notes, pinned first then most recently updated."""
        return sort_notes(self.note_model.list_all())

    def search(self, query: str) -> List[Note]:
        """Notes matching ``query``; encrypted notes match on tags/date only."""
        return search_notes(self.db, query)

    def filter_by_tag(self, tag: str) -> List[Note]:
        return search_by_tag(self.db, tag)

    def filter_by_tags(self, tags: Iterable[str]) -> List[Note]:
        """Notes carrying every one of ``tags``; no tags means all notes."""
        return search_by_tags(self.db, tags)

    def pinned_notes(self) -> List[Note]:
        return self.note_model.list_pinned()

    def recent_notes(self, limit: int = 5) -> List[Note]:
        return self.note_model.list_recent(limit)

    def all_tags(self) -> List[str]:
        return self.note_model.all_tags()

    # ------------------------------------------------------------------
    # Encryption
    # ------------------------------------------------------------------

    def encrypt_note(self, note_id: str, password: str) -> Note:
        """
        Encrypt title and content of a note with ``password``.

        Each field gets its own salt and nonce. Both envelopes are produced
        before anything is written, and the write is a single transaction,
        so a failure leaves the stored note exactly as it was.

        Raises:
            AlreadyEncryptedError: note is already encrypted
            InvalidPasswordError: empty password
            EncryptionFailedError: the cipher failed
        """
        note = self.get_note(note_id)
        title, content = plaintext_fields(note)

        title_envelope = encrypt_text(title, password)
        content_envelope = encrypt_text(content, password)

        encrypted = self._write_transition(
            apply_encryption(note, title_envelope, content_envelope), was_encrypted=False
        )
        logger.info("Encrypted note %s", note_id)
        return encrypted

    def decrypt_note(self, note_id: str, password: str) -> Note:
        """
        Decrypt title and content of a note with ``password``.

        If either field fails (wrong password, corrupted envelope) nothing is
        written and the note stays encrypted.

        Raises:
            NotEncryptedError: note is not encrypted
            InvalidPasswordError: empty password
            MalformedEnvelopeError / AuthenticationFailureError: see decrypt_text
        """
        note = self.get_note(note_id)
        if not note.is_encrypted:
            raise NotEncryptedError(f"Note '{note_id}' is not encrypted")

        try:
            title = decrypt_text(note.title, password)
            content = decrypt_text(note.content, password)
        except EncryptionError:
            logger.warning("Decryption failed for note %s", note_id)
            raise

        decrypted = self._write_transition(
            apply_decryption(note, title, content), was_encrypted=True
        )
        logger.info("Decrypted note %s", note_id)
        return decrypted

    async def encrypt_note_async(self, note_id: str, password: str) -> Note:
        """Coroutine version of :meth:`encrypt_note`."""
        note = self.get_note(note_id)
        title, content = plaintext_fields(note)

        title_envelope = await encrypt_text_async(title, password)
        content_envelope = await encrypt_text_async(content, password)

        encrypted = self._write_transition(
            apply_encryption(note, title_envelope, content_envelope), was_encrypted=False
        )
        logger.info("Encrypted note %s", note_id)
        return encrypted

    async def decrypt_note_async(self, note_id: str, password: str) -> Note:
        """Coroutine version of :meth:`decrypt_note`."""
        note = self.get_note(note_id)
        if not note.is_encrypted:
            raise NotEncryptedError(f"Note '{note_id}' is not encrypted")

        try:
            title = await decrypt_text_async(note.title, password)
            content = await decrypt_text_async(note.content, password)
        except EncryptionError:
            logger.warning("Decryption failed for note %s", note_id)
            raise

        decrypted = self._write_transition(
            apply_decryption(note, title, content), was_encrypted=True
        )
        logger.info("Decrypted note %s", note_id)
        return decrypted

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_text(self, note_ids: Optional[Iterable[str]] = None) -> str:
        """Plain-text export of the given notes (default: all notes)."""
        if note_ids is None:
            notes = self.list_notes()
        else:
            notes = [self.get_note(nid) for nid in note_ids]

        now = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
        lines = [
            "# Smart Notes Export",
            f"Generated on: {now}",
            f"Total Notes: {len(notes)}",
            "",
        ]
        for index, note in enumerate(notes, start=1):
            if note.is_encrypted:
                lines.append(f"## Note {index}: [encrypted]")
            else:
                lines.append(f"## Note {index}: {note.title}")
            lines.append(f"Created: {note.created_at.date().isoformat()}")
            lines.append(f"Last Modified: {note.updated_at.date().isoformat()}")
            if note.tags:
                lines.append(f"Tags: {', '.join(note.tags)}")
            if note.is_encrypted:
                lines.append("")
                lines.append("This note is encrypted.")
            else:
                lines.append(f"Word Count: {word_count(note.content)}")
                lines.append(f"Reading Time: {reading_time(note.content)}")
                lines.append("")
                lines.append(strip_html(note.content))
            lines.append("=" * 50)
        return "\n".join(lines) + "\n"

    # ------------------------------------------------------------------

    def _write(self, note: Note) -> None:
        """Persist every field of ``note`` in one transaction."""
        with self.db.get_transaction_context() as cursor:
            if not self.note_model.update(note, cursor=cursor):
                raise NoteNotFoundError(f"Note with ID '{note.note_id}' not found.")

    def _write_transition(self, changed: Note, was_encrypted: bool) -> Note:
        """
        Write an encrypt/decrypt result in one transaction.

        The note is re-read inside the transaction: pin and tags changed while
        the cipher ran are kept, and a note whose encryption state changed in
        the meantime is left alone.
        """
        with self.db.get_transaction_context() as cursor:
            current = self.note_model.get(changed.note_id)
            if current is None:
                raise NoteNotFoundError(f"Note with ID '{changed.note_id}' not found.")
            if current.is_encrypted != was_encrypted:
                if current.is_encrypted:
                    raise AlreadyEncryptedError(f"Note '{changed.note_id}' is already encrypted")
                raise NotEncryptedError(f"Note '{changed.note_id}' is not encrypted")

            merged = changed.copy(is_pinned=current.is_pinned, tags=current.tags)
            self.note_model.update(merged, cursor=cursor)
        return merged
