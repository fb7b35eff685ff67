"""
Note record and the transactional state changes used by encryption
"""

from datetime import datetime, timezone
import uuid

from .exceptions import AlreadyEncryptedError, NotEncryptedError
from .textutils import word_count, char_count


DEFAULT_TITLE = "Untitled Note"
# AES-GCM accepts empty input, but an empty field is stored as a placeholder
# so that an encrypted note never reveals that its content was blank.
EMPTY_CONTENT_PLACEHOLDER = " "


def utcnow():
    return datetime.now(timezone.utc)


def _parse_dt(value):
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


class Note:
    __slots__ = (
        'note_id',
        'title',
        'content',
        'created_at',
        'updated_at',
        'is_pinned',
        'is_encrypted',
        'tags',
        'word_count',
        'char_count',
        'encrypted_at',
        'decrypted_at',
    )

    def __init__(self, note_id=None, title="", content="", created_at=None, updated_at=None, is_pinned=False, is_encrypted=False, tags=None, word_count=0, char_count=0, encrypted_at=None, decrypted_at=None):
        """
            Initialize a note
        """
        self.note_id = note_id if note_id is not None else str(uuid.uuid4())
        self.title = title
        self.content = content
        self.created_at = created_at if created_at is not None else utcnow()
        self.updated_at = updated_at if updated_at is not None else self.created_at
        self.is_pinned = is_pinned
        self.is_encrypted = is_encrypted
        self.tags = list(tags) if tags is not None else []
        self.word_count = word_count
        self.char_count = char_count
        self.encrypted_at = encrypted_at
        self.decrypted_at = decrypted_at

    def copy(self, **changes):
        """
            Return a new Note with ``changes`` applied; self is left as is
        """
        values = {name: getattr(self, name) for name in self.__slots__}
        values.update(changes)
        return Note(**values)

    def to_dict(self):
        """
            Convert note to dict
        """
        return {
            'note_id': self.note_id,
            'title': self.title,
            'content': self.content,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
            'is_pinned': self.is_pinned,
            'is_encrypted': self.is_encrypted,
            'tags': list(self.tags),
            'word_count': self.word_count,
            'char_count': self.char_count,
            'encrypted_at': self.encrypted_at.isoformat() if self.encrypted_at else None,
            'decrypted_at': self.decrypted_at.isoformat() if self.decrypted_at else None,
        }

    def __repr__(self):
        # title may be ciphertext, keep it out of reprs
        return f"Note(note_id={self.note_id!r}, is_encrypted={self.is_encrypted!r})"

    def __eq__(self, other):
        if not isinstance(other, Note):
            return NotImplemented
        return self.note_id == other.note_id

    def __hash__(self):
        return hash(self.note_id)


def note_from_dict(data):
    """
        Create a Note from a dict (inverse of Note.to_dict)
    """
    return Note(
        note_id=data.get('note_id'),
        title=data.get('title', ''),
        content=data.get('content', ''),
        created_at=_parse_dt(data.get('created_at')),
        updated_at=_parse_dt(data.get('updated_at')),
        is_pinned=bool(data.get('is_pinned', False)),
        is_encrypted=bool(data.get('is_encrypted', False)),
        tags=data.get('tags', []),
        word_count=data.get('word_count', 0),
        char_count=data.get('char_count', 0),
        encrypted_at=_parse_dt(data.get('encrypted_at')),
        decrypted_at=_parse_dt(data.get('decrypted_at')),
    )


def plaintext_fields(note):
    """
        Title/content as they are handed to the cipher (placeholders for empty fields)
    """
    if note.is_encrypted:
        raise AlreadyEncryptedError(f"Note '{note.note_id}' is already encrypted")
    return (note.title or DEFAULT_TITLE, note.content or EMPTY_CONTENT_PLACEHOLDER)


def apply_encryption(note, title_envelope, content_envelope):
    """
        Return the encrypted version of ``note``.

        Both fields and the flag change together; counts are zeroed so the
        stored record does not leak the content length.
    """
    if note.is_encrypted:
        raise AlreadyEncryptedError(f"Note '{note.note_id}' is already encrypted")

    now = utcnow()
    return note.copy(
        title=title_envelope,
        content=content_envelope,
        is_encrypted=True,
        word_count=0,
        char_count=0,
        encrypted_at=now,
        updated_at=now,
    )


def apply_decryption(note, title, content):
    """
        Return the decrypted version of ``note`` with counts recomputed
    """
    if not note.is_encrypted:
        raise NotEncryptedError(f"Note '{note.note_id}' is not encrypted")

    now = utcnow()
    return note.copy(
        title=title,
        content=content,
        is_encrypted=False,
        word_count=word_count(content),
        char_count=char_count(content),
        decrypted_at=now,
        updated_at=now,
    )
