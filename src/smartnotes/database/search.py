from datetime import datetime

from ..core.textutils import sanitize_tag
from .models import NoteModel


# Encrypted notes hold envelopes in title/content; matching against them
# would be meaningless (and would hint at ciphertext contents), so only
# their metadata is searchable.


def matches_query(note, query):
    """True if ``note`` matches ``query`` (case-insensitive substring)."""
    q = (query or "").strip().lower()
    if not q:
        return True

    tags_match = any(q in tag.lower() for tag in note.tags)

    if note.is_encrypted:
        date_match = q in note.created_at.date().isoformat()
        return tags_match or date_match

    return q in note.title.lower() or q in note.content.lower() or tags_match


def _sort_key(note):
    ts = note.updated_at.timestamp() if isinstance(note.updated_at, datetime) else 0
    return (0 if note.is_pinned else 1, -ts)


def sort_notes(notes):
    """Pinned notes first, then most recently updated."""
    return sorted(notes, key=_sort_key)


def search_notes(db, query):
    """Return sorted notes matching ``query``."""
    notes = NoteModel(db).list_all()
    return sort_notes([n for n in notes if matches_query(n, query)])


def search_by_tag(db, tag):
    """Return sorted notes tagged with ``tag`` (exact tag name)."""
    tag = (tag or "").strip().lower()
    if not tag:
        return []
    return sort_notes(NoteModel(db).list_by_tag(tag))


def search_by_tags(db, tags):
    """Return sorted notes carrying every tag in ``tags``."""
    wanted = []
    for tag in tags or []:
        cleaned = sanitize_tag(tag)
        if cleaned and cleaned not in wanted:
            wanted.append(cleaned)

    if not wanted:
        return sort_notes(NoteModel(db).list_all())
    notes = search_by_tag(db, wanted[0])
    return [n for n in notes if all(tag in n.tags for tag in wanted[1:])]
