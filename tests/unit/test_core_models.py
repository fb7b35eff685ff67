"""
Unit tests for the Note model and its encryption state transitions.
"""

from datetime import datetime, timedelta, timezone

import pytest

from smartnotes.core.exceptions import AlreadyEncryptedError, NotEncryptedError
from smartnotes.core.models import (
    DEFAULT_TITLE,
    EMPTY_CONTENT_PLACEHOLDER,
    Note,
    apply_decryption,
    apply_encryption,
    note_from_dict,
    plaintext_fields,
)


@pytest.fixture
def note():
    created = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)
    return Note(
        note_id="n1",
        title="Shopping List",
        content="<p>Milk, eggs</p>",
        created_at=created,
        is_pinned=True,
        tags=["groceries"],
        word_count=2,
        char_count=10,
    )


# ==============================================================================
# Note Tests
# ==============================================================================

class TestNote:
    def test_defaults(self):
        n = Note()
        assert n.note_id
        assert n.updated_at == n.created_at
        assert n.is_encrypted is False
        assert n.tags == []
        assert n.encrypted_at is None

    def test_repr_hides_title(self, note):
        assert "Shopping" not in repr(note)
        assert repr(note) == "Note(note_id='n1', is_encrypted=False)"

    def test_equality_and_hash(self, note):
        other = Note(note_id="n1", title="Other")
        assert note == other
        assert hash(note) == hash(other)
        assert note != Note(note_id="n2")
        assert note != "not-a-note"

    def test_copy_leaves_original(self, note):
        changed = note.copy(title="Changed")
        assert changed.title == "Changed"
        assert note.title == "Shopping List"
        assert changed.tags == note.tags
        assert changed.tags is not note.tags

    def test_dict_roundtrip(self, note):
        data = note.to_dict()
        assert data["created_at"] == "2024-03-01T09:30:00+00:00"
        assert data["encrypted_at"] is None

        restored = note_from_dict(data)
        assert restored.note_id == note.note_id
        assert restored.title == note.title
        assert restored.created_at == note.created_at
        assert restored.is_pinned is True
        assert restored.tags == ["groceries"]

    def test_from_dict_minimal(self):
        n = note_from_dict({"note_id": "x"})
        assert n.title == ""
        assert n.is_encrypted is False


# ==============================================================================
# Encryption state transitions
# ==============================================================================

class TestTransitions:
    def test_plaintext_fields(self, note):
        assert plaintext_fields(note) == ("Shopping List", "<p>Milk, eggs</p>")

    def test_plaintext_fields_placeholders(self):
        blank = Note(title="", content="")
        assert plaintext_fields(blank) == (DEFAULT_TITLE, EMPTY_CONTENT_PLACEHOLDER)

    def test_plaintext_fields_refuses_encrypted(self, note):
        with pytest.raises(AlreadyEncryptedError):
            plaintext_fields(note.copy(is_encrypted=True))

    def test_apply_encryption(self, note):
        before = note.updated_at
        encrypted = apply_encryption(note, "ENV-T", "ENV-C")

        assert encrypted.is_encrypted is True
        assert encrypted.title == "ENV-T"
        assert encrypted.content == "ENV-C"
        assert encrypted.word_count == 0
        assert encrypted.char_count == 0
        assert encrypted.encrypted_at is not None
        assert encrypted.updated_at >= before
        # metadata untouched
        assert encrypted.created_at == note.created_at
        assert encrypted.is_pinned is True
        assert encrypted.tags == ["groceries"]
        # original untouched
        assert note.is_encrypted is False
        assert note.title == "Shopping List"

    def test_apply_encryption_twice_fails(self, note):
        encrypted = apply_encryption(note, "a", "b")
        with pytest.raises(AlreadyEncryptedError):
            apply_encryption(encrypted, "c", "d")

    def test_apply_decryption(self, note):
        encrypted = apply_encryption(note, "a", "b")
        decrypted = apply_decryption(encrypted, "Shopping List", "<p>Milk, eggs</p>")

        assert decrypted.is_encrypted is False
        assert decrypted.title == "Shopping List"
        assert decrypted.word_count == 2
        assert decrypted.char_count == len("Milk, eggs")
        assert decrypted.decrypted_at is not None
        assert decrypted.encrypted_at == encrypted.encrypted_at
        assert decrypted.updated_at >= encrypted.updated_at - timedelta(seconds=1)

    def test_apply_decryption_requires_encrypted(self, note):
        with pytest.raises(NotEncryptedError):
            apply_decryption(note, "t", "c")
