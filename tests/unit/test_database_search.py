"""Unit tests for the database search module."""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock, patch

import pytest

from smartnotes.core.models import Note
from smartnotes.database.search import (
    matches_query,
    search_by_tag,
    search_by_tags,
    search_notes,
    sort_notes,
)


BASE = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def _note(note_id, minutes_ago=0, **kwargs):
    ts = BASE - timedelta(minutes=minutes_ago)
    return Note(note_id=note_id, created_at=ts, updated_at=ts, **kwargs)


@pytest.fixture
def encrypted_note():
    return _note(
        "enc",
        title="QUJDREVGR0hJSktMTU5PUFFSU1RVVldYWVo=",
        content="c2hvcHBpbmcgbGlzdA==",
        is_encrypted=True,
        tags=["groceries"],
    )


def test_empty_query_matches_everything(encrypted_note):
    assert matches_query(encrypted_note, "")
    assert matches_query(encrypted_note, "   ")
    assert matches_query(encrypted_note, None)


def test_plain_note_matches_title_content_and_tags():
    note = _note("p", title="Shopping List", content="<p>Milk</p>", tags=["groceries"])
    assert matches_query(note, "shopping")
    assert matches_query(note, "MILK")
    assert matches_query(note, "grocer")
    assert not matches_query(note, "bread")


def test_encrypted_note_ignores_envelope_text(encrypted_note):
    assert not matches_query(encrypted_note, "QUJD")
    assert not matches_query(encrypted_note, "c2hv")


def test_encrypted_note_matches_tags_and_date(encrypted_note):
    assert matches_query(encrypted_note, "groceries")
    assert matches_query(encrypted_note, "2024-03-10")
    assert matches_query(encrypted_note, "2024-03")
    assert not matches_query(encrypted_note, "2023")


def test_sort_notes_pinned_first_then_recent():
    notes = [
        _note("old", minutes_ago=30),
        _note("pinned-old", minutes_ago=60, is_pinned=True),
        _note("new", minutes_ago=1),
        _note("pinned-new", minutes_ago=5, is_pinned=True),
    ]
    assert [n.note_id for n in sort_notes(notes)] == ["pinned-new", "pinned-old", "new", "old"]


@patch("smartnotes.database.search.NoteModel")
def test_search_notes_filters_and_sorts(mock_model):
    mock_model.return_value.list_all.return_value = [
        _note("a", minutes_ago=10, title="milk run"),
        _note("b", minutes_ago=1, title="bread"),
        _note("c", minutes_ago=5, title="more milk", is_pinned=True),
    ]
    result = search_notes(Mock(), "milk")
    assert [n.note_id for n in result] == ["c", "a"]


@patch("smartnotes.database.search.NoteModel")
def test_search_by_tag_normalizes(mock_model):
    mock_model.return_value.list_by_tag.return_value = [_note("a")]
    assert [n.note_id for n in search_by_tag(Mock(), "  Work ")] == ["a"]
    mock_model.return_value.list_by_tag.assert_called_once_with("work")


def test_search_by_tag_empty_returns_nothing():
    db = Mock()
    assert search_by_tag(db, "") == []
    assert search_by_tag(db, None) == []


@patch("smartnotes.database.search.NoteModel")
def test_search_by_tags_requires_every_tag(mock_model):
    mock_model.return_value.list_by_tag.return_value = [
        _note("both", minutes_ago=5, tags=["home", "work"]),
        _note("work-only", minutes_ago=1, tags=["work"]),
    ]
    result = search_by_tags(Mock(), ["Work", "home", "work"])
    assert [n.note_id for n in result] == ["both"]
    mock_model.return_value.list_by_tag.assert_called_once_with("work")


@patch("smartnotes.database.search.NoteModel")
def test_search_by_tags_without_tags_lists_everything(mock_model):
    mock_model.return_value.list_all.return_value = [
        _note("old", minutes_ago=10),
        _note("new", minutes_ago=1),
    ]
    assert [n.note_id for n in search_by_tags(Mock(), [])] == ["new", "old"]
    assert [n.note_id for n in search_by_tags(Mock(), ["", "  "])] == ["new", "old"]
