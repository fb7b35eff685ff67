"""Unit tests for the CLI AppContext builder."""

from pathlib import Path

import pytest

from smartnotes.frontend.cli import context as context_module
from smartnotes.frontend.cli.context import build_context, resolve_db_path


def test_resolve_db_path_explicit_wins(tmp_path, monkeypatch):
    monkeypatch.setenv("SMARTNOTES_DB_PATH", str(tmp_path / "env.db"))
    assert resolve_db_path(tmp_path / "explicit.db") == tmp_path / "explicit.db"


def test_resolve_db_path_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("SMARTNOTES_DB_PATH", str(tmp_path / "env.db"))
    assert resolve_db_path() == tmp_path / "env.db"


def test_resolve_db_path_default(monkeypatch):
    monkeypatch.delenv("SMARTNOTES_DB_PATH", raising=False)
    assert resolve_db_path() == context_module.DEFAULT_DB_PATH
    assert context_module.DEFAULT_DB_PATH.name == "notes.db"


def test_build_context_first_run(tmp_path):
    """A missing database is created and seeded with a pinned welcome note."""
    db_path = tmp_path / "sub" / "notes.db"
    ctx = build_context(db_path=db_path)
    try:
        assert ctx.first_run is True
        assert db_path.exists()

        notes = ctx.notes.list_notes()
        assert len(notes) == 1
        welcome = notes[0]
        assert welcome.title == "Welcome to Smart Notes"
        assert welcome.is_pinned is True
        assert welcome.tags == ["guide", "welcome"]
        assert welcome.is_encrypted is False
    finally:
        ctx.db.close()


def test_build_context_existing_db(tmp_path):
    """Reopening an existing database does not add another welcome note."""
    db_path = tmp_path / "notes.db"
    first = build_context(db_path=db_path)
    first.notes.create_note(title="Mine")
    first.db.close()

    ctx = build_context(db_path=db_path)
    try:
        assert ctx.first_run is False
        titles = sorted(n.title for n in ctx.notes.list_notes())
        assert titles == ["Mine", "Welcome to Smart Notes"]
    finally:
        ctx.db.close()


def test_build_context_uses_env(tmp_path, monkeypatch):
    db_path = tmp_path / "from-env.db"
    monkeypatch.setenv("SMARTNOTES_DB_PATH", str(db_path))
    ctx = build_context()
    try:
        assert Path(ctx.db.db_path) == db_path
        assert db_path.exists()
    finally:
        ctx.db.close()
