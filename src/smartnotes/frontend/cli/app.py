"""Textual app for SmartNotes.

Start here with `python -m smartnotes.frontend.cli.app`
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pyperclip
from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import (
    Button,
    Footer,
    Header,
    Input,
    Label,
    ListItem,
    ListView,
    Static,
    TextArea,
)

from smartnotes.core.exceptions import (
    AuthenticationFailureError,
    EncryptionError,
    InvalidPasswordError,
    MalformedEnvelopeError,
    NoteNotFoundError,
    SmartNotesError,
)
from smartnotes.core.models import Note
from smartnotes.core.textutils import (
    content_complexity,
    format_date,
    generate_preview,
    reading_time,
    truncate_text,
)
from smartnotes.database.search import matches_query
from smartnotes.frontend.cli.clipboard import copy_note_to_clipboard
from smartnotes.frontend.cli.context import AppContext, build_context
from smartnotes.security.passwords import generate_password, validate_encryption_password


DECRYPT_FAILED_MESSAGE = "Incorrect password or corrupted data"
ENCRYPT_FAILED_MESSAGE = "Failed to encrypt note"
ENCRYPTED_PLACEHOLDER = "This note is encrypted. Press Ctrl+U and enter the password to open it."
NOTE_ACTIONS = frozenset(
    {
        "new_note",
        "save_note",
        "delete_note",
        "toggle_pin",
        "encrypt_note",
        "decrypt_note",
        "search",
        "filter_by_tag",
        "edit_tags",
        "copy_note",
        "export",
    }
)


def note_label(note: Note) -> str:
    # Title line plus a preview line; encrypted titles are ciphertext and never shown.
    pin = "* " if note.is_pinned else ""
    if note.is_encrypted:
        return f"{pin}[locked] Encrypted note\nThis note is encrypted."
    return f"{pin}{truncate_text(note.title, 40)}\n{generate_preview(note.content, 40)}"


def parse_tags(text: str) -> list[str]:
    """Split comma-separated tag input, dropping blanks."""
    return [part.strip() for part in (text or "").split(",") if part.strip()]


# === Modal definitions ===


class PasswordModal(ModalScreen[Optional[str]]):
    """Ask for a password. In encrypt mode, show a strength hint and a generator."""

    def __init__(self, title: str, encrypting: bool = False):
        super().__init__()
        self.title_text = title
        self.encrypting = encrypting
        self.strength_text = ""

    def compose(self) -> ComposeResult:  # pragma: no cover - UI only
        with Vertical(classes="dialog"):
            yield Static(self.title_text, classes="title")
            if self.encrypting:
                yield Label("Password (it cannot be recovered if you forget it)")
            else:
                yield Label("This note is encrypted. Enter your password to view it.")
            self.password_input = Input(placeholder="Enter password...", password=True, id="password")
            yield self.password_input
            self.strength_label = Static("", id="strength")
            yield self.strength_label
            with Horizontal():
                yield Button("Cancel (Esc)", id="cancel")
                if self.encrypting:
                    yield Button("Generate", id="generate")
                yield Button(
                    "Encrypt (Enter)" if self.encrypting else "Decrypt (Enter)",
                    id="ok",
                    variant="primary",
                )

    def on_mount(self) -> None:  # pragma: no cover
        self.set_focus(self.password_input)

    @on(Input.Changed, "#password")
    def on_password_changed(self, event: Input.Changed) -> None:
        if not self.encrypting:
            return
        if not event.value:
            self.strength_text = ""
            self.strength_label.update("")
            return
        result = validate_encryption_password(event.value)
        hint = "" if result.is_valid else " - consider a longer password with mixed characters"
        self.strength_text = f"Strength: {result.strength}{hint}"
        self.strength_label.update(self.strength_text)

    def _submit(self) -> None:
        password = self.password_input.value
        if not password.strip():
            self.strength_text = "Enter a password"
            self.strength_label.update(self.strength_text)
            return
        self.dismiss(password)

    def on_button_pressed(self, event: Button.Pressed) -> None:  # pragma: no cover
        if event.button.id == "cancel":
            self.dismiss(None)
        elif event.button.id == "generate":
            self.password_input.password = False
            self.password_input.value = generate_password(16)
        else:
            self._submit()

    def on_input_submitted(self, event: Input.Submitted) -> None:  # pragma: no cover
        self._submit()

    def on_key(self, event) -> None:  # pragma: no cover
        if event.key == "escape":
            self.dismiss(None)


class TextPromptModal(ModalScreen[Optional[str]]):
    """Single-line prompt used for tags, the tag filter and the export path."""

    def __init__(self, title: str, label: str, value: str = "", placeholder: str = ""):
        super().__init__()
        self.title_text = title
        self.label_text = label
        self.initial = value
        self.placeholder = placeholder

    def compose(self) -> ComposeResult:  # pragma: no cover - UI only
        with Vertical(classes="dialog"):
            yield Static(self.title_text, classes="title")
            yield Label(self.label_text)
            self.value_input = Input(value=self.initial, placeholder=self.placeholder)
            yield self.value_input
            with Horizontal():
                yield Button("Cancel (Esc)", id="cancel")
                yield Button("OK (Enter)", id="ok", variant="primary")

    def on_mount(self) -> None:  # pragma: no cover
        self.set_focus(self.value_input)

    def on_button_pressed(self, event: Button.Pressed) -> None:  # pragma: no cover
        if event.button.id == "cancel":
            self.dismiss(None)
        else:
            self.dismiss(self.value_input.value.strip())

    def on_input_submitted(self, event: Input.Submitted) -> None:  # pragma: no cover
        self.dismiss(self.value_input.value.strip())

    def on_key(self, event) -> None:  # pragma: no cover
        if event.key == "escape":
            self.dismiss(None)


class DeleteConfirmModal(ModalScreen[Optional[bool]]):
    def __init__(self, prompt: str):
        super().__init__()
        self.prompt = prompt

    def compose(self) -> ComposeResult:  # pragma: no cover
        with Vertical(classes="dialog"):
            yield Static(self.prompt, classes="title")
            with Horizontal():
                yield Button("Cancel (Esc)", id="cancel")
                yield Button("Delete", id="ok", variant="error")

    def on_button_pressed(self, event: Button.Pressed) -> None:  # pragma: no cover
        self.dismiss(event.button.id == "ok")

    def on_key(self, event) -> None:  # pragma: no cover
        if event.key == "escape":
            self.dismiss(False)


class ErrorModal(ModalScreen[None]):
    """Simple error dialog."""

    def __init__(self, title: str, message: str):
        super().__init__()
        self.title_text = title
        self.message = message

    def compose(self) -> ComposeResult:  # pragma: no cover
        with Vertical(classes="dialog"):
            yield Static(self.title_text, classes="title")
            yield Label(self.message)
            yield Button("Close (Esc)", id="close", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:  # pragma: no cover
        self.dismiss(None)

    def on_key(self, event) -> None:  # pragma: no cover
        if event.key in ("escape", "enter"):
            self.dismiss(None)


class NoteListItem(ListItem):
    def __init__(self, note: Note):
        super().__init__(Label(note_label(note), markup=False))
        self.note = note


# === App ===


class SmartNotesApp(App):
    """Notes list on the left, editor on the right."""

    TITLE = "Smart Notes"

    CSS = """
    #sidebar { width: 36; border-right: solid $primary; }
    #search { margin: 0 0 1 0; }
    #main { padding: 0 1; }
    #editor { height: 1fr; }
    #status { height: 1; color: $text-muted; }
    .dialog { width: 64; height: auto; padding: 1 2; border: thick $primary; background: $surface; }
    .title { text-style: bold; margin-bottom: 1; }
    PasswordModal, TextPromptModal, DeleteConfirmModal, ErrorModal { align: center middle; }
    """

    # priority so the focused Input/TextArea does not swallow them
    BINDINGS = [
        Binding("ctrl+n", "new_note", "New", priority=True),
        Binding("ctrl+s", "save_note", "Save", priority=True),
        Binding("ctrl+d", "delete_note", "Delete", priority=True),
        Binding("ctrl+o", "toggle_pin", "Pin", priority=True),
        Binding("ctrl+e", "encrypt_note", "Encrypt", priority=True),
        Binding("ctrl+u", "decrypt_note", "Decrypt", priority=True),
        Binding("ctrl+f", "search", "Search", priority=True),
        Binding("ctrl+t", "edit_tags", "Tags", priority=True),
        Binding("ctrl+g", "filter_by_tag", "Filter", priority=True),
        Binding("ctrl+y", "copy_note", "Copy", priority=True),
        Binding("ctrl+x", "export", "Export", priority=True),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, ctx: AppContext | None = None):
        super().__init__()
        self.ctx = ctx or build_context()
        self.current_note_id: Optional[str] = None
        self.note_ids: list[str] = []
        self.search_query = ""
        self.tag_filters: list[str] = []
        self.status_text = ""

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            with Vertical(id="sidebar"):
                yield Input(placeholder="Search notes...", id="search")
                yield ListView(id="notes")
            with Vertical(id="main"):
                yield Input(placeholder="Title", id="title")
                yield TextArea(id="editor")
                yield Static("", id="status")
        yield Footer()

    async def on_mount(self) -> None:
        await self.refresh_notes()

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        # note actions are off while a dialog is open
        if action in NOTE_ACTIONS and isinstance(self.screen, ModalScreen):
            return False
        return True

    # --- data loading ---

    def _visible_notes(self) -> list[Note]:
        notes = self.ctx.notes.filter_by_tags(self.tag_filters)
        return [n for n in notes if matches_query(n, self.search_query)]

    async def refresh_notes(self) -> None:
        """Reload the notes list, keeping the current selection when possible."""
        notes = self._visible_notes()
        list_view = self.query_one("#notes", ListView)
        await list_view.clear()
        self.note_ids = [note.note_id for note in notes]
        await list_view.extend(NoteListItem(note) for note in notes)

        if self.current_note_id not in self.note_ids:
            self.current_note_id = self.note_ids[0] if self.note_ids else None
        if self.current_note_id is not None:
            list_view.index = self.note_ids.index(self.current_note_id)
        self.show_note(self.current_note_id)

    def show_note(self, note_id: Optional[str]) -> None:
        title_input = self.query_one("#title", Input)
        editor = self.query_one("#editor", TextArea)

        if note_id is None:
            title_input.value = ""
            editor.load_text("")
            editor.read_only = True
            self._set_status("No notes. Press Ctrl+N to create one.")
            return

        try:
            note = self.ctx.notes.get_note(note_id)
        except NoteNotFoundError:
            self.current_note_id = None
            return

        self.current_note_id = note.note_id
        if note.is_encrypted:
            title_input.value = "Encrypted note"
            title_input.disabled = True
            editor.load_text(ENCRYPTED_PLACEHOLDER)
            editor.read_only = True
        else:
            title_input.disabled = False
            title_input.value = note.title
            editor.load_text(note.content)
            editor.read_only = False
        self._update_status(note)

    def _update_status(self, note: Note) -> None:
        parts = []
        if note.is_encrypted:
            parts.append("Encrypted")
        else:
            parts.append(f"{note.word_count} words")
            parts.append(reading_time(note.content))
            parts.append(content_complexity(note.content))
        if note.is_pinned:
            parts.append("Pinned")
        if note.tags:
            parts.append("#" + " #".join(note.tags))
        parts.append(f"edited {format_date(note.updated_at)}")
        if self.tag_filters:
            parts.append("filter: " + ", ".join(self.tag_filters))
        self._set_status(" | ".join(parts))

    def _set_status(self, message: str) -> None:
        self.status_text = message
        self.query_one("#status", Static).update(message)

    def _show_error(self, title: str, message: str) -> None:
        self.push_screen(ErrorModal(title, message))

    # --- events ---

    def on_list_view_highlighted(self, event: ListView.Highlighted) -> None:
        item = event.item
        if isinstance(item, NoteListItem) and item.note.note_id != self.current_note_id:
            self.show_note(item.note.note_id)

    @on(Input.Changed, "#search")
    async def on_search_changed(self, event: Input.Changed) -> None:
        self.search_query = event.value
        await self.refresh_notes()

    # --- actions ---

    async def action_new_note(self) -> None:
        note = self.ctx.notes.create_note()
        self.current_note_id = note.note_id
        await self.refresh_notes()
        self.set_focus(self.query_one("#title", Input))

    async def action_save_note(self) -> None:
        if self.current_note_id is None:
            return
        note = self.ctx.notes.get_note(self.current_note_id)
        if note.is_encrypted:
            return
        title = self.query_one("#title", Input).value
        content = self.query_one("#editor", TextArea).text
        try:
            self.ctx.notes.update_note(self.current_note_id, title=title, content=content)
        except SmartNotesError as e:
            self._show_error("Save failed", str(e))
            return
        await self.refresh_notes()

    def action_delete_note(self) -> None:
        if self.current_note_id is None:
            return
        self.push_screen(DeleteConfirmModal("Delete this note?"), self._handle_delete_note)

    async def _handle_delete_note(self, confirmed: Optional[bool]) -> None:
        if not confirmed or self.current_note_id is None:
            return
        try:
            self.ctx.notes.delete_note(self.current_note_id)
        except NoteNotFoundError:
            pass
        self.current_note_id = None
        await self.refresh_notes()

    async def action_toggle_pin(self) -> None:
        if self.current_note_id is None:
            return
        self.ctx.notes.toggle_pin(self.current_note_id)
        await self.refresh_notes()

    async def action_encrypt_note(self) -> None:
        if self.current_note_id is None:
            return
        note = self.ctx.notes.get_note(self.current_note_id)
        if note.is_encrypted:
            self._set_status("Note is already encrypted")
            return
        # unsaved edits are encrypted too
        await self.action_save_note()
        self.push_screen(PasswordModal("Encrypt Note", encrypting=True), self._handle_encrypt_password)

    def _handle_encrypt_password(self, password: Optional[str]) -> None:
        if password:
            self.run_worker(self.encrypt_current(password), exclusive=True)

    async def encrypt_current(self, password: str) -> bool:
        """Encrypt the selected note; returns True on success."""
        note_id = self.current_note_id
        if note_id is None:
            return False
        self._set_status("Encrypting...")
        try:
            await self.ctx.notes.encrypt_note_async(note_id, password)
        except InvalidPasswordError as e:
            self.show_note(note_id)
            self._show_error(ENCRYPT_FAILED_MESSAGE, str(e))
            return False
        except EncryptionError:
            self.show_note(note_id)
            self._show_error("Encryption failed", ENCRYPT_FAILED_MESSAGE)
            return False
        except SmartNotesError as e:
            self.show_note(note_id)
            self._show_error(ENCRYPT_FAILED_MESSAGE, str(e))
            return False
        await self.refresh_notes()
        self._set_status("Note encrypted successfully")
        return True

    def action_decrypt_note(self) -> None:
        if self.current_note_id is None:
            return
        note = self.ctx.notes.get_note(self.current_note_id)
        if not note.is_encrypted:
            self._set_status("Note is not encrypted")
            return
        self.push_screen(PasswordModal("Decrypt Note"), self._handle_decrypt_password)

    def _handle_decrypt_password(self, password: Optional[str]) -> None:
        if password:
            self.run_worker(self.decrypt_current(password), exclusive=True)

    async def decrypt_current(self, password: str) -> bool:
        """Decrypt the selected note; returns True on success."""
        note_id = self.current_note_id
        if note_id is None:
            return False
        self._set_status("Decrypting...")
        try:
            await self.ctx.notes.decrypt_note_async(note_id, password)
        except (AuthenticationFailureError, MalformedEnvelopeError):
            # never say which of the two it was
            self.show_note(note_id)
            self._show_error("Decryption failed", DECRYPT_FAILED_MESSAGE)
            return False
        except SmartNotesError as e:
            self.show_note(note_id)
            self._show_error("Decryption failed", str(e))
            return False
        await self.refresh_notes()
        self._set_status("Note decrypted successfully")
        return True

    def action_search(self) -> None:
        self.set_focus(self.query_one("#search", Input))

    def action_filter_by_tag(self) -> None:
        tags = ", ".join(self.ctx.notes.all_tags())
        self.push_screen(
            TextPromptModal(
                "Filter by Tags",
                f"Notes must carry every tag (comma-separated, blank clears). Known: {tags or 'none'}",
                value=", ".join(self.tag_filters),
            ),
            self._handle_filter_by_tag,
        )

    async def _handle_filter_by_tag(self, value: Optional[str]) -> None:
        if value is None:
            return
        self.tag_filters = [tag.lower() for tag in parse_tags(value)]
        await self.refresh_notes()

    def action_edit_tags(self) -> None:
        if self.current_note_id is None:
            return
        note = self.ctx.notes.get_note(self.current_note_id)
        self.push_screen(
            TextPromptModal("Edit Tags", "Tags (comma-separated)", value=", ".join(note.tags)),
            self._handle_edit_tags,
        )

    async def _handle_edit_tags(self, value: Optional[str]) -> None:
        if value is None or self.current_note_id is None:
            return
        try:
            note = self.ctx.notes.update_note(self.current_note_id, tags=parse_tags(value))
        except SmartNotesError as e:
            self._show_error("Could not update tags", str(e))
            return
        await self.refresh_notes()
        self._set_status("Tags: " + (", ".join(note.tags) or "none"))

    def action_copy_note(self) -> None:
        if self.current_note_id is None:
            return
        note = self.ctx.notes.get_note(self.current_note_id)
        try:
            copy_note_to_clipboard(note)
        except SmartNotesError as e:
            self._set_status(str(e))
            return
        except pyperclip.PyperclipException as e:
            self._show_error("Clipboard error", str(e))
            return
        self._set_status("Copied to clipboard")

    def action_export(self) -> None:
        default = str(Path.home() / "smartnotes-export.txt")
        self.push_screen(
            TextPromptModal("Export Notes", "Write a plain-text export to", value=default),
            self._handle_export,
        )

    def _handle_export(self, path: Optional[str]) -> None:
        if not path:
            return
        try:
            Path(path).expanduser().write_text(self.ctx.notes.export_text(), encoding="utf-8")
        except OSError as e:
            self._show_error("Export failed", str(e))
            return
        self._set_status(f"Exported to {path}")


def main() -> None:
    from smartnotes.frontend.cli.logging_config import configure_logging

    configure_logging()
    SmartNotesApp().run()


if __name__ == "__main__":
    main()
