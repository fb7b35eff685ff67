"""Clipboard utilities for the CLI frontend.

Uses pyperclip for cross-platform clipboard access.
"""

from __future__ import annotations

import pyperclip

from smartnotes.core.exceptions import AlreadyEncryptedError
from smartnotes.core.models import Note
from smartnotes.core.textutils import strip_html


def copy_note_to_clipboard(note: Note) -> str:
    """Copy a note's title and plain-text content to the system clipboard.

    Encrypted notes are refused so ciphertext never ends up on the clipboard.

    Returns:
        The text that was copied.

    Raises:
        AlreadyEncryptedError: If the note is encrypted.
        pyperclip.PyperclipException: If clipboard access fails.
    """
    if note.is_encrypted:
        raise AlreadyEncryptedError("Decrypt the note before copying it")
    text = f"{note.title}\n\n{strip_html(note.content)}"
    pyperclip.copy(text)
    return text
