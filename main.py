"""Convenience entry point to run the Smart Notes TUI app.

Allows starting the application with `python main.py` from the project root.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the src/ directory is on sys.path so `import smartnotes` works
ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from smartnotes.frontend.cli.app import SmartNotesApp
from smartnotes.frontend.cli.logging_config import configure_logging


def main() -> None:
    """Run the Smart Notes Textual CLI application."""
    configure_logging()
    SmartNotesApp().run()


if __name__ == "__main__":
    main()
