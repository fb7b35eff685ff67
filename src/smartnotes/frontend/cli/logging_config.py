"""Lightweight logging setup for the TUI."""

import logging
import os
import sys


def configure_logging(level: int | str | None = None) -> None:
    # Configure root logger once; level falls back to SMARTNOTES_LOG_LEVEL, then INFO.
    if level is None:
        level = os.getenv("SMARTNOTES_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout,
    )
