"""Fatal parse errors."""

from __future__ import annotations

from pathlib import Path


class NoteReadError(Exception):
    """The note file could not be read as UTF-8 text.

    This is the only error :func:`notekit.parser.parse_note` raises; every
    content-level problem degrades a field instead.
    """

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"cannot read note {path}: {reason}")
        self.path = path
        self.reason = reason
