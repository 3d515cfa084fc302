"""Table-of-contents extraction and heading anchors."""

from __future__ import annotations

import re

from notekit.blocks import scan_lines
from notekit.note import Heading
from notekit.result import Parsed

# ATX heading: 1-6 '#' followed by whitespace; setext headings are not supported
_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*)$")
# Whitespace and punctuation runs collapse to a single hyphen
_ANCHOR_SEP_RE = re.compile(r"[\W_]+")

_EMPTY_ANCHOR = "section"


def anchorize(text: str) -> str:
    """Lowercase *text* and hyphenate it into a URL fragment."""
    return _ANCHOR_SEP_RE.sub("-", text.lower()).strip("-") or _EMPTY_ANCHOR


class AnchorRegistry:
    """Hands out anchors that are unique within one note.

    The first ``title`` stays bare, later ones become ``title-2``,
    ``title-3`` and so on, skipping any suffix already taken.
    """

    def __init__(self) -> None:
        self._seen: set[str] = set()
        self._next: dict[str, int] = {}

    def claim(self, base: str) -> str:
        candidate = base
        n = self._next.get(base, 1)
        while candidate in self._seen:
            n += 1
            candidate = f"{base}-{n}"
        self._next[base] = n
        self._seen.add(candidate)
        return candidate


def scan_headings(body: str) -> Parsed[list[tuple[int, Heading]]]:
    """Return ``(line_number, Heading)`` pairs for every heading outside fences.

    Line numbers are 0-based and match the line numbering markdown-it uses
    for the same text.
    """
    scanned = scan_lines(body)
    anchors = AnchorRegistry()
    found: list[tuple[int, Heading]] = []
    for line in scanned.value:
        if line.in_code:
            continue
        m = _HEADING_RE.match(line.text)
        if not m:
            continue
        text = m.group(2).strip()
        anchor = anchors.claim(anchorize(text))
        found.append((line.number, Heading(level=len(m.group(1)), text=text, anchor=anchor)))
    return Parsed(found, scanned.diagnostics)


def extract_toc(body: str) -> Parsed[tuple[Heading, ...]]:
    """Return the ordered table of contents of *body*."""
    scanned = scan_headings(body)
    return Parsed(tuple(h for _, h in scanned.value), scanned.diagnostics)
