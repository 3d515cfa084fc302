"""Line scanning with code-block awareness.

Link, heading and math scanners must not look inside code blocks, so they
all work from the same view of the body produced here. Which lines are code
is decided by markdown-it's own block parser, so fences nested in lists and
blockquotes are recognised exactly as the renderer sees them.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass

from markdown_it import MarkdownIt

from notekit.result import Parsed

# Same line breaks markdown-it normalises, so line numbers agree with token.map
_NEWLINE_RE = re.compile(r"\r\n|\r|\n")
# Container markers that may precede a closing fence on its line
_CONTAINER_PREFIX_RE = re.compile(r"^[ \t>]*")

_CODE_TOKENS = ("fence", "code_block")

# Block structure only; never mutated after import
_BLOCK_PARSER = MarkdownIt("commonmark", {"html": False}).enable("table")


@dataclass(frozen=True)
class Line:
    number: int  # 0-based
    text: str
    in_code: bool  # inside fenced or indented code, delimiters included


def split_lines(text: str) -> list[str]:
    return _NEWLINE_RE.split(text)


def _closes(line: str, markup: str) -> bool:
    stripped = _CONTAINER_PREFIX_RE.sub("", line).rstrip()
    char = markup[0]
    return len(stripped) >= len(markup) and stripped == char * len(stripped)


@functools.lru_cache(maxsize=64)
def _code_lines(text: str) -> tuple[frozenset[int], tuple[int, ...]]:
    """Return ``(code line numbers, opening lines of unclosed fences)``."""
    lines = split_lines(text)
    code: set[int] = set()
    unclosed: list[int] = []
    for token in _BLOCK_PARSER.parse(text):
        if token.type not in _CODE_TOKENS or not token.map:
            continue
        start, end = token.map
        code.update(range(start, end))
        if token.type == "fence":
            last = min(end, len(lines)) - 1
            if last <= start or not _closes(lines[last], token.markup):
                unclosed.append(start)
    return frozenset(code), tuple(unclosed)


def scan_lines(text: str) -> Parsed[list[Line]]:
    """Classify every line of *text* as inside or outside a code block."""
    code, unclosed = _code_lines(text)
    lines = [
        Line(number, line, number in code) for number, line in enumerate(split_lines(text))
    ]
    diagnostics = tuple(f"unclosed code fence opened at line {n + 1}" for n in unclosed)
    return Parsed(lines, diagnostics)


def mask_code(text: str) -> Parsed[str]:
    """Return *text* with every code line blanked, keeping line numbering."""
    scanned = scan_lines(text)
    masked = "\n".join("" if line.in_code else line.text for line in scanned.value)
    return Parsed(masked, scanned.diagnostics)
