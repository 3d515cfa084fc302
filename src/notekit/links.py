"""WikiLink and embed extraction."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator

from notekit.blocks import scan_lines
from notekit.result import Parsed

# [[Target]], [[Target|Alias]], ![[Target]], ![[Target|Alias]]; never spans lines
WIKILINK_RE = re.compile(
    r"(?P<bang>!)?\[\[(?P<target>[^\]|\n]*)(?:\|(?P<alias>[^\]\n]*))?\]\]"
)
_OPEN_RE = re.compile(r"\[\[")


@dataclass(frozen=True)
class WikiLink:
    target: str
    alias: str | None = None
    embed: bool = False


def to_wikilink(match: re.Match[str]) -> WikiLink | None:
    """Build a :class:`WikiLink` from a :data:`WIKILINK_RE` match.

    Returns None when the target is blank.
    """
    target = match.group("target").strip()
    if not target:
        return None
    alias = (match.group("alias") or "").strip() or None
    return WikiLink(target=target, alias=alias, embed=match.group("bang") is not None)


def iter_wikilinks(body: str) -> Iterator[tuple[int, re.Match[str]]]:
    """Yield ``(line_number, match)`` for every wikilink outside code blocks."""
    for line in scan_lines(body).value:
        if line.in_code:
            continue
        for m in WIKILINK_RE.finditer(line.text):
            yield line.number, m


def _unterminated(body: str) -> list[int]:
    """Line numbers holding a ``[[`` that no wikilink match covers."""
    result: list[int] = []
    for line in scan_lines(body).value:
        if line.in_code:
            continue
        spans = [m.span() for m in WIKILINK_RE.finditer(line.text)]
        for m in _OPEN_RE.finditer(line.text):
            if not any(start <= m.start() < end for start, end in spans):
                result.append(line.number)
                break
    return result


def extract_links(body: str) -> Parsed[tuple[tuple[str, ...], tuple[str, ...]]]:
    """Return ``(links, embeds)`` targets found in *body*.

    Both are in order of appearance with duplicates kept. An alias never
    leaks into the target.
    """
    links: list[str] = []
    embeds: list[str] = []
    diagnostics: list[str] = []
    for number, m in iter_wikilinks(body):
        link = to_wikilink(m)
        if link is None:
            diagnostics.append(f"empty wikilink target at line {number + 1}")
            continue
        (embeds if link.embed else links).append(link.target)
    for number in _unterminated(body):
        diagnostics.append(f"unterminated wikilink at line {number + 1}")
    return Parsed((tuple(links), tuple(embeds)), tuple(diagnostics))
