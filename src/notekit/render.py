"""Markdown to HTML rendering with WikiLink support.

markdown-it knows nothing about ``[[...]]`` and would mangle it (``[x]``
looks like a reference link, ``|`` may start a table cell), so rendering
happens in two passes:

1. every wikilink outside code blocks is swapped for an inert placeholder
   token ``\\ue000<n>\\ue001`` indexing into a per-render table;
2. a core rule walks the token stream and turns placeholders in plain text
   into ``<a class="wikilink">`` (links) or ``<span class="wikiembed">``
   (embeds). Everywhere else (code, raw HTML, image alt text, attributes,
   link labels) the literal source text is put back.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass, fields
from typing import Any, Mapping
from urllib.parse import quote

from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml
from markdown_it.rules_core import StateCore
from markdown_it.token import Token

from notekit.blocks import scan_lines
from notekit.links import WIKILINK_RE, WikiLink, to_wikilink
from notekit.toc import scan_headings

_PLACEHOLDER_RE = re.compile("\ue000(\\d+)\ue001")
# The same placeholder after markdown-it percent-encoded it inside a URL
_ENCODED_PLACEHOLDER_RE = re.compile(r"%EE%80%80(\d+)%EE%80%81")

_ENV_SPANS = "wikilink_spans"
_ENV_OPTIONS = "wikilink_options"
_ENV_ANCHORS = "heading_anchors"

Span = tuple[WikiLink, str]  # parsed link, original source text


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RenderOptions:
    allow_html: bool = False  # pass raw HTML through instead of escaping it
    link_href: str = "{target}"  # href template, {target} is URL-quoted
    heading_ids: bool = True  # put TOC anchors on rendered headings

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RenderOptions":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


DEFAULT_OPTIONS = RenderOptions()


# ---------------------------------------------------------------------------
# Placeholder expansion
# ---------------------------------------------------------------------------


def _expand(link: WikiLink, options: RenderOptions) -> str:
    target = escapeHtml(link.target)
    label = escapeHtml(link.alias or link.target)
    if link.embed:
        alias = f' data-alias="{escapeHtml(link.alias)}"' if link.alias else ""
        return f'<span class="wikiembed" data-target="{target}"{alias}>{label}</span>'
    href = escapeHtml(options.link_href.format(target=quote(link.target)))
    return f'<a class="wikilink" href="{href}" data-target="{target}">{label}</a>'


def _restore_literal(content: str, spans: list[Span]) -> str:
    def _sub(m: re.Match[str]) -> str:
        n = int(m.group(1))
        return spans[n][1] if n < len(spans) else m.group(0)

    return _ENCODED_PLACEHOLDER_RE.sub(_sub, _PLACEHOLDER_RE.sub(_sub, content))


def _restore_token(token: Token, spans: list[Span]) -> None:
    """Put the literal source back wherever a placeholder cannot become markup."""
    token.content = _restore_literal(token.content, spans)
    if token.attrs:
        token.attrs = {
            k: _restore_literal(v, spans) if isinstance(v, str) else v
            for k, v in token.attrs.items()
        }
    for child in token.children or ():
        _restore_token(child, spans)


def _split_text(token: Token, spans: list[Span], options: RenderOptions) -> list[Token]:
    parts: list[Token] = []
    pos = 0
    for m in _PLACEHOLDER_RE.finditer(token.content):
        n = int(m.group(1))
        if n >= len(spans):
            continue
        if m.start() > pos:
            parts.append(Token("text", "", 0, level=token.level, content=token.content[pos : m.start()]))
        parts.append(
            Token("html_inline", "", 0, level=token.level, content=_expand(spans[n][0], options))
        )
        pos = m.end()
    if not parts:
        return [token]
    if pos < len(token.content):
        parts.append(Token("text", "", 0, level=token.level, content=token.content[pos:]))
    return parts


def _expand_children(children: list[Token], spans: list[Span], options: RenderOptions) -> list[Token]:
    """Expand placeholders in plain text; anywhere else restore the source.

    Link labels keep the literal source too, since anchors cannot nest.
    """
    out: list[Token] = []
    link_depth = 0
    for child in children:
        if child.type == "link_open":
            link_depth += 1
        elif child.type == "link_close":
            link_depth -= 1
        if child.type == "text" and link_depth == 0:
            out.extend(_split_text(child, spans, options))
        else:
            _restore_token(child, spans)
            out.append(child)
    return out


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


def _wikilinks(state: StateCore) -> None:
    spans: list[Span] = state.env.get(_ENV_SPANS, [])
    if not spans:
        return
    options: RenderOptions = state.env.get(_ENV_OPTIONS, DEFAULT_OPTIONS)
    for token in state.tokens:
        if token.type == "inline" and token.children:
            token.children = _expand_children(token.children, spans, options)
        else:
            _restore_token(token, spans)


def _heading_anchors(state: StateCore) -> None:
    anchors: dict[int, tuple[int, str]] = state.env.get(_ENV_ANCHORS, {})
    for token in state.tokens:
        if token.type != "heading_open" or not token.map:
            continue
        entry = anchors.get(token.map[0])
        if entry is not None and token.tag == f"h{entry[0]}":
            token.attrSet("id", entry[1])


@functools.lru_cache(maxsize=None)
def _engine(allow_html: bool) -> MarkdownIt:
    """Build the shared markdown-it instance; never mutated once returned."""
    md = MarkdownIt("commonmark", {"html": allow_html}).enable("table").enable("strikethrough")
    md.core.ruler.push("wikilinks", _wikilinks)
    md.core.ruler.push("heading_anchors", _heading_anchors)
    return md


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _protect(body: str) -> tuple[str, list[Span]]:
    """Swap wikilinks outside code blocks for placeholders."""
    spans: list[Span] = []

    def _sub(m: re.Match[str]) -> str:
        link = to_wikilink(m)
        if link is None:
            return m.group(0)
        spans.append((link, m.group(0)))
        return f"\ue000{len(spans) - 1}\ue001"

    out = [
        line.text if line.in_code else WIKILINK_RE.sub(_sub, line.text)
        for line in scan_lines(body).value
    ]
    return "\n".join(out), spans


def render_html(body: str, options: RenderOptions | None = None) -> str:
    """Render *body* to HTML, expanding wikilinks and embeds."""
    options = options or DEFAULT_OPTIONS
    text, spans = _protect(body)
    anchors: dict[int, tuple[int, str]] = {}
    if options.heading_ids:
        anchors = {n: (h.level, h.anchor) for n, h in scan_headings(body).value}
    env: dict[str, Any] = {_ENV_SPANS: spans, _ENV_OPTIONS: options, _ENV_ANCHORS: anchors}
    return _engine(options.allow_html).render(text, env)
