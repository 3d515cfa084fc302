"""YAML-frontmatter parser and note assembler."""

from __future__ import annotations

import base64
import datetime
import logging
import re
import unicodedata
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from notekit.errors import NoteReadError
from notekit.latex import has_math
from notekit.links import extract_links
from notekit.note import Heading, Note, freeze
from notekit.render import RenderOptions, render_html
from notekit.result import Parsed
from notekit.toc import extract_toc

logger = logging.getLogger(__name__)

# Opening delimiter: the very first line is exactly '---'
_OPEN_RE = re.compile(r"---\r?(?:\n|\Z)")
# Closing delimiter: the next line that is exactly '---'
_CLOSE_RE = re.compile(r"^---\r?$", re.MULTILINE)

_WHITESPACE_RE = re.compile(r"\s+")
_SLUG_STRIP_RE = re.compile(r"[^a-z0-9-]")


# ---------------------------------------------------------------------------
# Frontmatter
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Frontmatter:
    """Decoded frontmatter block with the three recognised fields pulled out."""

    title: str | None = None
    tags: tuple[str, ...] = ()
    description: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


def split_frontmatter(content: str) -> tuple[str, str]:
    """Split YAML front-matter from body text.

    Returns ``(block, body)``, both trimmed; ``block`` is empty when there is
    no opening delimiter or it is never closed, in which case ``body`` is the
    whole trimmed text.
    """
    opening = _OPEN_RE.match(content)
    if not opening:
        return "", content.strip()
    rest = content[opening.end() :]
    closing = _CLOSE_RE.search(rest)
    if not closing:
        return "", content.strip()
    return rest[: closing.start()].strip(), rest[closing.end() :].strip()


class _RecursiveAlias(ValueError):
    """A YAML alias refers to one of its own ancestors."""


def _plain(value: Any) -> Any:
    """Normalise a YAML value to null/bool/number/string/list/mapping.

    Nodes shared through YAML aliases are converted once and shared in the
    result. A self-referencing alias raises :class:`_RecursiveAlias`.
    """
    memo: dict[int, Any] = {}
    active: set[int] = set()

    def convert(v: Any) -> Any:
        if v is None or isinstance(v, (bool, int, float, str)):
            return v
        if isinstance(v, (datetime.date, datetime.datetime)):
            return v.isoformat()
        if isinstance(v, bytes):
            return base64.b64encode(v).decode("ascii")
        if not isinstance(v, (dict, list, tuple, set, frozenset)):
            return str(v)

        key = id(v)
        if key in memo:
            return memo[key]
        if key in active:
            raise _RecursiveAlias
        active.add(key)
        try:
            if isinstance(v, dict):
                result: Any = {str(k): convert(item) for k, item in v.items()}
            elif isinstance(v, (list, tuple)):
                result = [convert(item) for item in v]
            else:
                result = [convert(item) for item in sorted(v, key=repr)]
        finally:
            active.discard(key)
        memo[key] = result
        return result

    return convert(value)


def _string_field(data: dict[str, Any], key: str, diagnostics: list[str]) -> str | None:
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    diagnostics.append(f"frontmatter {key!r} is {type(value).__name__}, expected a string")
    return None


def _tags_field(data: dict[str, Any], diagnostics: list[str]) -> tuple[str, ...]:
    value = data.get("tags")
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list):
        tags = tuple(t for t in value if isinstance(t, str))
        if len(tags) != len(value):
            diagnostics.append(f"dropped {len(value) - len(tags)} non-string tag(s)")
        return tags
    diagnostics.append(f"frontmatter 'tags' is {type(value).__name__}, expected a string or list")
    return ()


def decode_frontmatter(block: str) -> Parsed[Frontmatter]:
    """Decode a frontmatter *block*; never raises.

    Malformed YAML, or YAML that is not a mapping, yields an empty
    :class:`Frontmatter` and a diagnostic.
    """
    if not block.strip():
        return Parsed(Frontmatter())
    try:
        loaded = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        return Parsed(Frontmatter(), (f"invalid YAML frontmatter: {exc}",))
    except RecursionError:
        return Parsed(Frontmatter(), ("YAML frontmatter nested too deeply",))
    if loaded is None:
        return Parsed(Frontmatter())
    if not isinstance(loaded, dict):
        return Parsed(
            Frontmatter(),
            (f"frontmatter is {type(loaded).__name__}, expected a mapping",),
        )

    try:
        data: dict[str, Any] = _plain(loaded)
    except _RecursiveAlias:
        return Parsed(Frontmatter(), ("recursive YAML alias in frontmatter",))
    except RecursionError:
        return Parsed(Frontmatter(), ("YAML frontmatter nested too deeply",))
    diagnostics: list[str] = []
    fm = Frontmatter(
        title=_string_field(data, "title", diagnostics),
        tags=_tags_field(data, diagnostics),
        description=_string_field(data, "description", diagnostics),
        data=data,
    )
    return Parsed(fm, tuple(diagnostics))


# ---------------------------------------------------------------------------
# Slug and title
# ---------------------------------------------------------------------------


def slugify_path(path: Path | str) -> str:
    """Filesystem- and URL-safe identifier from the file name alone.

    ``notes/My Note.md`` and ``other/My Note.md`` share the slug ``my-note``.
    """
    stem = Path(path).stem
    folded = unicodedata.normalize("NFKD", stem).encode("ascii", "ignore").decode("ascii")
    return _SLUG_STRIP_RE.sub("", _WHITESPACE_RE.sub("-", folded.lower()))


def resolve_title(fm_title: str | None, toc: tuple[Heading, ...], slug: str) -> str:
    """Frontmatter title, else first H1, else a prettified slug."""
    if fm_title and fm_title.strip():
        return fm_title.strip()
    for heading in toc:
        if heading.level == 1 and heading.text:
            return heading.text
    return " ".join(word.capitalize() for word in slug.split("-") if word)


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


def parse_text(content: str, slug: str, options: RenderOptions | None = None) -> Parsed[Note]:
    """Build a :class:`Note` from raw file *content*; pure, never raises."""
    block, body = split_frontmatter(content)
    fm = decode_frontmatter(block)
    links = extract_links(body)
    toc = extract_toc(body)

    note = Note(
        slug=slug,
        title=resolve_title(fm.value.title, toc.value, slug),
        description=fm.value.description,
        raw_body=body,
        html=render_html(body, options),
        links=links.value[0],
        embeds=links.value[1],
        tags=fm.value.tags,
        toc=toc.value,
        has_math=has_math(body),
        frontmatter=freeze(fm.value.data),
    )
    return Parsed(note, fm.diagnostics + links.diagnostics + toc.diagnostics)


def parse_note_with_diagnostics(
    path: Path | str, options: RenderOptions | None = None
) -> Parsed[Note]:
    """Read a ``.md`` file; return the :class:`Note` and any diagnostics.

    Raises :class:`NoteReadError` if the file cannot be read as UTF-8.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as exc:
        raise NoteReadError(path, f"not valid UTF-8 text ({exc.reason})") from exc
    except OSError as exc:
        raise NoteReadError(path, exc.strerror or str(exc)) from exc
    return parse_text(content, slugify_path(path), options)


def parse_note(path: Path | str, options: RenderOptions | None = None) -> Note:
    """Read a ``.md`` file and return a fully-populated :class:`Note`."""
    parsed = parse_note_with_diagnostics(path, options)
    for message in parsed.diagnostics:
        logger.debug("%s: %s", path, message)
    return parsed.value
