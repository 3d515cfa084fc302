"""Core Note and Heading records."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class Heading:
    """One ATX heading of a note's table of contents."""

    level: int  # 1..6, count of leading '#'
    text: str  # raw inline Markdown, emphasis markers kept
    anchor: str  # unique within the owning note

    def to_dict(self) -> dict[str, Any]:
        return {"level": self.level, "text": self.text, "anchor": self.anchor}


@dataclass(frozen=True)
class Note:
    """A single fully-parsed markdown note."""

    slug: str
    title: str
    description: str | None
    raw_body: str
    html: str
    #: Targets of [[WikiLinks]], in order of appearance, duplicates kept
    links: tuple[str, ...] = ()
    #: Targets of ![[Embeds]], same ordering rule as ``links``
    embeds: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    toc: tuple[Heading, ...] = ()
    has_math: bool = False
    frontmatter: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def to_dict(self) -> dict[str, Any]:
        return {
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "raw_body": self.raw_body,
            "html": self.html,
            "links": list(self.links),
            "embeds": list(self.embeds),
            "tags": list(self.tags),
            "toc": [h.to_dict() for h in self.toc],
            "has_math": self.has_math,
            "frontmatter": thaw(self.frontmatter),
        }


def freeze(value: Any, _memo: dict[int, Any] | None = None) -> Any:
    """Return a read-only deep copy of a decoded frontmatter value.

    Containers shared by reference are frozen once and stay shared.
    """
    if not isinstance(value, (Mapping, list, tuple)):
        return value
    memo = {} if _memo is None else _memo
    if id(value) not in memo:
        if isinstance(value, Mapping):
            memo[id(value)] = MappingProxyType({k: freeze(v, memo) for k, v in value.items()})
        else:
            memo[id(value)] = tuple(freeze(v, memo) for v in value)
    return memo[id(value)]


def thaw(value: Any, _memo: dict[int, Any] | None = None) -> Any:
    """Inverse of :func:`freeze`: plain ``dict``/``list`` suitable for JSON."""
    if not isinstance(value, (Mapping, tuple)):
        return value
    memo = {} if _memo is None else _memo
    if id(value) not in memo:
        if isinstance(value, Mapping):
            memo[id(value)] = {k: thaw(v, memo) for k, v in value.items()}
        else:
            memo[id(value)] = [thaw(v, memo) for v in value]
    return memo[id(value)]
