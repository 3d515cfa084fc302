"""Obsidian-flavoured Markdown note parser."""

from notekit.errors import NoteReadError
from notekit.note import Heading, Note
from notekit.parser import (
    decode_frontmatter,
    parse_note,
    parse_note_with_diagnostics,
    parse_text,
    slugify_path,
    split_frontmatter,
)
from notekit.render import RenderOptions, render_html
from notekit.result import Parsed

__all__ = [
    "Heading",
    "Note",
    "NoteReadError",
    "Parsed",
    "RenderOptions",
    "decode_frontmatter",
    "parse_note",
    "parse_note_with_diagnostics",
    "parse_text",
    "render_html",
    "slugify_path",
    "split_frontmatter",
]
