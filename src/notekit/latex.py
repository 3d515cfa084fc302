"""LaTeX math detection."""

from __future__ import annotations

import re

from notekit.blocks import mask_code

# $$ ... $$ display math, may span lines
_BLOCK_DOLLAR_RE = re.compile(r"(?<!\\)\$\$(?P<body>[\s\S]+?)(?<!\\)\$\$")
# $...$ inline math on one line. The opening $ must be followed by
# non-space, the closing $ preceded by non-space and not followed by a
# digit, so "costs $5 and $10" is not math.
_INLINE_DOLLAR_RE = re.compile(
    r"(?<![\\$])\$(?![\s$])(?P<body>(?:\\.|[^$\\\n])+?)(?<![\s\\])\$(?![$\d])"
)
# \[ ... \] display math
_BRACKET_RE = re.compile(r"\\\[(?P<body>[\s\S]+?)\\\]")

_RULES = (_BLOCK_DOLLAR_RE, _INLINE_DOLLAR_RE, _BRACKET_RE)


def _matches(rule: re.Pattern[str], text: str) -> bool:
    return any(m.group("body").strip() for m in rule.finditer(text))


def has_math(body: str) -> bool:
    """Return True if *body* contains a matched math delimiter pair.

    Code blocks are ignored; a dangling delimiter never counts.
    """
    text = mask_code(body).value
    return any(_matches(rule, text) for rule in _RULES)
