"""Inline parsing subsystem for mdpreview.

Provides mixins for parsing inline Markdown content:
- Emphasis and strong (*, _)
- Strikethrough (~~)
- Code spans (`)
- Links, images and autolinks
- Raw inline HTML
- Hard and soft line breaks

Architecture:
Uses CommonMark delimiter stack algorithm for proper emphasis parsing.
See: https://spec.commonmark.org/0.31.2/#emphasis-and-strong-emphasis

"""

from __future__ import annotations

from mdpreview.parsing.inline.core import InlineParsingCoreMixin
from mdpreview.parsing.inline.emphasis import EmphasisMixin
from mdpreview.parsing.inline.links import LinkParsingMixin, plain_text
from mdpreview.parsing.inline.match_registry import DelimiterMatch, MatchRegistry
from mdpreview.parsing.inline.tokens import (
    DelimiterToken,
    InlineToken,
    NodeToken,
    TextToken,
)


class InlineParsingMixin(
    InlineParsingCoreMixin,
    EmphasisMixin,
    LinkParsingMixin,
):
    """Combined inline parsing mixin.

    Combines all inline parsing functionality into a single mixin
    that can be inherited by the Parser class.

    Required Host Attributes:
        - _collecting: bool
        - _max_nesting: int
        - _strikethrough_enabled: bool
        - _autolinks_enabled: bool
        - _html_enabled: bool
        - _link_refs: dict[str, tuple[str, str | None]]

    """


__all__ = [
    "DelimiterMatch",
    "DelimiterToken",
    "EmphasisMixin",
    "InlineParsingCoreMixin",
    "InlineParsingMixin",
    "InlineToken",
    "LinkParsingMixin",
    "MatchRegistry",
    "NodeToken",
    "TextToken",
    "plain_text",
]
