"""Typed inline tokens for mdpreview.

The inline tokenizer produces a flat list of these NamedTuples; emphasis
matching then runs over the delimiter tokens and the AST builder folds the
list into nested nodes.

Thread Safety:
All tokens are immutable and safe to share across threads.

Usage:
    from mdpreview.parsing.inline.tokens import DelimiterToken, TextToken

    token = DelimiterToken(char="*", count=2, can_open=True, can_close=False)
    match token:
        case DelimiterToken(char="*", count=count):
            print(f"Asterisk delimiter with count {count}")

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal, NamedTuple, TypeAlias

if TYPE_CHECKING:
    from mdpreview.nodes import Inline

DelimiterChar: TypeAlias = Literal["*", "_", "~"]


class DelimiterToken(NamedTuple):
    """Run of emphasis or strikethrough delimiters.

    Match state lives in a MatchRegistry, never on the token.

    Attributes:
        char: The delimiter character ("*", "_", or "~").
        count: Length of the run as written.
        can_open: Whether this run can open emphasis.
        can_close: Whether this run can close emphasis.

    """

    char: DelimiterChar
    count: int
    can_open: bool
    can_close: bool


class TextToken(NamedTuple):
    """Literal text (escapes and entities already resolved)."""

    content: str


class NodeToken(NamedTuple):
    """A finished inline node: code span, link, image, break or raw HTML."""

    node: Inline


InlineToken: TypeAlias = DelimiterToken | TextToken | NodeToken
