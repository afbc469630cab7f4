"""Parsing subsystem for mdpreview.

Provides mixin classes for modular parsing functionality:
- `BlockParsingMixin`: Block-level content (paragraphs, lists, tables, quotes)
- `InlineParsingMixin`: Inline content (emphasis, links, code spans)

Architecture:
The parser uses a mixin-based design for separation of concerns. Each mixin
handles one aspect of the Markdown grammar and documents the host
attributes and methods it relies on.

Example:
    >>> from mdpreview.parsing import BlockParsingMixin, InlineParsingMixin
    >>> class Parser(BlockParsingMixin, InlineParsingMixin):
    ...     pass

"""

from mdpreview.parsing.blocks import BlockParsingMixin
from mdpreview.parsing.inline import InlineParsingMixin

__all__ = [
    "BlockParsingMixin",
    "InlineParsingMixin",
]
