"""Block parsing subsystem for mdpreview.

Provides mixins for parsing block-level Markdown content:
- Headings (ATX and setext)
- Code blocks (fenced and indented)
- Block quotes
- Lists (ordered and bullet, arbitrarily nested)
- Tables (GFM)
- Raw HTML blocks
- Paragraphs

Architecture:
Block parsing is split into logical modules:
- core: Block dispatch, leaf blocks and block quotes
- lists: List item collection and looseness
- table: GFM table parsing

"""

from mdpreview.parsing.blocks.core import BlockParsingCoreMixin
from mdpreview.parsing.blocks.lists import ListParsingMixin
from mdpreview.parsing.blocks.table import TableParsingMixin


class BlockParsingMixin(
    BlockParsingCoreMixin,
    ListParsingMixin,
    TableParsingMixin,
):
    """Combined block parsing mixin.

    Combines all block parsing functionality into a single mixin
    that can be inherited by the Parser class.

    Required Host Attributes:
        - _lines: list[str]
        - _pos: int
        - _depth: int
        - _line_offset: int
        - _link_refs: dict[str, tuple[str, str | None]]
        - _allow_setext_headings: bool
        - _tables_enabled: bool
        - _html_enabled: bool
        - _max_nesting: int

    Required Host Methods:
        - _parse_inline(text, location, depth) -> tuple[Inline, ...]
        - _parse_nested_content(content, line_index, *, allow_setext_headings) -> tuple[Block, ...]

    """


__all__ = [
    "BlockParsingCoreMixin",
    "BlockParsingMixin",
    "ListParsingMixin",
    "TableParsingMixin",
]
