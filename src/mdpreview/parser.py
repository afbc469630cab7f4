"""Line-based recursive parser producing a typed AST.

Architecture:
The parser uses a mixin-based design for separation of concerns:
- `BlockParsingMixin`: Block-level content (paragraphs, lists, tables, quotes)
- `InlineParsingMixin`: Inline content (emphasis, links, code spans)

Container blocks (block quotes, list items) strip their markers and hand
their content to a sub-parser one level deeper. Past
RenderConfig.max_nesting, container markers are no longer recognized and
the remaining text is parsed as ordinary paragraphs, so any input
terminates with bounded recursion.

Thread Safety:
- Parser produces immutable AST (frozen dataclasses)
- Configuration is read from ContextVar (thread-local)
- Safe to share AST across threads

"""

from __future__ import annotations

from mdpreview.config import RenderConfig, get_render_config
from mdpreview.nodes import Block
from mdpreview.parsing import BlockParsingMixin, InlineParsingMixin
from mdpreview.utils.logger import get_logger

logger = get_logger(__name__)


def normalize_source(source: str) -> str:
    """Normalize line endings to ``\\n`` and replace NUL with U+FFFD."""
    if "\r" in source:
        source = source.replace("\r\n", "\n").replace("\r", "\n")
    if "\0" in source:
        source = source.replace("\0", "\ufffd")
    return source


class Parser(
    BlockParsingMixin,
    InlineParsingMixin,
):
    """Recursive parser for Markdown.

    Usage:
        >>> parser = Parser("# Hello\\n\\nWorld")
        >>> blocks = parser.parse()
        >>> blocks[0]
        Heading(location=..., level=1, children=(Text(...),), style='atx')

    Thread Safety:
        Parser instances are single-use and not thread-safe. Create one per
        parse operation. Configuration is read from ContextVar (thread-local).
        The resulting AST is immutable and thread-safe.

    """

    __slots__ = (
        "_source",
        "_lines",
        "_pos",
        # Container nesting level of this (sub-)parser
        "_depth",
        # Line number of this parser's first line in the whole document, minus 1
        "_line_offset",
        # Link reference definitions (per-document state, shared with sub-parsers)
        "_link_refs",
        # Setext heading control - disabled for blockquote lazy continuation content
        "_allow_setext_headings",
        # True during the reference-collecting first pass
        "_collecting",
    )

    def __init__(
        self,
        source: str,
        *,
        depth: int = 0,
        line_offset: int = 0,
        link_refs: dict[str, tuple[str, str | None]] | None = None,
    ) -> None:
        """Initialize parser with source text.

        Configuration is read from ContextVar, not passed as parameters.
        Use render_config_context() before creating a Parser if you need
        non-default configuration.

        Args:
            source: Markdown source text
            depth: Container nesting level (sub-parsers only)
            line_offset: Document line number of the first line, minus 1
            link_refs: Shared reference definitions (sub-parsers only)

        """
        self._source = normalize_source(source)
        self._lines = self._source.split("\n")
        self._pos = 0
        self._depth = depth
        self._line_offset = line_offset
        # Link reference definitions: normalized label -> (url, title)
        self._link_refs: dict[str, tuple[str, str | None]] = {} if link_refs is None else link_refs
        self._allow_setext_headings = True
        self._collecting = False

    # =========================================================================
    # Configuration Properties (read from ContextVar)
    # =========================================================================

    @property
    def _config(self) -> RenderConfig:
        """Get current render configuration (thread-local)."""
        return get_render_config()

    @property
    def _tables_enabled(self) -> bool:
        return self._config.tables_enabled

    @property
    def _strikethrough_enabled(self) -> bool:
        return self._config.strikethrough_enabled

    @property
    def _autolinks_enabled(self) -> bool:
        return self._config.autolinks_enabled

    @property
    def _html_enabled(self) -> bool:
        return self._config.html_enabled

    @property
    def _max_nesting(self) -> int:
        return self._config.max_nesting

    def parse(self) -> tuple[Block, ...]:
        """Parse source into AST blocks.

        Link reference definitions may appear after their uses, so when the
        source contains any, a first pass walks the block structure only to
        collect them.

        Returns:
            Tuple of Block nodes

        """
        if "]:" in self._source:
            self._collecting = True
            self._parse_blocks()
            self._collecting = False
            self._pos = 0
        return self._parse_blocks()

    def _parse_blocks(self) -> tuple[Block, ...]:
        blocks: list[Block] = []
        while self._pos < len(self._lines):
            block = self._parse_block()
            if block is not None:
                blocks.append(block)
        return tuple(blocks)

    def _parse_nested_content(
        self,
        content: str,
        line_index: int,
        *,
        allow_setext_headings: bool = True,
    ) -> tuple[Block, ...]:
        """Parse nested content as blocks (for block quotes, list items).

        Creates a sub-parser one level deeper. Configuration is inherited
        via ContextVar; link references and the collecting flag are shared.

        Args:
            content: The markdown content to parse as blocks
            line_index: Index (in this parser) of the content's first line
            allow_setext_headings: If False, disable setext heading detection
                (used for blockquote content with lazy continuation lines)

        """
        if not content.strip():
            return ()
        if self._depth + 1 == self._max_nesting and not self._collecting:
            logger.debug(
                "Nesting limit %d reached at line %d; deeper markers stay literal",
                self._max_nesting,
                self._line_offset + line_index + 1,
            )

        sub_parser = Parser(
            content,
            depth=self._depth + 1,
            line_offset=self._line_offset + line_index,
            link_refs=self._link_refs,
        )
        sub_parser._allow_setext_headings = allow_setext_headings
        sub_parser._collecting = self._collecting
        return sub_parser._parse_blocks()
