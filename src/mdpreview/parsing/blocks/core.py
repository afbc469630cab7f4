"""Core block parsing for mdpreview.

Provides block dispatch and the leaf blocks (headings, code, raw HTML,
paragraphs) plus block quotes.

Every source line is consumed by exactly one branch of _parse_block, so
parsing always terminates and never raises on malformed input: anything
that fails to qualify as a specific construct falls through to a paragraph.
"""

from __future__ import annotations

import re

from mdpreview.location import SourceLocation
from mdpreview.nodes import (
    Block,
    BlockQuote,
    FencedCode,
    Heading,
    HtmlBlock,
    IndentedCode,
    Paragraph,
    ThematicBreak,
)
from mdpreview.parsing.lines import (
    ATX_CLOSING,
    ATX_HEADING,
    HTML_BLOCK_END,
    LINK_REFERENCE_DEF,
    SETEXT_UNDERLINE,
    TAB_STOP,
    THEMATIC_BREAK,
    fence_marker,
    html_block_kind,
    is_blank,
    is_fence_close,
    match_list_marker,
    normalize_label,
    split_indent,
    strip_columns,
    unescape_string,
)


class BlockParsingCoreMixin:
    """Block dispatch and leaf block parsing.

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
        - _parse_list() -> List
        - _try_parse_table() -> Table | None
        - _table_starts_at(index) -> bool

    """

    def _location(self, index: int, col: int = 1) -> SourceLocation:
        """Location of line ``index`` of this parser's input in the document."""
        return SourceLocation(self._line_offset + index + 1, col)

    def _can_nest(self) -> bool:
        """Whether another container level may be opened."""
        return self._depth < self._max_nesting

    def _parse_block(self) -> Block | None:
        """Parse one block starting at the current line.

        Returns None for lines that produce no node (blank lines and link
        reference definitions).
        """
        line = self._lines[self._pos]
        if is_blank(line):
            self._pos += 1
            return None

        indent, rest = split_indent(line)
        if indent >= TAB_STOP:
            return self._parse_indented_code()

        fence = fence_marker(rest)
        if fence is not None:
            return self._parse_fenced_code(indent, *fence)

        heading = ATX_HEADING.match(rest)
        if heading is not None:
            return self._parse_atx_heading(heading, indent)

        if THEMATIC_BREAK.match(rest):
            location = self._location(self._pos, indent + 1)
            self._pos += 1
            return ThematicBreak(location=location)

        if rest.startswith(">") and self._can_nest():
            return self._parse_block_quote()

        if self._can_nest() and match_list_marker(line) is not None:
            return self._parse_list()

        if self._html_enabled:
            kind = html_block_kind(rest)
            if kind:
                return self._parse_html_block(kind)

        ref = LINK_REFERENCE_DEF.match(rest)
        if ref is not None and self._register_link_reference(ref):
            self._pos += 1
            return None

        if self._tables_enabled:
            table = self._try_parse_table()
            if table is not None:
                return table

        return self._parse_paragraph()

    # =========================================================================
    # Paragraphs and headings
    # =========================================================================

    def _interrupts_paragraph(self, line: str, rest: str) -> bool:
        """Check if a line (indent < 4) starts a block that ends a paragraph.

        Args:
            line: The full line
            rest: The line without its leading whitespace
        """
        if fence_marker(rest) is not None:
            return True
        if ATX_HEADING.match(rest) or THEMATIC_BREAK.match(rest):
            return True
        if rest.startswith(">"):
            return self._can_nest()

        marker = match_list_marker(line)
        if marker is not None and self._can_nest() and not marker.empty:
            # Only a list starting at 1 may interrupt a paragraph
            if not marker.ordered or marker.start == 1:
                return True

        if self._html_enabled and 1 <= html_block_kind(rest) <= 6:
            return True

        return self._tables_enabled and self._table_starts_at(self._pos)

    def _is_paragraph_continuation(self, line: str) -> bool:
        """Check if ``line`` (already collected) leaves a paragraph open.

        Container markers are looked through, so the last line of a nested
        quote or list item qualifies too.
        """
        while True:
            if is_blank(line):
                return False
            indent, rest = split_indent(line)
            if indent >= TAB_STOP:
                return False
            if rest.startswith(">"):
                line = rest[1:]
                continue
            marker = match_list_marker(line)
            if marker is not None:
                line = marker.content
                continue
            break
        if fence_marker(rest) is not None or html_block_kind(rest):
            return False
        return not (ATX_HEADING.match(rest) or THEMATIC_BREAK.match(rest))

    def _parse_paragraph(self) -> Paragraph | Heading:
        """Parse a paragraph, or a setext heading when an underline follows."""
        start = self._pos
        location = self._location(start)
        lines = [split_indent(self._lines[start])[1]]
        self._pos += 1

        while self._pos < len(self._lines):
            line = self._lines[self._pos]
            if is_blank(line):
                break
            indent, rest = split_indent(line)
            if indent < TAB_STOP:
                if self._allow_setext_headings and SETEXT_UNDERLINE.match(rest):
                    self._pos += 1
                    content = "\n".join(lines).strip()
                    return Heading(
                        location=location,
                        level=1 if rest[0] == "=" else 2,
                        children=self._parse_inline(content, location, self._depth),
                        style="setext",
                    )
                if self._interrupts_paragraph(line, rest):
                    break
            lines.append(rest)
            self._pos += 1

        text = "\n".join(lines).rstrip(" \t")
        return Paragraph(location=location, children=self._parse_inline(text, location, self._depth))

    def _parse_atx_heading(self, match: re.Match[str], indent: int) -> Heading:
        """Parse ATX heading (# Title), dropping an optional closing sequence."""
        location = self._location(self._pos, indent + 1)
        self._pos += 1
        level = len(match.group(1))
        content = ATX_CLOSING.sub("", match.group(2) or "").strip()
        return Heading(
            location=location,
            level=level,  # type: ignore[arg-type]
            children=self._parse_inline(content, location, self._depth),
        )

    # =========================================================================
    # Code and raw HTML
    # =========================================================================

    def _parse_fenced_code(self, indent: int, char: str, length: int, info: str) -> FencedCode:
        """Parse fenced code block.

        The fence closes on a line of at least ``length`` copies of ``char``;
        an unclosed fence runs to the end of the input. Up to ``indent``
        columns are removed from each content line.
        """
        location = self._location(self._pos, indent + 1)
        self._pos += 1
        code_lines: list[str] = []

        while self._pos < len(self._lines):
            line = self._lines[self._pos]
            self._pos += 1
            close_indent, rest = split_indent(line)
            if close_indent < TAB_STOP and is_fence_close(rest, char, length):
                break
            code_lines.append(strip_columns(line, indent))

        return FencedCode(
            location=location,
            code="".join(f"{code_line}\n" for code_line in code_lines),
            info=unescape_string(info) or None,
            marker=char,  # type: ignore[arg-type]
        )

    def _parse_indented_code(self) -> IndentedCode:
        """Parse indented code block (4+ columns). Trailing blank lines are dropped."""
        location = self._location(self._pos)
        code_lines: list[str] = []

        while self._pos < len(self._lines):
            line = self._lines[self._pos]
            if not is_blank(line) and split_indent(line)[0] < TAB_STOP:
                break
            code_lines.append(strip_columns(line, TAB_STOP))
            self._pos += 1

        while code_lines and is_blank(code_lines[-1]):
            code_lines.pop()

        return IndentedCode(
            location=location,
            code="".join(f"{code_line}\n" for code_line in code_lines),
        )

    def _parse_html_block(self, kind: int) -> HtmlBlock:
        """Parse raw HTML block.

        Kinds 1-5 run until their end marker (inclusive); kinds 6 and 7 run
        until a blank line.
        """
        location = self._location(self._pos)
        end = HTML_BLOCK_END[kind] if kind <= 5 else None
        collected: list[str] = []

        while self._pos < len(self._lines):
            line = self._lines[self._pos]
            if end is None and is_blank(line):
                break
            collected.append(line)
            self._pos += 1
            if end is not None and end.search(line):
                break

        return HtmlBlock(location=location, html="\n".join(collected))

    # =========================================================================
    # Containers
    # =========================================================================

    def _track_fence(self, line: str, fence: tuple[str, int] | None) -> tuple[str, int] | None:
        """Follow fence open/close state across collected container lines."""
        indent, rest = split_indent(line)
        if indent >= TAB_STOP:
            return fence
        if fence is None:
            opened = fence_marker(rest)
            return (opened[0], opened[1]) if opened is not None else None
        return None if is_fence_close(rest, *fence) else fence

    def _parse_block_quote(self) -> BlockQuote:
        """Parse block quote (> quoted).

        Lines without a marker continue the quote lazily while its last line
        is paragraph text. Setext underlines are disabled in content with
        lazy lines, so ``> foo\\n---`` stays a paragraph and a rule.
        """
        start = self._pos
        location = self._location(start)
        content: list[str] = []
        fence: tuple[str, int] | None = None
        lazy = False

        while self._pos < len(self._lines):
            line = self._lines[self._pos]
            indent, rest = split_indent(line)

            if indent < TAB_STOP and rest.startswith(">"):
                inner = rest[1:]
                if inner.startswith(" "):
                    inner = inner[1:]
                elif inner.startswith("\t"):
                    inner = strip_columns(inner, 1)
                content.append(inner)
                fence = self._track_fence(inner, fence)
                self._pos += 1
                continue

            if is_blank(line) or fence is not None:
                break
            if not self._is_paragraph_continuation(content[-1]):
                break
            if indent < TAB_STOP and self._interrupts_paragraph(line, rest):
                break

            content.append(line)
            lazy = True
            self._pos += 1

        children = self._parse_nested_content(
            "\n".join(content),
            start,
            allow_setext_headings=not lazy,
        )
        return BlockQuote(location=location, children=children)

    # =========================================================================
    # Link reference definitions
    # =========================================================================

    def _register_link_reference(self, match: re.Match[str]) -> bool:
        """Record a ``[label]: url "title"`` definition.

        The first definition of a label wins. Returns False when the label
        is blank (the line is then ordinary text).
        """
        label = normalize_label(match.group(1))
        if not label:
            return False
        if label not in self._link_refs:
            destination = match.group(2)
            if destination.startswith("<"):
                destination = destination[1:-1]
            title = match.group(3)
            self._link_refs[label] = (
                unescape_string(destination),
                unescape_string(title[1:-1]) if title else None,
            )
        return True
