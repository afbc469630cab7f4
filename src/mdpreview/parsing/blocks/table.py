"""Table parsing for mdpreview.

Handles GFM (GitHub Flavored Markdown) pipe tables.

Ragged rows never fail the table. The column count is the larger of the
header and delimiter row widths; shorter rows are padded with empty cells
and longer body rows are cut to that width.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from mdpreview.nodes import Alignment, Table, TableCell, TableRow
from mdpreview.parsing.lines import (
    TABLE_DELIMITER_CELL,
    TAB_STOP,
    is_blank,
    split_indent,
)

if TYPE_CHECKING:
    from mdpreview.location import SourceLocation


class TableParsingMixin:
    """Mixin for GFM table parsing.

    Required Host Attributes:
        - _lines: list[str]
        - _pos: int
        - _depth: int

    Required Host Methods:
        - _location(index, col) -> SourceLocation
        - _parse_inline(text, location, depth) -> tuple[Inline, ...]
        - _interrupts_paragraph(line, rest) -> bool

    """

    def _table_starts_at(self, index: int) -> bool:
        """Check for a header row at ``index`` followed by a delimiter row."""
        if index + 1 >= len(self._lines):
            return False
        header_indent, header = split_indent(self._lines[index])
        delimiter_indent, delimiter = split_indent(self._lines[index + 1])
        if header_indent >= TAB_STOP or delimiter_indent >= TAB_STOP:
            return False
        if "|" not in header:
            return False
        return self._parse_table_delimiter(delimiter) is not None

    def _try_parse_table(self) -> Table | None:
        """Try to parse a GFM table at the current line.

        GFM table structure:
        | Header 1 | Header 2 |   <- header row
        |----------|----------|   <- delimiter row (required)
        | Cell 1   | Cell 2   |   <- body rows

        The body ends at a blank line, a line without a pipe, or a line that
        starts another block. Returns None if not a table.
        """
        if not self._table_starts_at(self._pos):
            return None

        location = self._location(self._pos)
        header_cells = self._parse_table_row(split_indent(self._lines[self._pos])[1])
        alignments = self._parse_table_delimiter(split_indent(self._lines[self._pos + 1])[1])
        assert alignments is not None
        width = max(len(header_cells), len(alignments))
        alignments = alignments + (None,) * (width - len(alignments))
        self._pos += 2

        head = self._build_table_row(header_cells, alignments, self._location(self._pos - 2), True)

        body: list[TableRow] = []
        while self._pos < len(self._lines):
            line = self._lines[self._pos]
            if is_blank(line):
                break
            indent, rest = split_indent(line)
            if indent >= TAB_STOP or "|" not in rest:
                break
            if self._interrupts_paragraph(line, rest):
                break
            body.append(
                self._build_table_row(
                    self._parse_table_row(rest),
                    alignments,
                    self._location(self._pos),
                    False,
                )
            )
            self._pos += 1

        return Table(location=location, head=head, body=tuple(body), alignments=alignments)

    def _build_table_row(
        self,
        cells: list[str],
        alignments: tuple[Alignment, ...],
        location: SourceLocation,
        is_header: bool,
    ) -> TableRow:
        """Build a row of exactly ``len(alignments)`` cells."""
        width = len(alignments)
        cells = cells[:width] + [""] * (width - len(cells))
        return TableRow(
            location=location,
            cells=tuple(
                TableCell(
                    location=location,
                    children=self._parse_inline(cell.strip(), location, self._depth),
                    is_header=is_header,
                    align=alignments[i],
                )
                for i, cell in enumerate(cells)
            ),
            is_header=is_header,
        )

    def _parse_table_row(self, line: str) -> list[str]:
        """Split a table row into raw cell contents.

        Leading and trailing pipes are optional; ``\\|`` is a literal pipe.
        """
        line = line.strip()

        # Remove leading/trailing pipes
        if line.startswith("|"):
            line = line[1:]
        if line.endswith("|") and not line.endswith("\\|"):
            line = line[:-1]

        # Split on unescaped pipes
        cells: list[str] = []
        current_cell: list[str] = []
        i = 0
        while i < len(line):
            if line[i] == "\\" and i + 1 < len(line) and line[i + 1] == "|":
                current_cell.append("|")
                i += 2
            elif line[i] == "|":
                cells.append("".join(current_cell))
                current_cell = []
                i += 1
            else:
                current_cell.append(line[i])
                i += 1

        cells.append("".join(current_cell))
        return cells

    def _parse_table_delimiter(self, line: str) -> tuple[Alignment, ...] | None:
        """Parse table delimiter row and extract alignments.

        Delimiter format: |:---|:---:|---:|
        Returns None if not a valid delimiter row.
        """
        line = line.strip()
        if "|" not in line:
            return None

        # Remove leading/trailing pipes
        if line.startswith("|"):
            line = line[1:]
        if line.endswith("|"):
            line = line[:-1]

        alignments: list[Alignment] = []
        for part in line.split("|"):
            part = part.strip()
            if not TABLE_DELIMITER_CELL.match(part):
                return None

            has_left_colon = part.startswith(":")
            has_right_colon = part.endswith(":")
            if has_left_colon and has_right_colon:
                alignments.append("center")
            elif has_left_colon:
                alignments.append("left")
            elif has_right_colon:
                alignments.append("right")
            else:
                alignments.append(None)

        return tuple(alignments)
