"""List parsing for mdpreview.

Items are collected line by line and their content is parsed recursively as
blocks, so nested lists, quotes and code inside items come for free.

Indentation is tolerated rather than enforced: a line indented at least to
the item's content column belongs to the item, and when the first nested
line is a list marker indented further than that, the item adopts the
marker's column so uneven nesting (2, 5, 8 spaces...) still produces one
level per marker.

Looseness follows the common renderer convention: a list is loose when a
blank line separates two items or separates two direct children of an item.
"""

from __future__ import annotations

from mdpreview.nodes import List, ListItem
from mdpreview.parsing.lines import (
    LIST_MARKER,
    TAB_STOP,
    ListMarker,
    is_blank,
    match_list_marker,
    split_indent,
    strip_columns,
)


def _same_list(first: ListMarker, other: ListMarker) -> bool:
    """Items continue a list only with the same marker type and character."""
    return first.ordered == other.ordered and first.delimiter == other.delimiter


class ListParsingMixin:
    """Mixin for bullet and ordered list parsing.

    Required Host Attributes:
        - _lines: list[str]
        - _pos: int

    Required Host Methods:
        - _location(index, col) -> SourceLocation
        - _parse_nested_content(content, line_index) -> tuple[Block, ...]
        - _interrupts_paragraph(line, rest) -> bool
        - _is_paragraph_continuation(line) -> bool
        - _track_fence(line, fence) -> tuple[str, int] | None

    """

    def _parse_list(self) -> List:
        """Parse a list starting at the current line (which holds a marker)."""
        first = match_list_marker(self._lines[self._pos])
        assert first is not None
        location = self._location(self._pos, first.indent + 1)
        items: list[ListItem] = []
        tight = True

        while self._pos < len(self._lines):
            marker = match_list_marker(self._lines[self._pos])
            if marker is None or not _same_list(first, marker):
                break

            item_start = self._pos
            lines, blank_inside, blank_after = self._collect_list_item(marker)
            items.append(
                ListItem(
                    location=self._location(item_start, marker.indent + 1),
                    children=self._parse_nested_content("\n".join(lines), item_start),
                )
            )
            if blank_inside:
                tight = False
            elif blank_after and self._pos < len(self._lines):
                following = match_list_marker(self._lines[self._pos])
                if following is not None and _same_list(first, following):
                    tight = False

        return List(
            location=location,
            items=tuple(items),
            ordered=first.ordered,
            start=first.start,
            tight=tight,
        )

    def _collect_list_item(self, marker: ListMarker) -> tuple[list[str], bool, bool]:
        """Gather the lines of one item, de-indented to the item's content.

        Returns:
            (content lines, blank line between direct children,
             blank lines consumed after the item)
        """
        content_col = marker.content_col
        lines = [marker.content]
        self._pos += 1

        strip: int | None = None
        pending_blanks = 0
        blank_inside = False
        nested_marker_seen = False
        fence = self._track_fence(marker.content, None)

        while self._pos < len(self._lines):
            line = self._lines[self._pos]
            if is_blank(line):
                pending_blanks += 1
                self._pos += 1
                continue

            # An item may begin with at most one blank line
            if marker.empty and len(lines) == 1 and pending_blanks:
                break

            indent, rest = split_indent(line)
            if indent >= content_col:
                if strip is None:
                    deeper_marker = indent > content_col and LIST_MARKER.match(rest)
                    strip = indent if deeper_marker else content_col
                stripped = strip_columns(line, min(indent, strip))

                is_marker = match_list_marker(stripped) is not None
                if pending_blanks:
                    if fence is None and split_indent(stripped)[0] == 0:
                        if not is_marker or not nested_marker_seen:
                            blank_inside = True
                    lines.extend([""] * pending_blanks)
                    pending_blanks = 0
                nested_marker_seen = nested_marker_seen or is_marker

                fence = self._track_fence(stripped, fence)
                lines.append(stripped)
                self._pos += 1
                continue

            if pending_blanks or fence is not None:
                break
            if match_list_marker(line) is not None:
                break
            if not self._is_paragraph_continuation(lines[-1]):
                break
            if indent < TAB_STOP and self._interrupts_paragraph(line, rest):
                break

            # Lazy continuation of the item's paragraph
            lines.append(rest)
            self._pos += 1

        return lines, blank_inside, pending_blanks > 0
