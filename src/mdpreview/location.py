"""Source positions attached to AST nodes.

Thread Safety:
SourceLocation is frozen (immutable) and safe to share across threads.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Line/column where a node starts in the markdown source.

    Both positions are 1-indexed. Nodes inside block quotes and list items
    carry positions in the whole document, not in the container.

    Examples:
        >>> str(SourceLocation(3, 1))
        '3:1'
    """

    lineno: int
    col_offset: int = 1

    def __str__(self) -> str:
        return f"{self.lineno}:{self.col_offset}"

