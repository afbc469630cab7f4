"""Typed AST nodes for mdpreview.

All AST nodes are frozen dataclasses with slots, so a parsed document can be
cached or handed between threads without copying.

Node Hierarchy:
Node (base)
├── Block
│   ├── Document
│   ├── Heading
│   ├── Paragraph
│   ├── FencedCode
│   ├── IndentedCode
│   ├── BlockQuote
│   ├── List
│   ├── ListItem
│   ├── Table / TableRow / TableCell
│   ├── ThematicBreak
│   └── HtmlBlock
└── Inline
    ├── Text
    ├── Emphasis
    ├── Strong
    ├── Strikethrough
    ├── Link
    ├── Image
    ├── CodeSpan
    ├── LineBreak
    ├── SoftBreak
    └── HtmlInline

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

from mdpreview.location import SourceLocation

Alignment: TypeAlias = Literal["left", "center", "right"] | None


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all AST nodes."""

    location: SourceLocation


# =============================================================================
# Inline Nodes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Text(Node):
    """Literal text (already unescaped; the renderer escapes it)."""

    content: str


@dataclass(frozen=True, slots=True)
class Emphasis(Node):
    """Markdown: *text* or _text_ / HTML: <em>text</em>"""

    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class Strong(Node):
    """Markdown: **text** or __text__ / HTML: <strong>text</strong>"""

    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class Strikethrough(Node):
    """Markdown: ~~text~~ / HTML: <del>text</del>"""

    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class Link(Node):
    """Hyperlink.

    Markdown: [text](url "title"), [text][ref], <https://url>
    HTML: <a href="url" title="title">text</a>

    """

    url: str
    title: str | None
    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class Image(Node):
    """Image.

    Markdown: ![alt](url "title")
    HTML: <img src="url" alt="alt" title="title" />

    The alt text is flattened to plain text at parse time.

    """

    url: str
    alt: str
    title: str | None = None


@dataclass(frozen=True, slots=True)
class CodeSpan(Node):
    """Markdown: `code` / HTML: <code>code</code>"""

    code: str


@dataclass(frozen=True, slots=True)
class LineBreak(Node):
    """Hard line break: two trailing spaces or a backslash before a newline."""


@dataclass(frozen=True, slots=True)
class SoftBreak(Node):
    """Single newline inside a paragraph.

    Rendered as <br /> when RenderConfig.hard_breaks is on, else as a newline.

    """


@dataclass(frozen=True, slots=True)
class HtmlInline(Node):
    """Raw inline HTML tag, comment or declaration, passed to the sanitizer."""

    html: str


Inline: TypeAlias = (
    Text
    | Emphasis
    | Strong
    | Strikethrough
    | Link
    | Image
    | CodeSpan
    | LineBreak
    | SoftBreak
    | HtmlInline
)


# =============================================================================
# Block Nodes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Heading(Node):
    """ATX (# Title) or setext (Title / =====) heading."""

    level: Literal[1, 2, 3, 4, 5, 6]
    children: tuple[Inline, ...]
    style: Literal["atx", "setext"] = "atx"


@dataclass(frozen=True, slots=True)
class Paragraph(Node):
    """Run of text lines separated from other blocks by blank lines."""

    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class FencedCode(Node):
    """Fenced code block.

    Markdown:
        ```python
        print("hi")
        ```

    ``info`` is the full info string; ``language`` is its first word, the
    hint handed to the highlighter.

    """

    code: str
    info: str | None = None
    marker: Literal["`", "~"] = "`"

    @property
    def language(self) -> str | None:
        if not self.info:
            return None
        return self.info.split()[0]


@dataclass(frozen=True, slots=True)
class IndentedCode(Node):
    """Code block indented by four or more columns."""

    code: str


@dataclass(frozen=True, slots=True)
class BlockQuote(Node):
    """Markdown: > quoted text / HTML: <blockquote>...</blockquote>"""

    children: tuple[Block, ...]


@dataclass(frozen=True, slots=True)
class ListItem(Node):
    """One item of an ordered or bullet list."""

    children: tuple[Block, ...]


@dataclass(frozen=True, slots=True)
class List(Node):
    """Ordered or unordered list.

    ``tight`` lists render their single-paragraph items without <p> wrappers.

    """

    items: tuple[ListItem, ...]
    ordered: bool = False
    start: int = 1
    tight: bool = True


@dataclass(frozen=True, slots=True)
class ThematicBreak(Node):
    """Markdown: --- or *** or ___ / HTML: <hr />"""


@dataclass(frozen=True, slots=True)
class HtmlBlock(Node):
    """Raw HTML block, passed to the sanitizer."""

    html: str


@dataclass(frozen=True, slots=True)
class TableCell(Node):
    """Table cell (th or td)."""

    children: tuple[Inline, ...]
    is_header: bool = False
    align: Alignment = None


@dataclass(frozen=True, slots=True)
class TableRow(Node):
    """Table row. Every row of a Table has the same number of cells."""

    cells: tuple[TableCell, ...]
    is_header: bool = False


@dataclass(frozen=True, slots=True)
class Table(Node):
    """GFM pipe table.

    Markdown:
        | A | B |
        |---|:-:|
        | 1 | 2 |

    """

    head: TableRow
    body: tuple[TableRow, ...]
    alignments: tuple[Alignment, ...]

    @property
    def columns(self) -> int:
        return len(self.alignments)


@dataclass(frozen=True, slots=True)
class Document(Node):
    """Root node holding the top-level blocks."""

    children: tuple[Block, ...]


Block: TypeAlias = (
    Document
    | Heading
    | Paragraph
    | FencedCode
    | IndentedCode
    | BlockQuote
    | List
    | ListItem
    | ThematicBreak
    | HtmlBlock
    | Table
)
