"""HTML renderer for the mdpreview AST.

Renders typed AST to an HTML fragment in a single walk. The output is not
yet safe to display: raw HTML nodes pass through verbatim and link targets
are not filtered. mdpreview.sanitize is the step that makes it safe.

Thread Safety:
All per-render state is encapsulated in RenderContext, created fresh for each
render() call. Multiple threads can safely share a single HtmlRenderer instance
and call render() concurrently without synchronization.

Single-Pass Heading Decoration:
Heading IDs are generated during the AST walk and heading data is collected
for tables of contents, with no post-processing of the output.
"""

import html
from collections.abc import Callable
from dataclasses import dataclass, field
from urllib.parse import quote as url_quote

from mdpreview.highlighting import Highlighter, SimpleHighlighter, highlight
from mdpreview.nodes import (
    Block,
    BlockQuote,
    CodeSpan,
    Document,
    Emphasis,
    FencedCode,
    Heading,
    HtmlBlock,
    HtmlInline,
    Image,
    IndentedCode,
    Inline,
    LineBreak,
    Link,
    List,
    ListItem,
    Paragraph,
    SoftBreak,
    Strikethrough,
    Strong,
    Table,
    TableRow,
    Text,
    ThematicBreak,
)
from mdpreview.utils.logger import get_logger
from mdpreview.utils.text import escape_text as html_escape
from mdpreview.utils.text import slugify as default_slugify

logger = get_logger(__name__)


def _encode_url(url: str) -> str:
    """Percent-encode a link destination.

    Entities are decoded first; spaces, backslashes and non-ASCII characters
    are encoded while existing %XX sequences are kept. The result still needs
    html_escape for quotes.
    """
    decoded = html.unescape(url)
    return url_quote(decoded, safe="/:?#[]@!$&'()*+,;=-_.~%")


@dataclass(frozen=True, slots=True)
class HeadingInfo:
    """Heading metadata collected during rendering (for tables of contents)."""

    level: int
    text: str
    slug: str


@dataclass(slots=True)
class RenderContext:
    """Per-render mutable state.

    Created fresh for each render() call, so HtmlRenderer instances can be
    shared across threads.
    """

    headings: list[HeadingInfo] = field(default_factory=list)
    seen_slugs: set[str] = field(default_factory=set)


class HtmlRenderer:
    """Render AST to HTML.

    Usage:
        >>> from mdpreview import parse
        >>> renderer = HtmlRenderer()
        >>> renderer.render(parse("# Hello **World**"))
        '<h1 id="hello-world">Hello <strong>World</strong></h1>\\n'

    Thread Safety:
        Multiple threads can safely share a single HtmlRenderer instance.
        Each render() call creates an independent RenderContext.
    """

    __slots__ = (
        "_hard_breaks",
        "_highlight",
        "_highlighter",
        "_heading_ids",
        "_slugify",
        "_last_context",
    )

    def __init__(
        self,
        *,
        hard_breaks: bool = True,
        highlight: bool = True,
        highlighter: Highlighter | SimpleHighlighter | None = None,
        heading_ids: bool = True,
        slugify: Callable[[str], str] | None = None,
    ) -> None:
        """Initialize renderer.

        Args:
            hard_breaks: Render soft breaks (single newlines) as <br />
            highlight: Syntax-highlight fenced code blocks
            highlighter: Highlighter for this renderer (default: the global one)
            heading_ids: Emit id attributes on headings
            slugify: Optional custom slugify function for heading IDs
        """
        self._hard_breaks = hard_breaks
        self._highlight = highlight
        self._highlighter = highlighter
        self._heading_ids = heading_ids
        self._slugify = slugify or default_slugify
        self._last_context: RenderContext | None = None

    def render(self, node: Document) -> str:
        """Render document AST to an HTML string.

        Args:
            node: Document AST root

        Returns:
            HTML string (unsanitized)
        """
        ctx = RenderContext()
        out: list[str] = []
        for child in node.children:
            self._render_block(child, out, ctx)

        # Store context for get_headings() (note: not thread-safe for get_headings)
        self._last_context = ctx
        return "".join(out)

    def get_headings(self) -> list[HeadingInfo]:
        """Get heading info collected during the last render.

        Returns:
            List of HeadingInfo; empty if render() hasn't been called.
        """
        if self._last_context is None:
            return []
        return self._last_context.headings.copy()

    # =========================================================================
    # Block rendering
    # =========================================================================

    def _render_block(self, block: Block, out: list[str], ctx: RenderContext) -> None:
        """Render a block node."""
        match block:
            case Heading():
                self._render_heading(block, out, ctx)
            case Paragraph():
                out.append("<p>")
                self._render_inlines(block.children, out, ctx)
                out.append("</p>\n")
            case FencedCode():
                self._render_fenced_code(block, out)
            case IndentedCode():
                out.append(f"<pre><code>{html_escape(block.code)}</code></pre>\n")
            case BlockQuote():
                out.append("<blockquote>\n")
                for child in block.children:
                    self._render_block(child, out, ctx)
                out.append("</blockquote>\n")
            case List():
                self._render_list(block, out, ctx)
            case ThematicBreak():
                out.append("<hr />\n")
            case HtmlBlock():
                out.append(block.html.rstrip("\n"))
                out.append("\n")
            case Table():
                self._render_table(block, out, ctx)
            case Document():
                for child in block.children:
                    self._render_block(child, out, ctx)
            case ListItem():
                self._render_list_item(block, out, ctx, tight=True)

    def _render_heading(self, heading: Heading, out: list[str], ctx: RenderContext) -> None:
        """Render heading, with a unique slug id unless heading ids are off."""
        level = heading.level
        if not self._heading_ids:
            out.append(f"<h{level}>")
            self._render_inlines(heading.children, out, ctx)
            out.append(f"</h{level}>\n")
            return

        text = self._extract_text(heading.children)
        slug = self._slugify(text) or "section"

        original_slug = slug
        counter = 1
        while slug in ctx.seen_slugs:
            slug = f"{original_slug}-{counter}"
            counter += 1
        ctx.seen_slugs.add(slug)
        ctx.headings.append(HeadingInfo(level=level, text=text, slug=slug))

        out.append(f'<h{level} id="{html_escape(slug)}">')
        self._render_inlines(heading.children, out, ctx)
        out.append(f"</h{level}>\n")

    def _render_fenced_code(self, code: FencedCode, out: list[str]) -> None:
        """Render fenced code block, highlighted when a language is given."""
        lang = code.language
        lang_class = f' class="language-{html_escape(lang)}"' if lang else ""

        if self._highlight and lang:
            body = highlight(code.code, lang, highlighter=self._highlighter)
        else:
            body = html_escape(code.code)

        out.append(f"<pre><code{lang_class}>{body}</code></pre>\n")

    def _render_list(self, lst: List, out: list[str], ctx: RenderContext) -> None:
        """Render ordered or unordered list."""
        if lst.ordered:
            start_attr = f' start="{lst.start}"' if lst.start != 1 else ""
            out.append(f"<ol{start_attr}>\n")
        else:
            out.append("<ul>\n")

        for item in lst.items:
            self._render_list_item(item, out, ctx, lst.tight)

        out.append("</ol>\n" if lst.ordered else "</ul>\n")

    def _render_list_item(
        self, item: ListItem, out: list[str], ctx: RenderContext, tight: bool
    ) -> None:
        """Render list item.

        Tight lists render their paragraphs as bare text; loose lists wrap
        every paragraph in <p>.
        """
        out.append("<li>")
        if not item.children:
            pass
        elif tight:
            for i, child in enumerate(item.children):
                if isinstance(child, Paragraph):
                    if i > 0 and not out[-1].endswith("\n"):
                        out.append("\n")
                    self._render_inlines(child.children, out, ctx)
                else:
                    if not out[-1].endswith("\n"):
                        out.append("\n")
                    self._render_block(child, out, ctx)
        else:
            out.append("\n")
            for child in item.children:
                self._render_block(child, out, ctx)
        out.append("</li>\n")

    def _render_table(self, table: Table, out: list[str], ctx: RenderContext) -> None:
        """Render GFM table."""
        out.append("<table>\n<thead>\n")
        self._render_table_row(table.head, out, ctx, "th")
        out.append("</thead>\n")

        if table.body:
            out.append("<tbody>\n")
            for row in table.body:
                self._render_table_row(row, out, ctx, "td")
            out.append("</tbody>\n")

        out.append("</table>\n")

    def _render_table_row(self, row: TableRow, out: list[str], ctx: RenderContext, tag: str) -> None:
        out.append("<tr>\n")
        for cell in row.cells:
            align = f' align="{cell.align}"' if cell.align else ""
            out.append(f"<{tag}{align}>")
            self._render_inlines(cell.children, out, ctx)
            out.append(f"</{tag}>\n")
        out.append("</tr>\n")

    # =========================================================================
    # Inline rendering
    # =========================================================================

    def _render_inlines(
        self, inlines: tuple[Inline, ...], out: list[str], ctx: RenderContext
    ) -> None:
        """Render a sequence of inline nodes."""
        for inline in inlines:
            self._render_inline(inline, out, ctx)

    def _render_inline(self, inline: Inline, out: list[str], ctx: RenderContext) -> None:
        """Render an inline node."""
        match inline:
            case Text():
                out.append(html_escape(inline.content))
            case Emphasis():
                out.append("<em>")
                self._render_inlines(inline.children, out, ctx)
                out.append("</em>")
            case Strong():
                out.append("<strong>")
                self._render_inlines(inline.children, out, ctx)
                out.append("</strong>")
            case Strikethrough():
                out.append("<del>")
                self._render_inlines(inline.children, out, ctx)
                out.append("</del>")
            case Link():
                href = html_escape(_encode_url(inline.url))
                title = f' title="{html_escape(inline.title)}"' if inline.title else ""
                out.append(f'<a href="{href}"{title}>')
                self._render_inlines(inline.children, out, ctx)
                out.append("</a>")
            case Image():
                src = html_escape(_encode_url(inline.url))
                alt = html_escape(inline.alt)
                title = f' title="{html_escape(inline.title)}"' if inline.title else ""
                out.append(f'<img src="{src}" alt="{alt}"{title} />')
            case CodeSpan():
                out.append(f"<code>{html_escape(inline.code)}</code>")
            case LineBreak():
                out.append("<br />\n")
            case SoftBreak():
                out.append("<br />\n" if self._hard_breaks else "\n")
            case HtmlInline():
                out.append(inline.html)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _extract_text(self, inlines: tuple[Inline, ...]) -> str:
        """Extract plain text from inline nodes (for heading slugs)."""
        parts: list[str] = []
        for inline in inlines:
            match inline:
                case Text():
                    parts.append(inline.content)
                case Emphasis() | Strong() | Strikethrough() | Link():
                    parts.append(self._extract_text(inline.children))
                case Image():
                    parts.append(inline.alt)
                case CodeSpan():
                    parts.append(inline.code)
                case LineBreak() | SoftBreak():
                    parts.append(" ")
                case _:
                    pass
        return "".join(parts)
