"""
mdpreview: markdown to safe HTML for live preview panes.

Source text goes through three stages: a parser builds a typed AST, the HTML
renderer walks it (handing fenced code to a syntax highlighter), and an
allowlist sanitizer strips anything that could run script. Only the
sanitized string is meant for display.

Quick Start:
    >>> from mdpreview import render
    >>> render("line one\\nline two")
    '<p>line one<br>\\nline two</p>\\n'

    >>> # Or keep settings together with the Markdown class
    >>> from mdpreview import Markdown, RenderConfig
    >>> md = Markdown(RenderConfig(hard_breaks=False))
    >>> html = md("# Hello **World**")

Lower-level stages:
    >>> doc = parse("# Title")          # AST
    >>> raw = to_html(doc)              # unsanitized HTML, never display this
    >>> safe = sanitize(raw)            # what the preview shows
"""

from __future__ import annotations

from typing import Any

from mdpreview.config import (
    RenderConfig,
    get_render_config,
    render_config_context,
    reset_render_config,
    set_render_config,
)
from mdpreview.errors import ConfigError, HighlightError, PreviewError
from mdpreview.highlighting import (
    Highlighter,
    PygmentsHighlighter,
    SimpleHighlighter,
    get_highlighter,
    highlight,
    set_highlighter,
)
from mdpreview.location import SourceLocation
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
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
)
from mdpreview.parser import Parser
from mdpreview.preview import DEFAULT_DOCUMENT, Preview, PreviewSession
from mdpreview.renderers.html import HtmlRenderer
from mdpreview.sanitize import DEFAULT_POLICY, SanitizePolicy, Sanitizer
from mdpreview.sanitize import sanitize as _sanitize

__version__ = "0.1.0"


def _coerce(source: Any) -> str:
    """None becomes "", other non-strings go through str()."""
    if source is None:
        return ""
    if isinstance(source, str):
        return source
    return str(source)


def _build_document(source: str) -> Document:
    blocks = Parser(source).parse()
    return Document(location=SourceLocation(lineno=1, col_offset=1), children=blocks)


class Markdown:
    """Render pipeline with its settings bound.

    Usage:
        >>> md = Markdown()
        >>> md("Hello <script>alert(1)</script>**World**")
        '<p>Hello <strong>World</strong></p>\\n'

    Thread Safety:
        Instances hold only immutable settings. Config is activated through a
        ContextVar for the duration of each call, so one instance can serve
        many threads.
    """

    __slots__ = ("_config", "_highlighter", "_sanitizer")

    def __init__(
        self,
        config: RenderConfig | None = None,
        *,
        highlighter: Highlighter | SimpleHighlighter | None = None,
        policy: SanitizePolicy | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Render options (default: RenderConfig())
            highlighter: Highlighter for fenced code (default: the global one)
            policy: Sanitizer allowlist (default: DEFAULT_POLICY)
        """
        self._config = config or RenderConfig()
        self._highlighter = highlighter
        self._sanitizer = Sanitizer(policy)

    @property
    def config(self) -> RenderConfig:
        return self._config

    def __call__(self, source: str) -> str:
        """Render markdown to sanitized HTML.

        Args:
            source: Markdown source text

        Returns:
            HTML safe to insert into the preview pane
        """
        return self._sanitizer(self.to_html(source))

    def parse(self, source: str) -> Document:
        """Parse markdown into an AST under this instance's config."""
        with render_config_context(self._config):
            return _build_document(_coerce(source))

    def to_html(self, source: str | Document) -> str:
        """Render markdown (or an already parsed Document) to unsanitized HTML."""
        doc = source if isinstance(source, Document) else self.parse(source)
        renderer = HtmlRenderer(
            hard_breaks=self._config.hard_breaks,
            highlight=self._config.highlight,
            highlighter=self._highlighter,
            heading_ids=self._config.heading_ids,
        )
        return renderer.render(doc)

    def sanitize(self, html: str) -> str:
        """Run this instance's sanitizer over ``html``."""
        return self._sanitizer(html)


def parse(source: str) -> Document:
    """Parse markdown into a typed AST using the active RenderConfig.

    Example:
        >>> parse("# Hello").children[0].level
        1
    """
    return _build_document(_coerce(source))


def to_html(source: str | Document) -> str:
    """Render markdown or a Document to HTML without sanitizing it."""
    doc = source if isinstance(source, Document) else parse(source)
    config = get_render_config()
    renderer = HtmlRenderer(
        hard_breaks=config.hard_breaks,
        highlight=config.highlight,
        heading_ids=config.heading_ids,
    )
    return renderer.render(doc)


def render(source: str) -> str:
    """Render markdown to sanitized HTML, ready for display.

    Never raises for string input.
    """
    return _sanitize(to_html(_coerce(source)))


def sanitize(html: str, policy: SanitizePolicy | None = None) -> str:
    """Sanitize an HTML fragment (see mdpreview.sanitize)."""
    return _sanitize(html, policy)


__all__ = [
    # Pipeline
    "Markdown",
    "parse",
    "to_html",
    "render",
    "sanitize",
    "highlight",
    # Configuration
    "RenderConfig",
    "get_render_config",
    "set_render_config",
    "reset_render_config",
    "render_config_context",
    # Highlighting
    "Highlighter",
    "PygmentsHighlighter",
    "SimpleHighlighter",
    "get_highlighter",
    "set_highlighter",
    # Sanitizing
    "DEFAULT_POLICY",
    "SanitizePolicy",
    "Sanitizer",
    # Preview session
    "DEFAULT_DOCUMENT",
    "Preview",
    "PreviewSession",
    # Errors
    "PreviewError",
    "ConfigError",
    "HighlightError",
    # Parsing and rendering
    "Parser",
    "HtmlRenderer",
    "SourceLocation",
    # AST nodes
    "Block",
    "BlockQuote",
    "CodeSpan",
    "Document",
    "Emphasis",
    "FencedCode",
    "Heading",
    "HtmlBlock",
    "HtmlInline",
    "Image",
    "IndentedCode",
    "Inline",
    "LineBreak",
    "Link",
    "List",
    "ListItem",
    "Paragraph",
    "SoftBreak",
    "Strikethrough",
    "Strong",
    "Table",
    "TableCell",
    "TableRow",
    "Text",
    "ThematicBreak",
    "__version__",
]
