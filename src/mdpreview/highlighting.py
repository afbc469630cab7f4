"""Syntax highlighting protocol and injection for mdpreview.

Fenced code blocks are handed to the active highlighter, whose output is
spliced between ``<pre><code>`` and ``</code></pre>`` by the HTML renderer.
Pygments is the default backend.

Usage:
    from mdpreview.highlighting import highlight, set_highlighter

    highlight('print("hi")', "python")
    # '<span class="nb">print</span><span class="p">(</span>...'

    # Swap in a custom backend (a Highlighter or a plain callable)
    set_highlighter(lambda code, language: my_markup(code, language))
"""

from __future__ import annotations

import html
from collections.abc import Callable
from functools import lru_cache
from typing import Protocol, runtime_checkable

from pygments import highlight as pygments_highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from mdpreview.errors import HighlightError
from mdpreview.utils.logger import get_logger

logger = get_logger(__name__)

# Hints that explicitly ask for no highlighting
PLAINTEXT_ALIASES = frozenset({"text", "plain", "plaintext", "txt", "none", "nohighlight"})


@runtime_checkable
class Highlighter(Protocol):
    """Protocol for syntax highlighters.

    Contract:
        - highlight() returns balanced inline markup for a <code> element,
          with HTML entities escaped and the visible text unchanged
        - token categories are expressed with CSS classes, not inline styles
        - supports_language() never raises
    """

    def highlight(self, code: str, language: str | None) -> str:
        """Highlight ``code`` written in ``language``."""
        ...

    def supports_language(self, language: str) -> bool:
        """Return True if ``language`` names a known grammar (aliases allowed)."""
        ...


# Support for simple callable-based highlighters
SimpleHighlighter = Callable[[str, str | None], str]


def plain(code: str) -> str:
    """Plain-text fallback: escape only, no token markers."""
    return html.escape(code, quote=False)


@lru_cache(maxsize=64)
def _lexer_for(language: str) -> Lexer | None:
    """Look up (and cache) a Pygments lexer by name or alias."""
    try:
        return get_lexer_by_name(language, stripnl=False, ensurenl=False)
    except ClassNotFound:
        return None


class PygmentsHighlighter:
    """Pygments-backed highlighter implementing the Highlighter protocol.

    Emits one ``<span class="...">`` per token using Pygments' short class
    names (``k`` keyword, ``s2`` string, ``c1`` comment, ...), so any stock
    Pygments stylesheet colours the preview.
    """

    __slots__ = ("_formatter",)

    def __init__(self, classprefix: str = "") -> None:
        self._formatter = HtmlFormatter(nowrap=True, classprefix=classprefix)

    def supports_language(self, language: str) -> bool:
        if not language or language.lower() in PLAINTEXT_ALIASES:
            return False
        try:
            return _lexer_for(language.lower()) is not None
        except Exception:
            return False

    def highlight(self, code: str, language: str | None) -> str:
        if not language or not self.supports_language(language):
            return plain(code)
        lexer = _lexer_for(language.lower())
        try:
            markup = pygments_highlight(code, lexer, self._formatter)
        except Exception as exc:
            raise HighlightError(language, str(exc)) from exc
        # HtmlFormatter terminates the last line even when the code does not
        if markup.endswith("\n") and not code.endswith("\n"):
            markup = markup[:-1]
        return markup


_DEFAULT_HIGHLIGHTER = PygmentsHighlighter()
_highlighter: Highlighter | SimpleHighlighter = _DEFAULT_HIGHLIGHTER


def set_highlighter(highlighter: Highlighter | SimpleHighlighter | None) -> None:
    """Set the global syntax highlighter.

    Args:
        highlighter: A Highlighter implementation, or a function taking
            (code, language) and returning markup. None restores Pygments.
    """
    global _highlighter
    _highlighter = highlighter if highlighter is not None else _DEFAULT_HIGHLIGHTER


def get_highlighter() -> Highlighter | SimpleHighlighter:
    """Get the active highlighter."""
    return _highlighter


def has_highlighter() -> bool:
    """Check whether a non-default highlighter has been installed."""
    return _highlighter is not _DEFAULT_HIGHLIGHTER


def highlight(
    code: str,
    language: str | None,
    *,
    highlighter: Highlighter | SimpleHighlighter | None = None,
) -> str:
    """Highlight code with the given or global highlighter.

    Never raises: any backend failure is logged and the fragment is returned
    as escaped plain text.

    Args:
        code: Raw code fragment
        language: Language hint from the fence (None when absent)
        highlighter: Override the global highlighter for this call

    Returns:
        Markup safe to embed inside <code>...</code>
    """
    active = highlighter if highlighter is not None else _highlighter
    try:
        if isinstance(active, Highlighter):
            return active.highlight(code, language)
        return active(code, language)
    except Exception:
        logger.debug("Syntax highlighting failed for language %r", language, exc_info=True)
        return plain(code)
