"""Text helpers shared by the parser and renderer.

Example:
    >>> from mdpreview.utils.text import slugify
    >>> slugify("Welcome to my React Markdown Previewer!")
    'welcome-to-my-react-markdown-previewer'
"""

from __future__ import annotations

import html as html_module
import re

_NON_WORD = re.compile(r"[^\w\s-]")
_SEPARATORS = re.compile(r"[-\s]+")


def slugify(text: str, max_length: int | None = None, separator: str = "-") -> str:
    """Convert heading text to an anchor-friendly slug.

    Unicode word characters are kept, so non-English headings still get
    readable ids. HTML entities are decoded first.

    Args:
        text: Text to slugify
        max_length: Maximum slug length (None = unlimited)
        separator: Character placed between words

    Returns:
        Lowercase slug, possibly empty

    Examples:
        >>> slugify("Test &amp; Code")
        'test-code'
        >>> slugify("Café au lait")
        'café-au-lait'
    """
    if not text:
        return ""

    text = html_module.unescape(text).lower().strip()
    text = _NON_WORD.sub("", text)
    text = _SEPARATORS.sub(separator, text).strip(separator)

    if max_length is not None and len(text) > max_length:
        truncated = text[:max_length]
        # Prefer cutting at a word boundary
        if separator in truncated:
            truncated = truncated.rsplit(separator, 1)[0]
        text = truncated

    return text


def escape_html(text: str) -> str:
    """Escape text for use inside an HTML attribute value.

    Escapes &, <, >, " and '.

    Examples:
        >>> escape_html("<a href='x'>")
        '&lt;a href=&#x27;x&#x27;&gt;'
    """
    if not text:
        return ""
    return html_module.escape(text, quote=True)


def escape_text(text: str) -> str:
    """Escape text content for HTML element bodies.

    Escapes &, < and >, plus double quotes so the result is also safe in
    double-quoted attributes. Single quotes are left alone, matching what
    markdown renderers conventionally emit.
    """
    return html_module.escape(text, quote=False).replace('"', "&quot;")
