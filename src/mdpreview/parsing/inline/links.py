"""Link, image, autolink and raw HTML parsing for mdpreview.

Link text is parsed recursively with links disabled, so a link never
contains another link. Bracket pairs are matched once per inline run (see
InlineParsingCoreMixin._scan_brackets), which keeps documents full of
unbalanced brackets linear.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from mdpreview.nodes import CodeSpan, Emphasis, HtmlInline, Image, Inline, Link, Strikethrough, Strong, Text
from mdpreview.parsing.lines import (
    ASCII_PUNCTUATION,
    CLOSING_TAG,
    OPEN_TAG,
    normalize_label,
    unescape_string,
)

if TYPE_CHECKING:
    from mdpreview.location import SourceLocation

_URI_AUTOLINK = re.compile(r"<([A-Za-z][A-Za-z0-9+.-]{1,31}:[^<>\x00-\x20]*)>")
_EMAIL_AUTOLINK = re.compile(
    r"<([a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*)>"
)
_HTML_INLINE = re.compile(
    rf"{OPEN_TAG}|{CLOSING_TAG}"
    r"|<!-->|<!--->|<!--.*?-->"
    r"|<\?.*?\?>"
    r"|<![A-Za-z][^>]*>"
    r"|<!\[CDATA\[.*?\]\]>",
    re.DOTALL,
)
_BARE_URL = re.compile(r"(?<![A-Za-z0-9/@.:_-])(?:https?://|www\.)[^\s<>]+", re.IGNORECASE)
_URL_TRAILING = frozenset("?!.,:*_~'\";")

# Nested parentheses allowed in an unbracketed destination
_MAX_PAREN_DEPTH = 32
_MAX_LABEL_LENGTH = 999


def _skip_whitespace(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in " \t\n":
        pos += 1
    return pos


def _trim_url(url: str) -> str:
    """Drop trailing punctuation that belongs to the sentence, not the URL."""
    while url:
        last = url[-1]
        if last in _URL_TRAILING:
            url = url[:-1]
        elif last == ")" and url.count("(") < url.count(")"):
            url = url[:-1]
        else:
            break
    return url


def plain_text(nodes: tuple[Inline, ...]) -> str:
    """Flatten inline nodes to their visible text (used for image alt)."""
    parts: list[str] = []
    stack = list(reversed(nodes))
    while stack:
        node = stack.pop()
        match node:
            case Text(content=content):
                parts.append(content)
            case CodeSpan(code=code):
                parts.append(code)
            case Image(alt=alt):
                parts.append(alt)
            case (
                Emphasis(children=children)
                | Strong(children=children)
                | Strikethrough(children=children)
                | Link(children=children)
            ):
                stack.extend(reversed(children))
            case HtmlInline():
                pass
            case _:
                parts.append(" ")
    return "".join(parts)


class LinkParsingMixin:
    """Mixin for links, images, autolinks and raw inline HTML.

    Required Host Attributes:
        - _link_refs: dict[str, tuple[str, str | None]]

    Required Host Methods:
        - _parse_inline(text, location, depth, in_link) -> tuple[Inline, ...]

    """

    def _try_parse_link(
        self,
        text: str,
        pos: int,
        location: SourceLocation,
        brackets: dict[int, int],
        depth: int,
    ) -> tuple[Link, int] | None:
        """Try to parse ``[text](url "title")`` or a reference link at ``pos``.

        Returns:
            (Link, end position) or None
        """
        close = brackets.get(pos)
        if close is None:
            return None
        target = self._parse_link_target(text, pos, close)
        if target is None:
            return None
        url, title, end = target
        children = self._parse_inline(text[pos + 1 : close], location, depth + 1, in_link=True)
        return Link(location=location, url=url, title=title, children=children), end

    def _try_parse_image(
        self,
        text: str,
        pos: int,
        location: SourceLocation,
        brackets: dict[int, int],
        depth: int,
    ) -> tuple[Image, int] | None:
        """Try to parse ``![alt](src "title")`` at ``pos`` (the ``!``)."""
        close = brackets.get(pos + 1)
        if close is None:
            return None
        target = self._parse_link_target(text, pos + 1, close)
        if target is None:
            return None
        url, title, end = target
        alt = self._parse_inline(text[pos + 2 : close], location, depth + 1)
        return Image(location=location, url=url, alt=plain_text(alt), title=title), end

    def _parse_link_target(
        self, text: str, open_pos: int, close: int
    ) -> tuple[str, str | None, int] | None:
        """Resolve what follows ``]``: inline destination, full, collapsed or
        shortcut reference.

        Returns:
            (url, title, end position) or None
        """
        after = close + 1
        if text.startswith("(", after):
            inline = self._parse_inline_destination(text, after + 1)
            if inline is not None:
                return inline

        if text.startswith("[", after):
            label_end = text.find("]", after + 1, after + 2 + _MAX_LABEL_LENGTH)
            if label_end != -1:
                label = text[after + 1 : label_end]
                if label.strip():
                    ref = self._link_refs.get(normalize_label(label))
                    return (ref[0], ref[1], label_end + 1) if ref else None
                # Collapsed reference: []
                ref = self._link_refs.get(normalize_label(text[open_pos + 1 : close]))
                if ref:
                    return ref[0], ref[1], label_end + 1

        if not self._link_refs:
            return None
        ref = self._link_refs.get(normalize_label(text[open_pos + 1 : close]))
        if ref:
            return ref[0], ref[1], after
        return None

    def _parse_inline_destination(self, text: str, pos: int) -> tuple[str, str | None, int] | None:
        """Parse ``url "title")`` starting just after the opening parenthesis."""
        n = len(text)
        pos = _skip_whitespace(text, pos)
        if pos < n and text[pos] == ")":
            return "", None, pos + 1

        if pos < n and text[pos] == "<":
            end = pos + 1
            while end < n and text[end] not in "<>\n":
                end += 2 if text[end] == "\\" else 1
            if end >= n or text[end] != ">":
                return None
            destination = text[pos + 1 : end]
            pos = end + 1
        else:
            start = pos
            depth = 0
            while pos < n:
                char = text[pos]
                if char == "\\" and pos + 1 < n and text[pos + 1] in ASCII_PUNCTUATION:
                    pos += 2
                    continue
                if char.isspace() or ord(char) < 0x20:
                    break
                if char == "(":
                    depth += 1
                    if depth > _MAX_PAREN_DEPTH:
                        return None
                elif char == ")":
                    if depth == 0:
                        break
                    depth -= 1
                pos += 1
            if depth:
                return None
            destination = text[start:pos]

        gap_start = pos
        pos = _skip_whitespace(text, pos)
        title: str | None = None
        if pos < n and pos > gap_start and text[pos] in "\"'(":
            closer = ")" if text[pos] == "(" else text[pos]
            end = pos + 1
            while end < n and text[end] != closer:
                if closer == ")" and text[end] == "(":
                    return None
                end += 2 if text[end] == "\\" else 1
            if end >= n:
                return None
            title = unescape_string(text[pos + 1 : end])
            pos = _skip_whitespace(text, end + 1)

        if pos >= n or text[pos] != ")":
            return None
        return unescape_string(destination), title, pos + 1

    def _try_parse_autolink(self, text: str, pos: int, location: SourceLocation) -> tuple[Link, int] | None:
        """Try to parse ``<scheme:...>`` or ``<user@example.com>``."""
        m = _URI_AUTOLINK.match(text, pos)
        if m is not None:
            url = m.group(1)
            return Link(location=location, url=url, title=None, children=(Text(location=location, content=url),)), m.end()

        m = _EMAIL_AUTOLINK.match(text, pos)
        if m is not None:
            address = m.group(1)
            return (
                Link(
                    location=location,
                    url=f"mailto:{address}",
                    title=None,
                    children=(Text(location=location, content=address),),
                ),
                m.end(),
            )
        return None

    def _try_parse_html_inline(
        self, text: str, pos: int, location: SourceLocation
    ) -> tuple[HtmlInline, int] | None:
        """Try to parse a raw HTML tag, comment, declaration or CDATA section."""
        m = _HTML_INLINE.match(text, pos)
        if m is None:
            return None
        return HtmlInline(location=location, html=m.group()), m.end()

    def _find_bare_urls(self, text: str) -> list[tuple[int, int, str]]:
        """Locate bare ``http(s)://`` and ``www.`` URLs.

        Returns:
            Sorted (start, end, href) triples; ``www.`` links get ``http://``.
        """
        found: list[tuple[int, int, str]] = []
        for m in _BARE_URL.finditer(text):
            raw = m.group()
            prefix_length = 4 if raw[:4].lower() == "www." else raw.index("//") + 2
            url = _trim_url(raw)
            if len(url) <= prefix_length:
                continue
            href = f"http://{url}" if prefix_length == 4 else url
            found.append((m.start(), m.start() + len(url), href))
        return found
