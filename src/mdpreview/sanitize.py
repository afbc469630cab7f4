"""Allowlist HTML sanitization for rendered previews.

Everything the HTML renderer produces passes through here before display.
bleach parses the fragment with html5lib and rebuilds it from the token
stream, keeping only allowed tags, attributes and URL protocols. Disallowed
tags are stripped (their text is kept) and comments are dropped. Two token
filters run on top of bleach's own:

1. DropElementsFilter removes elements whose content is never safe to show
   (script, style, iframe, ...) together with that content. It works on
   parsed elements, so a ``<script`` inside an attribute value or in text is
   left alone. An unclosed element runs to the end of the input, as it does
   in a browser.
2. LeadingNewlineFilter keeps a newline that starts ``<pre>`` content, which
   the next parse would otherwise swallow.

Cleaning repeats until the markup stops changing, so the output is stable:
sanitize(sanitize(x)) == sanitize(x).

Example:
    >>> from mdpreview.sanitize import sanitize
    >>> sanitize('<p onclick="x()">hi<script>alert(1)</script></p>')
    '<p>hi</p>'
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from dataclasses import dataclass, field
from functools import partial
from typing import Any

from bleach.html5lib_shim import Filter
from bleach.sanitizer import Cleaner

from mdpreview.utils.logger import get_logger

logger = get_logger(__name__)

_HEADINGS = ("h1", "h2", "h3", "h4", "h5", "h6")

# Elements whose first newline is dropped by the HTML parser
_NEWLINE_ELEMENTS = frozenset({"pre", "textarea", "listing"})

# Re-clean passes before falling back to plain text
_MAX_PASSES = 3


class DropElementsFilter(Filter):
    """Remove whole elements, content included, from a bleach token stream.

    The stream comes from a tree walker, so start and end tags are balanced
    and void elements arrive as single EmptyTag tokens.
    """

    def __init__(self, source: Any, dropped: frozenset[str]) -> None:
        super().__init__(source)
        self.dropped = dropped

    def __iter__(self) -> Iterator[dict[str, Any]]:
        inside = 0
        removed = 0
        for token in super().__iter__():
            kind = token["type"]
            if inside:
                if kind == "StartTag":
                    inside += 1
                elif kind == "EndTag":
                    inside -= 1
                continue
            if kind in ("StartTag", "EmptyTag") and token["name"].lower() in self.dropped:
                removed += 1
                if kind == "StartTag":
                    inside = 1
                continue
            yield token

        if removed:
            logger.debug("Dropped %d unsafe element(s)", removed)


class LeadingNewlineFilter(Filter):
    """Double a newline that opens ``<pre>`` content.

    The parser discards one newline right after ``<pre>``, ``<textarea>`` and
    ``<listing>``; emitting an extra one keeps the content intact on re-parse.
    """

    def __iter__(self) -> Iterator[dict[str, Any]]:
        after_start = False
        for token in super().__iter__():
            if (
                after_start
                and token["type"] in ("Characters", "SpaceCharacters")
                and token["data"].startswith("\n")
            ):
                token = {**token, "data": "\n" + token["data"]}
            after_start = token["type"] == "StartTag" and token["name"].lower() in _NEWLINE_ELEMENTS
            yield token


@dataclass(frozen=True, slots=True)
class SanitizePolicy:
    """What survives sanitization.

    Attributes:
        tags: Allowed element names
        attributes: Allowed attribute names per element
        protocols: Allowed URL schemes for href/src (relative URLs always pass)
        dropped_elements: Elements removed together with their content

    """

    tags: frozenset[str]
    attributes: dict[str, frozenset[str]] = field(hash=False)
    protocols: frozenset[str] = frozenset({"http", "https", "mailto"})
    dropped_elements: frozenset[str] = frozenset(
        {
            "script",
            "style",
            "iframe",
            "object",
            "embed",
            "form",
            "noscript",
            "template",
            "textarea",
            "select",
            "frameset",
            "frame",
            "applet",
            "svg",
            "math",
            "base",
            "link",
            "meta",
        }
    )

    def build_cleaner(self) -> Cleaner:
        """Create a bleach Cleaner enforcing this policy.

        Dropped elements are let through bleach's tag check so that they
        parse as real elements; DropElementsFilter then removes them.
        """
        return Cleaner(
            tags=set(self.tags | self.dropped_elements),
            attributes={tag: sorted(names) for tag, names in self.attributes.items()},
            protocols=set(self.protocols),
            strip=True,
            strip_comments=True,
            filters=[partial(DropElementsFilter, dropped=self.dropped_elements), LeadingNewlineFilter],
        )


DEFAULT_POLICY = SanitizePolicy(
    tags=frozenset(
        {
            *_HEADINGS,
            "p",
            "br",
            "hr",
            "em",
            "strong",
            "b",
            "i",
            "del",
            "s",
            "code",
            "pre",
            "kbd",
            "sup",
            "sub",
            "blockquote",
            "ul",
            "ol",
            "li",
            "table",
            "thead",
            "tbody",
            "tr",
            "th",
            "td",
            "a",
            "img",
            "span",
            "div",
        }
    ),
    attributes={
        "a": frozenset({"href", "title"}),
        "img": frozenset({"src", "alt", "title"}),
        **{heading: frozenset({"id"}) for heading in _HEADINGS},
        "ol": frozenset({"start"}),
        "th": frozenset({"align"}),
        "td": frozenset({"align"}),
        "code": frozenset({"class"}),
        "pre": frozenset({"class"}),
        "span": frozenset({"class"}),
        "div": frozenset({"class"}),
    },
)


class Sanitizer:
    """Reusable sanitizer bound to one policy.

    bleach Cleaner objects are not safe to share between threads, so each
    thread lazily builds its own.

    Usage:
        >>> strict = Sanitizer(SanitizePolicy(tags=frozenset({"p"}), attributes={}))
        >>> strict('<p><a href="https://x.org">x</a></p>')
        '<p>x</p>'
    """

    __slots__ = ("_policy", "_local")

    def __init__(self, policy: SanitizePolicy | None = None) -> None:
        self._policy = policy or DEFAULT_POLICY
        self._local = threading.local()

    @property
    def policy(self) -> SanitizePolicy:
        return self._policy

    def _cleaner(self) -> Cleaner:
        cleaner = getattr(self._local, "cleaner", None)
        if cleaner is None:
            cleaner = self._policy.build_cleaner()
            self._local.cleaner = cleaner
        return cleaner

    def _text_cleaner(self) -> Cleaner:
        cleaner = getattr(self._local, "text_cleaner", None)
        if cleaner is None:
            cleaner = Cleaner(tags=set(), attributes={}, strip=True, strip_comments=True)
            self._local.text_cleaner = cleaner
        return cleaner

    def __call__(self, html: str) -> str:
        """Sanitize an HTML fragment.

        Misnested markup can be rearranged differently by each HTML parse,
        so the cleaner runs until its output stops changing. Markup that
        has not settled after a few passes is reduced to its text.

        Args:
            html: Untrusted HTML (None is treated as empty)

        Returns:
            HTML containing only allowed tags, attributes and URL schemes
        """
        if html is None:
            return ""
        if not isinstance(html, str):
            html = str(html)
        if not html:
            return ""

        cleaner = self._cleaner()
        cleaned = cleaner.clean(html)
        for _ in range(_MAX_PASSES):
            again = cleaner.clean(cleaned)
            if again == cleaned:
                return cleaned
            cleaned = again

        logger.debug("Markup still changing after %d passes; keeping its text only", _MAX_PASSES + 1)
        return self._text_cleaner().clean(cleaned)


_DEFAULT_SANITIZER = Sanitizer()


def sanitize(html: str, policy: SanitizePolicy | None = None) -> str:
    """Sanitize an HTML fragment with ``policy`` (default: DEFAULT_POLICY).

    Example:
        >>> sanitize('<a href="javascript:alert(1)">x</a>')
        '<a>x</a>'
    """
    if policy is None or policy is DEFAULT_POLICY:
        return _DEFAULT_SANITIZER(html)
    return Sanitizer(policy)(html)


__all__ = [
    "DEFAULT_POLICY",
    "DropElementsFilter",
    "LeadingNewlineFilter",
    "SanitizePolicy",
    "Sanitizer",
    "sanitize",
]
