"""Property-based tests for the render pipeline using Hypothesis.

These tests verify invariants that should hold for any input string:
1. render() never raises and always returns a string
2. Rendered output is a fixed point of sanitize()
3. Rendered output contains only allowlisted tags, attributes and URL schemes
4. A single newline between words always becomes a line break
5. Highlighting never changes the visible text of a code fragment
"""

import html as html_module
import re

from hypothesis import given, settings
from hypothesis import strategies as st

from mdpreview import render, sanitize
from mdpreview.highlighting import highlight
from mdpreview.sanitize import DEFAULT_POLICY

# Fragments that exercise every block and inline construct, plus hostile HTML
FRAGMENTS = [
    "# ",
    "## ",
    "> ",
    "- ",
    "1. ",
    "  ",
    "    ",
    "\n",
    "\n\n",
    "```",
    "~~~",
    "```python\n",
    "| a | b |\n|---|:-:|\n",
    "| ",
    "---",
    "***",
    "*",
    "**",
    "_",
    "~~",
    "`",
    "[",
    "]",
    "](",
    ")",
    "![",
    "[x]: /u",
    "<",
    ">",
    "&",
    "&amp;",
    "&#0;",
    "\\",
    '"',
    "'",
    "word",
    "http://x.org",
    "www.x.org",
    "javascript:alert(1)",
    "<script>",
    "</script>",
    "<img src=x onerror=alert(1)>",
    '<a href="javascript:x">',
    "<!--",
    "-->",
    "<div>",
    "<svg onload=x>",
    "<iframe>",
    "\t",
]

markdownish = st.lists(st.sampled_from(FRAGMENTS), max_size=40).map("".join)
any_text = st.one_of(st.text(max_size=300), markdownish)

_TAG = re.compile(r"<\s*/?\s*([A-Za-z][A-Za-z0-9-]*)([^>]*)>")
_ATTR = re.compile(r"\s([^\s=/>]+)=\"([^\"]*)\"")
_ALLOWED_ATTRIBUTES = frozenset().union(*DEFAULT_POLICY.attributes.values())


def _check_allowlisted(html: str) -> None:
    for name, attrs in _TAG.findall(html):
        assert name.lower() in DEFAULT_POLICY.tags, name
        for attr, value in _ATTR.findall(attrs):
            assert attr.lower() in _ALLOWED_ATTRIBUTES, attr
            if attr.lower() in ("href", "src"):
                scheme = html_module.unescape(value).strip().lower()
                assert not scheme.startswith(("javascript:", "vbscript:", "data:")), value


class TestRenderProperties:
    """Invariants of render() over arbitrary input."""

    @given(source=any_text)
    @settings(max_examples=200, deadline=None)
    def test_render_is_total(self, source: str) -> None:
        assert isinstance(render(source), str)

    @given(source=any_text)
    @settings(max_examples=200, deadline=None)
    def test_render_is_sanitize_fixed_point(self, source: str) -> None:
        rendered = render(source)
        assert sanitize(rendered) == rendered

    @given(source=any_text)
    @settings(max_examples=200, deadline=None)
    def test_output_is_allowlisted(self, source: str) -> None:
        _check_allowlisted(render(source))

    @given(source=any_text)
    @settings(max_examples=100, deadline=None)
    def test_render_is_deterministic(self, source: str) -> None:
        assert render(source) == render(source)


class TestLineBreakProperty:
    @given(
        first=st.from_regex(r"[a-z]{1,12}", fullmatch=True),
        second=st.from_regex(r"[a-z]{1,12}", fullmatch=True),
    )
    @settings(max_examples=50)
    def test_newline_becomes_br(self, first: str, second: str) -> None:
        assert render(f"{first}\n{second}") == f"<p>{first}<br>\n{second}</p>\n"


class TestHighlightProperties:
    code_text = st.text(
        alphabet=st.characters(min_codepoint=0x20, max_codepoint=0x7E) | st.sampled_from("\n\t"),
        max_size=200,
    )

    @given(code=code_text)
    @settings(max_examples=100, deadline=None)
    def test_unknown_language_is_plain_text(self, code: str) -> None:
        assert highlight(code, "no-such-language") == html_module.escape(code, quote=False)

    @given(code=code_text, language=st.sampled_from(["python", "javascript", "html", "bash"]))
    @settings(max_examples=100, deadline=None)
    def test_highlight_keeps_visible_text(self, code: str, language: str) -> None:
        markup = highlight(code, language)
        assert html_module.unescape(re.sub(r"<[^>]*>", "", markup)) == code
