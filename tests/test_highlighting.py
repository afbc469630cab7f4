"""Tests for syntax highlighting and highlighter injection."""

import html as html_module
import logging
import re

import pytest

from mdpreview.errors import HighlightError
from mdpreview.highlighting import (
    Highlighter,
    PygmentsHighlighter,
    get_highlighter,
    has_highlighter,
    highlight,
    plain,
    set_highlighter,
)


def _visible_text(markup: str) -> str:
    return html_module.unescape(re.sub(r"<[^>]+>", "", markup))


class TestPygmentsHighlighter:
    def test_implements_protocol(self) -> None:
        assert isinstance(PygmentsHighlighter(), Highlighter)

    def test_known_language_gets_token_spans(self) -> None:
        out = highlight("def f():\n    return 1\n", "python")
        assert '<span class="k">def</span>' in out

    def test_visible_text_unchanged(self) -> None:
        code = "if (a < b && c) {\n  return '```';\n}"
        assert _visible_text(highlight(code, "javascript")) == code

    def test_no_trailing_newline_added(self) -> None:
        assert _visible_text(highlight("x = 1", "python")) == "x = 1"

    def test_language_alias(self) -> None:
        assert PygmentsHighlighter().supports_language("js")
        assert PygmentsHighlighter().supports_language("JavaScript")

    def test_unknown_language_is_plain(self) -> None:
        assert highlight("a < b", "nosuchlanguage") == "a &lt; b"

    def test_missing_language_is_plain(self) -> None:
        assert highlight("<b>", None) == "&lt;b&gt;"

    @pytest.mark.parametrize("alias", ["text", "plaintext", "none"])
    def test_plaintext_aliases(self, alias: str) -> None:
        assert not PygmentsHighlighter().supports_language(alias)
        assert highlight("x", alias) == "x"

    def test_class_prefix(self) -> None:
        out = PygmentsHighlighter(classprefix="hl-").highlight("def f(): pass", "python")
        assert 'class="hl-k"' in out


class TestPlain:
    def test_escapes_markup(self) -> None:
        assert plain("<a & b>") == "&lt;a &amp; b&gt;"

    def test_quotes_untouched(self) -> None:
        assert plain("'\"") == "'\""


class TestHighlighterInjection:
    def test_default_is_pygments(self) -> None:
        assert isinstance(get_highlighter(), PygmentsHighlighter)
        assert not has_highlighter()

    def test_callable_highlighter(self) -> None:
        set_highlighter(lambda code, language: f"[{language}]{code}")
        assert has_highlighter()
        assert highlight("x", "py") == "[py]x"

    def test_protocol_highlighter(self) -> None:
        class Upper:
            def highlight(self, code: str, language: str | None) -> str:
                return code.upper()

            def supports_language(self, language: str) -> bool:
                return True

        set_highlighter(Upper())
        assert highlight("abc", "any") == "ABC"

    def test_none_restores_default(self) -> None:
        set_highlighter(lambda code, language: code)
        set_highlighter(None)
        assert not has_highlighter()

    def test_per_call_override(self) -> None:
        assert highlight("x", "py", highlighter=lambda code, language: "override") == "override"
        assert isinstance(get_highlighter(), PygmentsHighlighter)

    def test_renderer_uses_global_highlighter(self) -> None:
        from mdpreview import to_html

        set_highlighter(lambda code, language: "HIGHLIGHTED")
        assert to_html("```py\nx\n```") == '<pre><code class="language-py">HIGHLIGHTED</code></pre>\n'

    def test_highlight_disabled_in_config(self) -> None:
        from mdpreview import RenderConfig, render_config_context, to_html

        set_highlighter(lambda code, language: "HIGHLIGHTED")
        with render_config_context(RenderConfig(highlight=False)):
            assert "HIGHLIGHTED" not in to_html("```py\nx\n```")


class TestHighlightFailures:
    def test_failing_backend_falls_back_to_plain(self) -> None:
        def broken(code: str, language: str | None) -> str:
            raise HighlightError(language, "boom")

        set_highlighter(broken)
        assert highlight("<x>", "py") == "&lt;x&gt;"

    def test_any_exception_falls_back(self) -> None:
        def broken(code: str, language: str | None) -> str:
            raise RuntimeError("boom")

        assert highlight("a", "py", highlighter=broken) == "a"

    def test_failure_is_logged_at_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        def broken(code: str, language: str | None) -> str:
            raise RuntimeError("boom")

        with caplog.at_level(logging.DEBUG, logger="mdpreview"):
            highlight("a", "py", highlighter=broken)
        assert any("py" in record.getMessage() for record in caplog.records)

    def test_render_survives_failing_backend(self) -> None:
        from mdpreview import render

        set_highlighter(lambda code, language: 1 / 0)
        assert render("```py\n<x>\n```") == '<pre><code class="language-py">&lt;x&gt;\n</code></pre>\n'
