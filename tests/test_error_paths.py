"""Error-path and malformed input tests.

The pipeline must render every string: deep nesting, unbalanced markup and
odd characters degrade to literal text instead of raising.
"""

import logging

import pytest

from mdpreview import Markdown, RenderConfig, parse, render, render_config_context, to_html
from mdpreview.errors import ConfigError, HighlightError, PreviewError

# =========================================================================
# Exception hierarchy
# =========================================================================


class TestErrors:
    def test_config_error_format(self) -> None:
        err = ConfigError("max_nesting", "must be >= 1, got 0")
        assert str(err) == "Invalid config 'max_nesting': must be >= 1, got 0"
        assert err.field == "max_nesting"
        assert isinstance(err, PreviewError)

    def test_highlight_error_format(self) -> None:
        err = HighlightError("python", "lexer crashed")
        assert "python" in str(err)
        assert "lexer crashed" in str(err)
        assert err.language == "python"
        assert isinstance(err, PreviewError)

    def test_highlight_error_without_language(self) -> None:
        assert "plaintext" in str(HighlightError(None, "x"))


# =========================================================================
# Deep nesting
# =========================================================================


class TestDeepNesting:
    @pytest.mark.parametrize("depth", [50, 100])
    def test_nested_block_quotes_keep_every_level(self, depth: int) -> None:
        html = render("> " * depth + "deep")
        assert html.count("<blockquote>") == depth
        assert html.count("</blockquote>") == depth
        assert "deep" in html

    @pytest.mark.parametrize("depth", [50, 100])
    def test_nested_lists_keep_every_level(self, depth: int) -> None:
        source = "\n".join("  " * i + "- item" for i in range(depth))
        html = render(source)
        assert html.count("<ul>") == depth
        assert html.count("item") == depth

    def test_nested_emphasis_keeps_every_level(self) -> None:
        html = to_html("*" * 100 + "a" + "*" * 100)
        assert html.count("<strong>") == 50
        assert html.count("</strong>") == 50

    def test_quotes_past_default_limit(self) -> None:
        html = to_html(">" * 200 + " deep")
        assert html.count("<blockquote>") == RenderConfig().max_nesting
        assert "deep" in html

    def test_lists_past_default_limit(self) -> None:
        source = "\n".join("  " * i + "- item" for i in range(200))
        html = render(source)
        assert html.count("<ul>") == RenderConfig().max_nesting
        assert html.count("item") == 200

    def test_emphasis_past_default_limit(self) -> None:
        html = to_html("*" * 300 + "a" + "*" * 300)
        assert html.count("<strong>") == RenderConfig().max_nesting
        assert html.count("<strong>") == html.count("</strong>")

    def test_containers_and_inlines_share_limit(self) -> None:
        html = to_html("> " * 100 + "*" * 100 + "a" + "*" * 100)
        assert html.count("<blockquote>") == 100
        assert html.count("<strong>") == RenderConfig().max_nesting - 100

    def test_deep_images_inside_deep_quotes(self) -> None:
        source = "> " * 120 + "![" * 200 + "x" + "](/i)" * 200
        assert "<blockquote>" in render(source)

    def test_nested_links(self) -> None:
        source = "[" * 60 + "x" + "](/u)" * 60
        html = render(source)
        assert "x" in html

    def test_nested_images(self) -> None:
        source = "![" * 60 + "x" + "](/i)" * 60
        html = render(source)
        assert "x" in html or "<img" in html

    def test_custom_limit(self) -> None:
        with render_config_context(RenderConfig(max_nesting=3)):
            html = to_html("> > > > > x")
        assert html.count("<blockquote>") == 3
        assert "&gt; &gt; x" in html

    def test_limit_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="mdpreview"):
            to_html(">" * 200 + " x")
        assert any("Nesting limit" in record.getMessage() for record in caplog.records)


# =========================================================================
# Malformed input
# =========================================================================


class TestMalformedInput:
    @pytest.mark.parametrize(
        "source",
        [
            "```",
            "~~~\n",
            "`" * 1000,
            "*" * 1000,
            "_" * 1000,
            "~" * 1000,
            "[" * 1000,
            "]" * 1000,
            "(" * 1000,
            "<" * 1000,
            "<!--" * 500,
            "&" * 1000,
            "|" * 1000,
            "|\n|-|\n" * 100,
            "-\n" * 500,
            "1.\n" * 500,
            ">\n" * 500,
            "#" * 1000,
            "\\" * 1000,
            "\t" * 50 + "x",
            "\x00\x01\x02",
            "\r\n\r\r\n",
            "﻿# bom",
            "a b c",
            "[a]: <",
            "[](",
            "![](",
            "<a href='",
            "\n" * 1000,
        ],
    )
    def test_render_never_raises(self, source: str) -> None:
        assert isinstance(render(source), str)

    def test_nul_replaced(self) -> None:
        assert "�" in render("a\x00b")

    def test_crlf_normalized(self) -> None:
        assert to_html("a\r\nb") == "<p>a<br />\nb</p>\n"

    def test_lone_cr_normalized(self) -> None:
        assert len(parse("# a\r\rb").children) == 2

    def test_unclosed_html_comment_block(self) -> None:
        assert "<h1" not in render("<!-- never closed\n\n# heading")

    def test_unclosed_link_destination(self) -> None:
        assert render("[a](/b") == "<p>[a](/b</p>\n"

    def test_markdown_instance_coerces_input(self) -> None:
        assert Markdown()(None) == ""  # type: ignore[arg-type]
