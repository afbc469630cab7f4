"""Tests for the high-level mdpreview API."""


class TestRenderFunction:
    """Tests for render(): markdown in, display-safe HTML out."""

    def test_render_heading(self) -> None:
        from mdpreview import render

        assert '<h1 id="hello-world">Hello World</h1>' in render("# Hello World")

    def test_single_newline_becomes_line_break(self) -> None:
        from mdpreview import render

        html = render("line one\nline two")
        assert html.startswith("<p>line one<br")
        assert html.count("<br") == 1
        assert "line two</p>" in html

    def test_link_href_survives(self) -> None:
        from mdpreview import render

        html = render("[fcc](https://www.freecodecamp.org)")
        assert '<a href="https://www.freecodecamp.org">fcc</a>' in html

    def test_script_is_removed(self) -> None:
        from mdpreview import render

        html = render("Hello <script>alert(1)</script>**World**")
        assert html == "<p>Hello <strong>World</strong></p>\n"

    def test_empty_source(self) -> None:
        from mdpreview import render

        assert render("") == ""

    def test_none_is_treated_as_empty(self) -> None:
        from mdpreview import render

        assert render(None) == ""  # type: ignore[arg-type]

    def test_non_string_is_coerced(self) -> None:
        from mdpreview import render

        assert render(42) == "<p>42</p>\n"  # type: ignore[arg-type]


class TestParseFunction:
    """Tests for parse()."""

    def test_parse_heading(self) -> None:
        from mdpreview import Heading, parse

        doc = parse("# Hello World")
        assert len(doc.children) == 1
        assert isinstance(doc.children[0], Heading)
        assert doc.children[0].level == 1

    def test_parse_paragraph(self) -> None:
        from mdpreview import Paragraph, parse

        doc = parse("Hello World")
        assert isinstance(doc.children[0], Paragraph)

    def test_document_location(self) -> None:
        from mdpreview import parse

        doc = parse("text")
        assert doc.location.lineno == 1

    def test_block_locations(self) -> None:
        from mdpreview import parse

        doc = parse("# Title\n\nparagraph\n\n> quote")
        assert [block.location.lineno for block in doc.children] == [1, 3, 5]

    def test_nested_locations_map_to_document_lines(self) -> None:
        from mdpreview import BlockQuote, parse

        doc = parse("intro\n\n> first\n>\n> second")
        quote = doc.children[1]
        assert isinstance(quote, BlockQuote)
        assert [child.location.lineno for child in quote.children] == [3, 5]

    def test_locations_through_two_containers(self) -> None:
        from mdpreview import List, parse

        doc = parse("- a\n\n  > b")
        lst = doc.children[0]
        assert isinstance(lst, List)
        item = lst.items[0]
        assert [child.location.lineno for child in item.children] == [1, 3]
        assert item.children[1].children[0].location.lineno == 3


class TestToHtml:
    """Tests for to_html(), the unsanitized stage."""

    def test_accepts_source(self) -> None:
        from mdpreview import to_html

        assert to_html("# Hello **World**") == '<h1 id="hello-world">Hello <strong>World</strong></h1>\n'

    def test_accepts_document(self) -> None:
        from mdpreview import parse, to_html

        assert to_html(parse("*hi*")) == "<p><em>hi</em></p>\n"

    def test_raw_html_is_kept_before_sanitizing(self) -> None:
        from mdpreview import sanitize, to_html

        raw = to_html("<div onclick=\"x()\">hi</div>")
        assert "onclick" in raw
        assert "onclick" not in sanitize(raw)

    def test_uses_active_config(self) -> None:
        from mdpreview import RenderConfig, render_config_context, to_html

        with render_config_context(RenderConfig(hard_breaks=False)):
            assert to_html("a\nb") == "<p>a\nb</p>\n"


class TestMarkdownClass:
    """Tests for the Markdown pipeline class."""

    def test_call_renders_safe_html(self) -> None:
        from mdpreview import Markdown

        md = Markdown()
        html = md('# Hi\n\n<img src="x" onerror="alert(1)">')
        assert '<h1 id="hi">Hi</h1>' in html
        assert "onerror" not in html

    def test_config_is_applied(self) -> None:
        from mdpreview import Markdown, RenderConfig

        md = Markdown(RenderConfig(hard_breaks=False))
        assert md("a\nb") == "<p>a\nb</p>\n"
        assert md.config.hard_breaks is False

    def test_config_does_not_leak(self) -> None:
        from mdpreview import Markdown, RenderConfig, get_render_config

        Markdown(RenderConfig(tables_enabled=False)).parse("| a |\n|---|")
        assert get_render_config().tables_enabled is True

    def test_parse_returns_document(self) -> None:
        from mdpreview import Document, Markdown

        assert isinstance(Markdown().parse("text"), Document)

    def test_to_html_is_unsanitized(self) -> None:
        from mdpreview import Markdown

        assert "<script>" in Markdown().to_html("<script>x</script>")

    def test_custom_highlighter(self) -> None:
        from mdpreview import Markdown

        md = Markdown(highlighter=lambda code, language: f"<span class=\"hl\">{code.strip()}</span>")
        html = md("```py\nx\n```")
        assert '<span class="hl">x</span>' in html

    def test_custom_policy(self) -> None:
        from mdpreview import Markdown, SanitizePolicy

        md = Markdown(policy=SanitizePolicy(tags=frozenset({"p"}), attributes={}))
        assert md("**bold** [x](https://x.org)") == "<p>bold x</p>\n"

    def test_sanitize_method(self) -> None:
        from mdpreview import Markdown

        assert Markdown().sanitize("<b onclick=\"x\">b</b>") == "<b>b</b>"


class TestDefaultDocument:
    """The start-up sample renders end to end."""

    def test_renders_every_construct(self) -> None:
        from mdpreview import DEFAULT_DOCUMENT, render

        html = render(DEFAULT_DOCUMENT)
        assert '<h1 id="welcome-to-my-react-markdown-previewer">' in html
        assert "<h2" in html
        assert "<h3" in html
        assert "<code>&lt;span style=" in html
        assert 'class="language-javascript"' in html
        assert "<strong>bold</strong>" in html
        assert "<em>italic</em>" in html
        assert "<strong><em>both!</em></strong>" in html
        assert "<del>crossing stuff out</del>" in html
        assert '<a href="https://www.freecodecamp.org">links</a>' in html
        assert "<blockquote>" in html
        assert html.count("<th>") == 3
        assert html.count("<td>") == 6
        assert html.count("<ul>") == 4
        assert html.count("<ol>") == 1
        assert html.count("<li>") == 7
        assert '<img src="https://cdn.freecodecamp.org/testable-projects-fcc/images/fcc_secondary.svg"' in html
        assert 'alt="freeCodeCamp Logo"' in html

    def test_highlighted_code_keeps_its_text(self) -> None:
        import html as html_module
        import re

        from mdpreview import DEFAULT_DOCUMENT, render

        html = render(DEFAULT_DOCUMENT)
        block = re.search(r'<code class="language-javascript">(.*?)</code>', html, re.DOTALL)
        assert block is not None
        text = html_module.unescape(re.sub(r"<[^>]+>", "", block.group(1)))
        assert "function anotherExample(firstLine, lastLine) {" in text
        assert "if (firstLine === '```' && lastLine === '```') {" in text
        assert '<span class="' in block.group(1)


class TestVersion:
    def test_version_string(self) -> None:
        import mdpreview

        assert isinstance(mdpreview.__version__, str)
        assert mdpreview.__version__.count(".") == 2
