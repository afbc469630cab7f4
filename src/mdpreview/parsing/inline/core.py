"""Core inline parsing for mdpreview.

Provides the inline tokenizer and AST building.

Parsing runs in three steps:
1. Tokenize: scan for special characters, emitting text, finished nodes
   (code spans, links, images, breaks, raw HTML) and delimiter runs.
2. Match: pair delimiter runs (EmphasisMixin._process_emphasis).
3. Build: fold the flat token list into nested nodes with an explicit
   stack. Matches past the nesting limit stay literal text.

Thread Safety:
All methods are stateless or use instance-local state only.
Safe for concurrent use when each parser instance is used by one thread.

"""

from __future__ import annotations

import re
from bisect import bisect_left
from typing import TYPE_CHECKING

from mdpreview.nodes import (
    CodeSpan,
    Emphasis,
    Inline,
    LineBreak,
    Link,
    SoftBreak,
    Strikethrough,
    Strong,
    Text,
)
from mdpreview.parsing.inline.match_registry import MatchRegistry
from mdpreview.parsing.inline.tokens import DelimiterToken, InlineToken, NodeToken, TextToken
from mdpreview.parsing.lines import ASCII_PUNCTUATION, ENTITY, decode_entity

if TYPE_CHECKING:
    from mdpreview.location import SourceLocation

_INLINE_SPECIAL = re.compile(r"[\\`*_~!\[<&\n]")
_BACKTICK_RUN = re.compile(r"`+")


def _run_end(text: str, pos: int) -> int:
    """End of the run of ``text[pos]`` characters starting at ``pos``."""
    char = text[pos]
    end = pos + 1
    while end < len(text) and text[end] == char:
        end += 1
    return end


def _backtick_runs(text: str) -> dict[int, list[int]]:
    """Start offsets of backtick runs, grouped by run length."""
    runs: dict[int, list[int]] = {}
    for m in _BACKTICK_RUN.finditer(text):
        runs.setdefault(m.end() - m.start(), []).append(m.start())
    return runs


def _code_span_close(runs: dict[int, list[int]], after: int, length: int) -> int | None:
    """First backtick run of exactly ``length`` starting at or after ``after``."""
    starts = runs.get(length)
    if not starts:
        return None
    i = bisect_left(starts, after)
    return starts[i] if i < len(starts) else None


def _normalize_code_span(code: str) -> str:
    """Line endings become spaces; one padding space is stripped from each side."""
    code = code.replace("\n", " ")
    if len(code) >= 2 and code[0] == " " and code[-1] == " " and code.strip(" "):
        code = code[1:-1]
    return code


def _finalize(items: list[Inline | str], location: SourceLocation) -> tuple[Inline, ...]:
    """Merge adjacent text fragments into Text nodes."""
    result: list[Inline] = []
    buffer: list[str] = []
    for item in items:
        if isinstance(item, str):
            buffer.append(item)
            continue
        if buffer:
            result.append(Text(location=location, content="".join(buffer)))
            buffer.clear()
        result.append(item)
    if buffer:
        result.append(Text(location=location, content="".join(buffer)))
    return tuple(result)


def _span_node(
    char: str, count: int, children: tuple[Inline, ...], location: SourceLocation
) -> Inline:
    if char == "~":
        return Strikethrough(location=location, children=children)
    if count == 2:
        return Strong(location=location, children=children)
    return Emphasis(location=location, children=children)


class InlineParsingCoreMixin:
    """Core inline parsing methods.

    Required Host Attributes:
        - _collecting: bool
        - _max_nesting: int
        - _strikethrough_enabled: bool
        - _autolinks_enabled: bool
        - _html_enabled: bool

    Required Host Methods (from other mixins):
        - _delimiter_token(text, start, end) -> DelimiterToken
        - _process_emphasis(tokens) -> MatchRegistry
        - _try_parse_link(text, pos, location, brackets, depth) -> tuple | None
        - _try_parse_image(text, pos, location, brackets, depth) -> tuple | None
        - _try_parse_autolink(text, pos, location) -> tuple | None
        - _try_parse_html_inline(text, pos, location) -> tuple | None
        - _find_bare_urls(text) -> list[tuple[int, int, str]]

    """

    def _parse_inline(
        self,
        text: str,
        location: SourceLocation,
        depth: int = 0,
        in_link: bool = False,
    ) -> tuple[Inline, ...]:
        """Parse inline content into nodes.

        Args:
            text: Raw inline source (paragraph, heading or cell content)
            location: Location of the enclosing block
            depth: Inline nesting already open around ``text``
            in_link: True inside link text, where links are not recognized

        """
        if self._collecting or not text:
            return ()
        if depth >= self._max_nesting:
            return (Text(location=location, content=text),)

        tokens = self._tokenize_inline(text, location, depth, in_link)
        registry = self._process_emphasis(tokens)
        return self._build_inline_ast(tokens, registry, location, depth)

    def _scan_brackets(self, text: str, runs: dict[int, list[int]]) -> dict[int, int]:
        """Pair ``[`` with ``]`` in one pass.

        Escaped brackets and brackets inside code spans are skipped, since
        code spans bind tighter than link text.
        """
        brackets: dict[int, int] = {}
        if "[" not in text:
            return brackets

        stack: list[int] = []
        pos = 0
        n = len(text)
        while pos < n:
            char = text[pos]
            if char == "\\":
                pos += 2
                continue
            if char == "`":
                end = _run_end(text, pos)
                close = _code_span_close(runs, end, end - pos)
                pos = close + (end - pos) if close is not None else end
                continue
            if char == "[":
                stack.append(pos)
            elif char == "]" and stack:
                brackets[stack.pop()] = pos
            pos += 1
        return brackets

    def _tokenize_inline(
        self,
        text: str,
        location: SourceLocation,
        depth: int,
        in_link: bool,
    ) -> list[InlineToken]:
        """Tokenize inline content into text, node and delimiter tokens."""
        tokens: list[InlineToken] = []
        runs = _backtick_runs(text) if "`" in text else {}
        brackets = self._scan_brackets(text, runs)
        urls = self._find_bare_urls(text) if self._autolinks_enabled and not in_link else []
        url_starts = [url[0] for url in urls]

        pos = 0
        n = len(text)
        while pos < n:
            m = _INLINE_SPECIAL.search(text, pos)
            stop = m.start() if m else n
            url = None
            if urls:
                i = bisect_left(url_starts, pos)
                if i < len(urls) and urls[i][0] <= stop:
                    url = urls[i]
                    stop = url[0]

            if stop > pos:
                tokens.append(TextToken(text[pos:stop]))
                pos = stop
                if pos >= n:
                    break

            if url is not None:
                start, end, href = url
                link_text = Text(location=location, content=text[start:end])
                tokens.append(NodeToken(Link(location=location, url=href, title=None, children=(link_text,))))
                pos = end
                continue

            char = text[pos]

            if char == "\\":
                following = text[pos + 1 : pos + 2]
                if following == "\n":
                    tokens.append(NodeToken(LineBreak(location=location)))
                    pos = self._skip_line_indent(text, pos + 2)
                elif following and following in ASCII_PUNCTUATION:
                    tokens.append(TextToken(following))
                    pos += 2
                else:
                    tokens.append(TextToken("\\"))
                    pos += 1
                continue

            if char == "`":
                end = _run_end(text, pos)
                length = end - pos
                close = _code_span_close(runs, end, length)
                if close is None:
                    tokens.append(TextToken(text[pos:end]))
                    pos = end
                else:
                    code = _normalize_code_span(text[end:close])
                    tokens.append(NodeToken(CodeSpan(location=location, code=code)))
                    pos = close + length
                continue

            if char in "*_~":
                end = _run_end(text, pos)
                if char == "~" and (not self._strikethrough_enabled or end - pos > 2):
                    tokens.append(TextToken(text[pos:end]))
                else:
                    tokens.append(self._delimiter_token(text, pos, end))
                pos = end
                continue

            if char == "!":
                if text.startswith("[", pos + 1):
                    image = self._try_parse_image(text, pos, location, brackets, depth)
                    if image is not None:
                        tokens.append(NodeToken(image[0]))
                        pos = image[1]
                        continue
                tokens.append(TextToken("!"))
                pos += 1
                continue

            if char == "[":
                if not in_link:
                    link = self._try_parse_link(text, pos, location, brackets, depth)
                    if link is not None:
                        tokens.append(NodeToken(link[0]))
                        pos = link[1]
                        continue
                tokens.append(TextToken("["))
                pos += 1
                continue

            if char == "<":
                result = None
                if not in_link:
                    result = self._try_parse_autolink(text, pos, location)
                if result is None and self._html_enabled:
                    result = self._try_parse_html_inline(text, pos, location)
                if result is not None:
                    tokens.append(NodeToken(result[0]))
                    pos = result[1]
                else:
                    tokens.append(TextToken("<"))
                    pos += 1
                continue

            if char == "&":
                entity = ENTITY.match(text, pos)
                if entity is not None:
                    tokens.append(TextToken(decode_entity(entity.group())))
                    pos = entity.end()
                else:
                    tokens.append(TextToken("&"))
                    pos += 1
                continue

            # Newline
            self._append_line_break(tokens, location)
            pos = self._skip_line_indent(text, pos + 1)

        return tokens

    def _skip_line_indent(self, text: str, pos: int) -> int:
        while pos < len(text) and text[pos] in " \t":
            pos += 1
        return pos

    def _append_line_break(self, tokens: list[InlineToken], location: SourceLocation) -> None:
        """Emit a hard break after two trailing spaces, a soft break otherwise.

        Trailing spaces before the newline are dropped either way.
        """
        hard = False
        if tokens and isinstance(tokens[-1], TextToken):
            content = tokens[-1].content
            stripped = content.rstrip(" ")
            hard = len(content) - len(stripped) >= 2
            if stripped:
                tokens[-1] = TextToken(stripped)
            else:
                tokens.pop()
        node = LineBreak(location=location) if hard else SoftBreak(location=location)
        tokens.append(NodeToken(node))

    def _build_inline_ast(
        self,
        tokens: list[InlineToken],
        registry: MatchRegistry,
        location: SourceLocation,
        depth: int,
    ) -> tuple[Inline, ...]:
        """Fold the token list into nested nodes.

        Matched delimiters open and close frames on an explicit stack, so
        deep emphasis never recurses. A match that would exceed
        ``_max_nesting`` is emitted as its literal delimiter characters.
        """
        root: list[Inline | str] = []
        frames: list[list[Inline | str]] = []
        current = root
        literal: set[int] = set()

        for idx, token in enumerate(tokens):
            match token:
                case TextToken(content=content):
                    current.append(content)
                case NodeToken(node=node):
                    current.append(node)
                case DelimiterToken(char=char, count=count):
                    for match_ in registry.closes.get(idx, ()):
                        if id(match_) in literal:
                            current.append(char * match_.count)
                            continue
                        children = frames.pop()
                        current = frames[-1] if frames else root
                        current.append(
                            _span_node(char, match_.count, _finalize(children, location), location)
                        )

                    leftover = registry.remaining_count(idx, count)
                    if leftover:
                        current.append(char * leftover)

                    for match_ in reversed(registry.opens.get(idx, ())):
                        if depth + len(frames) >= self._max_nesting:
                            literal.add(id(match_))
                            current.append(char * match_.count)
                            continue
                        current = []
                        frames.append(current)

        return _finalize(root, location)
