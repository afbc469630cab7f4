"""Line-level patterns and column arithmetic for block parsing.

All block patterns match against a line with its leading whitespace already
removed (see split_indent), so callers check the indent separately: four
or more columns always means indented code, never a block marker.
"""

import html
import re
import unicodedata
from html.entities import html5 as HTML5_ENTITIES
from typing import NamedTuple

TAB_STOP = 4

ASCII_PUNCTUATION = frozenset("!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~")

ATX_HEADING = re.compile(r"(#{1,6})(?:[ \t]+(.*?))?[ \t]*$")
ATX_CLOSING = re.compile(r"(?:^|[ \t]+)#+[ \t]*$")
THEMATIC_BREAK = re.compile(r"(?:(?:\*[ \t]*){3,}|(?:-[ \t]*){3,}|(?:_[ \t]*){3,})$")
SETEXT_UNDERLINE = re.compile(r"(=+|-+)[ \t]*$")
FENCE_OPEN = re.compile(r"(`{3,}|~{3,})(.*)$")
LIST_MARKER = re.compile(r"(?:([-+*])|(\d{1,9})([.)]))(?=[ \t]|$)")
TABLE_DELIMITER_CELL = re.compile(r":?-+:?$")
LINK_REFERENCE_DEF = re.compile(
    r"\[((?:[^\[\]\\]|\\.){1,999})\]:"
    r"[ \t]*(<[^<>\n]*>|\S+)"
    r"(?:[ \t]+(\"(?:[^\"\\]|\\.)*\"|'(?:[^'\\]|\\.)*'|\((?:[^()\\]|\\.)*\)))?"
    r"[ \t]*$"
)

# Raw HTML block start conditions (CommonMark 4.6). Index = condition number.
_HTML_BLOCK_TAGS = (
    "address|article|aside|base|basefont|blockquote|body|caption|center|col|colgroup|dd|"
    "details|dialog|dir|div|dl|dt|fieldset|figcaption|figure|footer|form|frame|frameset|"
    "h1|h2|h3|h4|h5|h6|head|header|hr|html|iframe|legend|li|link|main|menu|menuitem|nav|"
    "noframes|ol|optgroup|option|p|param|search|section|summary|table|tbody|td|tfoot|th|"
    "thead|title|tr|track|ul"
)
_TAG_NAME = r"[A-Za-z][A-Za-z0-9-]*"
_ATTRIBUTE = (
    r"(?:[ \t\n]+[A-Za-z_:][A-Za-z0-9_.:-]*"
    r"(?:[ \t\n]*=[ \t\n]*(?:[^ \t\n\"'=<>`]+|'[^']*'|\"[^\"]*\"))?)"
)
OPEN_TAG = rf"<{_TAG_NAME}{_ATTRIBUTE}*[ \t\n]*/?>"
CLOSING_TAG = rf"</{_TAG_NAME}[ \t\n]*>"

HTML_BLOCK_START = (
    None,
    re.compile(r"<(?:script|pre|style|textarea)(?:[ \t>]|$)", re.IGNORECASE),
    re.compile(r"<!--"),
    re.compile(r"<\?"),
    re.compile(r"<![A-Za-z]"),
    re.compile(r"<!\[CDATA\["),
    re.compile(rf"</?(?:{_HTML_BLOCK_TAGS})(?:[ \t>]|/>|$)", re.IGNORECASE),
    re.compile(rf"(?:{OPEN_TAG}|{CLOSING_TAG})[ \t]*$"),
)
HTML_BLOCK_END = (
    None,
    re.compile(r"</(?:script|pre|style|textarea)>", re.IGNORECASE),
    re.compile(r"-->"),
    re.compile(r"\?>"),
    re.compile(r">"),
    re.compile(r"\]\]>"),
)


class ListMarker(NamedTuple):
    """A list item marker found at the start of a line.

    Attributes:
        indent: Columns before the marker
        ordered: True for ``1.`` / ``1)`` markers
        delimiter: Bullet character, or ``.``/``)`` for ordered markers
        start: Item number (1 for bullets)
        content_col: Column where the item's content begins
        content: First-line content after the marker
    """

    indent: int
    ordered: bool
    delimiter: str
    start: int
    content_col: int
    content: str

    @property
    def empty(self) -> bool:
        return not self.content.strip(" \t")


def is_blank(line: str) -> bool:
    """True if the line holds only spaces and tabs."""
    return not line.strip(" \t")


def split_indent(line: str) -> tuple[int, str]:
    """Return (leading indent in columns, rest of the line).

    Tabs advance to the next multiple of TAB_STOP.
    """
    col = 0
    i = 0
    for ch in line:
        if ch == " ":
            col += 1
        elif ch == "\t":
            col += TAB_STOP - col % TAB_STOP
        else:
            break
        i += 1
    return col, line[i:]


def strip_columns(line: str, columns: int) -> str:
    """Remove up to ``columns`` columns of leading whitespace.

    A tab straddling the cut is split: the columns it still covers become
    spaces.
    """
    col = 0
    i = 0
    length = len(line)
    while i < length and col < columns:
        ch = line[i]
        if ch == " ":
            col += 1
        elif ch == "\t":
            width = TAB_STOP - col % TAB_STOP
            if col + width > columns:
                return " " * (col + width - columns) + line[i + 1 :]
            col += width
        else:
            break
        i += 1
    return line[i:]


def match_list_marker(line: str) -> ListMarker | None:
    """Recognize a bullet or ordered list marker at the start of ``line``."""
    indent, rest = split_indent(line)
    m = LIST_MARKER.match(rest)
    if m is None:
        return None

    bullet, number, delim = m.groups()
    marker_end = indent + m.end()
    after = rest[m.end() :]

    if is_blank(after):
        padding, content = 1, ""
    else:
        spaces, content = split_indent(after)
        if spaces > TAB_STOP:
            # Content is indented code: the item starts one column after the marker
            padding, content = 1, strip_columns(after, 1)
        else:
            padding = spaces

    if bullet:
        return ListMarker(indent, False, bullet, 1, marker_end + padding, content)
    return ListMarker(indent, True, delim, int(number), marker_end + padding, content)


def html_block_kind(rest: str) -> int:
    """Return the CommonMark HTML block start condition (1-7), or 0."""
    if not rest.startswith("<"):
        return 0
    for kind in range(1, 8):
        if HTML_BLOCK_START[kind].match(rest):
            return kind
    return 0


def fence_marker(rest: str) -> tuple[str, int, str] | None:
    """Recognize an opening code fence.

    Returns:
        (fence character, fence length, info string), or None
    """
    m = FENCE_OPEN.match(rest)
    if m is None:
        return None
    fence, info = m.groups()
    if fence[0] == "`" and "`" in info:
        return None
    return fence[0], len(fence), info.strip()


def is_fence_close(rest: str, char: str, length: int) -> bool:
    """True if ``rest`` closes a fence opened with ``length`` ``char``s."""
    body = rest.rstrip(" \t")
    return len(body) >= length and body.count(char) == len(body)


def is_punctuation(char: str) -> bool:
    """Unicode punctuation or symbol (used by emphasis flanking rules)."""
    if not char:
        return False
    if char in ASCII_PUNCTUATION:
        return True
    return unicodedata.category(char)[0] in ("P", "S")


def is_whitespace(char: str) -> bool:
    """Unicode whitespace; the empty string (text edge) counts too."""
    return not char or char.isspace()


def normalize_label(label: str) -> str:
    """Normalize a link reference label for case-insensitive lookup."""
    return " ".join(label.split()).casefold()


ENTITY = re.compile(r"&(?:#[0-9]{1,7}|#[xX][0-9a-fA-F]{1,6}|[A-Za-z][A-Za-z0-9]{1,31});")
_ESCAPE_OR_ENTITY = re.compile(
    r"\\([!\"#$%&'()*+,\-./:;<=>?@\[\\\]^_`{|}~])"
    r"|(&(?:#[0-9]{1,7}|#[xX][0-9a-fA-F]{1,6}|[A-Za-z][A-Za-z0-9]{1,31});)"
)


def decode_entity(entity: str) -> str:
    """Decode one ``&...;`` reference; unknown names stay literal."""
    if entity[1] != "#" and entity[1:] not in HTML5_ENTITIES:
        return entity
    return html.unescape(entity)


def unescape_string(text: str) -> str:
    """Apply backslash escapes and entity references.

    Used for link destinations, titles and fence info strings.
    """
    if "\\" not in text and "&" not in text:
        return text

    def _replace(m: re.Match[str]) -> str:
        if m.group(1) is not None:
            return m.group(1)
        return decode_entity(m.group(2))

    return _ESCAPE_OR_ENTITY.sub(_replace, text)
