"""Utility modules for mdpreview.

Provides:
- text: slugify, escape_html, escape_text
- logger: get_logger
"""

from mdpreview.utils.logger import get_logger
from mdpreview.utils.text import escape_html, escape_text, slugify

__all__ = [
    "escape_html",
    "escape_text",
    "get_logger",
    "slugify",
]
