"""Markdown in, safe HTML out, in 3 lines."""

from mdpreview import render

html = render("# Hello **World**\nline one\nline two <script>alert(1)</script>")
print(html)
