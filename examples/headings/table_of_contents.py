"""Collect rendered headings (with their anchor ids) for a table of contents."""

from mdpreview import parse
from mdpreview.renderers.html import HtmlRenderer

source = """# Introduction

Welcome to the guide.

## Getting Started

### Installation

## Getting Started
"""

renderer = HtmlRenderer()
renderer.render(parse(source))

print("Table of Contents:")
for heading in renderer.get_headings():
    indent = "  " * (heading.level - 1)
    print(f"{indent}- [{heading.text}](#{heading.slug})")
