"""mdpreview renderers.

Renderers convert typed AST nodes into output formats.

Available Renderers:
- HtmlRenderer: Renders AST to an (unsanitized) HTML fragment

Thread Safety:
Per-render state lives in a RenderContext created by each render() call.
Safe for concurrent use from multiple threads.

"""

from mdpreview.renderers.html import HeadingInfo, HtmlRenderer, RenderContext

__all__ = ["HeadingInfo", "HtmlRenderer", "RenderContext"]
