"""Exception classes for mdpreview.

The rendering pipeline itself never raises on string input. These exceptions
surface from configuration and from pluggable highlighter backends, which the
pipeline catches and degrades around.
"""

from __future__ import annotations


class PreviewError(Exception):
    """Base exception for all mdpreview errors."""

    pass


class ConfigError(PreviewError):
    """Invalid render or sanitize configuration.

    Raised when a RenderConfig is built with an out-of-range value, or when
    from_dict() receives a value of the wrong type.
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize config error.

        Args:
            field: Name of the offending config field
            message: Description of the problem
        """
        self.field = field
        super().__init__(f"Invalid config '{field}': {message}")


class HighlightError(PreviewError):
    """A highlighter backend failed to highlight a code fragment.

    Backends may raise this; the module-level highlight() function catches it
    and falls back to plain escaped text.
    """

    def __init__(self, language: str | None, message: str) -> None:
        """Initialize highlight error.

        Args:
            language: Language hint that was being highlighted (may be None)
            message: Description of the failure
        """
        self.language = language
        label = language or "plaintext"
        super().__init__(f"Highlighting '{label}' failed: {message}")
