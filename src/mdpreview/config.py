"""ContextVar-based render configuration for mdpreview.

Config is an immutable dataclass activated per context, so the parser and
any sub-parsers it spawns for block quotes and list items all read the same
settings without threading them through every call.

Usage:
    from mdpreview.config import RenderConfig, render_config_context
    from mdpreview.parser import Parser

    with render_config_context(RenderConfig(hard_breaks=False)):
        blocks = Parser("line one\\nline two").parse()

Thread Safety:
    ContextVars are per-thread (and per-asyncio-task). A config set in one
    thread is never visible in another.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, fields
from typing import Any

from mdpreview.errors import ConfigError


@dataclass(frozen=True, slots=True)
class RenderConfig:
    """Immutable render configuration.

    Attributes:
        hard_breaks: Render a single newline inside a paragraph as <br />
        tables_enabled: Parse GFM pipe tables
        strikethrough_enabled: Parse ~~strikethrough~~
        autolinks_enabled: Turn bare http(s):// and www. URLs into links
        html_enabled: Pass raw HTML through to the sanitizer (escaped otherwise)
        highlight: Syntax-highlight fenced code blocks
        heading_ids: Emit slug ids on headings
        max_nesting: Deepest combined container and inline nesting before
            markers are treated as literal text. Parsing uses about four
            interpreter frames per container level, so max_nesting * 4 must
            stay under sys.getrecursionlimit().

    """

    hard_breaks: bool = True
    tables_enabled: bool = True
    strikethrough_enabled: bool = True
    autolinks_enabled: bool = True
    html_enabled: bool = True
    highlight: bool = True
    heading_ids: bool = True
    max_nesting: int = 128

    def __post_init__(self) -> None:
        if isinstance(self.max_nesting, bool) or not isinstance(self.max_nesting, int):
            raise ConfigError("max_nesting", f"expected int, got {type(self.max_nesting).__name__}")
        if self.max_nesting < 1:
            raise ConfigError("max_nesting", f"must be >= 1, got {self.max_nesting}")

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> RenderConfig:
        """Create RenderConfig from a dictionary.

        Unknown keys are ignored so a settings file can carry options meant
        for other layers of an application. Boolean fields must be real
        booleans.

        Example:
            >>> RenderConfig.from_dict({"hard_breaks": False, "theme": "dark"}).hard_breaks
            False

        """
        valid = {f.name: f for f in fields(cls)}
        filtered: dict[str, Any] = {}
        for key, value in config_dict.items():
            if key not in valid:
                continue
            if valid[key].type in ("bool", bool) and not isinstance(value, bool):
                raise ConfigError(key, f"expected bool, got {type(value).__name__}")
            filtered[key] = value
        return cls(**filtered)

    def to_dict(self) -> dict[str, Any]:
        """Return the config as a plain dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: RenderConfig = RenderConfig()

_render_config: ContextVar[RenderConfig] = ContextVar(
    "render_config",
    default=_DEFAULT_CONFIG,
)


def get_render_config() -> RenderConfig:
    """Get the render configuration active in this context."""
    return _render_config.get()


def set_render_config(config: RenderConfig) -> None:
    """Set the render configuration for the current context."""
    _render_config.set(config)


def reset_render_config() -> None:
    """Reset to the default configuration."""
    _render_config.set(_DEFAULT_CONFIG)


@contextmanager
def render_config_context(config: RenderConfig) -> Iterator[RenderConfig]:
    """Temporarily activate ``config``.

    The previous config is restored on exit, even if the body raises.

    Example:
        >>> with render_config_context(RenderConfig(tables_enabled=False)):
        ...     get_render_config().tables_enabled
        False
    """
    token = _render_config.set(config)
    try:
        yield config
    finally:
        _render_config.reset(token)


__all__ = [
    "RenderConfig",
    "get_render_config",
    "set_render_config",
    "reset_render_config",
    "render_config_context",
]
