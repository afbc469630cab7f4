"""Live preview session: latest edit wins.

An editor calls edit() with the full text on every keystroke. Renders may
finish out of order (for example on a worker pool); publish() only accepts
a render of the newest edit, so a slow render of old text never overwrites
a fresh one. Only that newest edit's text is held until it is displayed.

Usage:
    >>> session = PreviewSession()
    >>> revision = session.edit("# Title")
    >>> session.render().html
    '<h1 id="title">Title</h1>\\n'

Thread Safety:
    All state changes happen under one lock. Rendering itself runs outside
    the lock, so edits are never blocked by a slow render.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass

from mdpreview.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_DOCUMENT = """\
# Welcome to my React Markdown Previewer!

## This is a sub-heading...
### And here's some other cool stuff:

Here's some code, `<span style="background-color: white;"><div></div></span>`, between 2 backticks.

```javascript
// this is multi-line code:

function anotherExample(firstLine, lastLine) {
  if (firstLine === '```' && lastLine === '```') {
    return "multiLineCode"; // Ensure multiLineCode is defined elsewhere
  }
}
```

You can also make text **bold**... whoa!
Or _italic_.
Or... wait for it... **_both!_**
And feel free to go crazy ~~crossing stuff out~~.

There's also [links](https://www.freecodecamp.org), and
> Block Quotes!

And if you want to get really crazy, even tables:

| Wild Header | Crazy Header | Another Header? |
|-------------|--------------|-----------------|
| Your content can be here, and it | can be here.... | okay. |
| And here.    | Okay.        | I think we get it. |

- And of course there are lists.
  - Some are bulleted.
     - With different indentation levels.
        - That look like this.

1. And there are numbered lists too.
1. Use just 1s if you want!
1. But the list goes on...

![freeCodeCamp Logo](https://cdn.freecodecamp.org/testable-projects-fcc/images/fcc_secondary.svg)
"""


@dataclass(frozen=True, slots=True)
class Preview:
    """What the preview pane shows: a sanitized render of one revision."""

    revision: int
    source: str
    html: str


def _default_renderer(source: str) -> str:
    from mdpreview import render

    return render(source)


class PreviewSession:
    """Editor text plus the most recent preview.

    Revisions count up from 0 (the initial document). Each edit() returns a
    new revision; publish() discards renders older than the one displayed.
    """

    __slots__ = ("_lock", "_renderer", "_revision", "_pending", "_current")

    def __init__(
        self,
        source: str = DEFAULT_DOCUMENT,
        *,
        renderer: Callable[[str], str] | None = None,
    ) -> None:
        """Create a session and render the initial document.

        Args:
            source: Initial editor text (defaults to the sample document)
            renderer: Source-to-safe-HTML function (default: mdpreview.render)
        """
        self._lock = threading.Lock()
        self._renderer = renderer or _default_renderer
        self._revision = 0
        # Source of the newest edit not displayed yet, keyed by its revision
        self._pending: dict[int, str] = {}
        self._current = Preview(revision=0, source=source, html=self._renderer(source))

    @property
    def current(self) -> Preview:
        """The preview on display."""
        with self._lock:
            return self._current

    @property
    def revision(self) -> int:
        """Revision number of the latest edit."""
        with self._lock:
            return self._revision

    @property
    def source(self) -> str:
        """Text of the latest edit."""
        with self._lock:
            return self._pending.get(self._revision, self._current.source)

    def edit(self, text: str) -> int:
        """Replace the editor text wholesale.

        Only the newest edit is kept for rendering; a render still running
        for an older revision will be refused by publish().

        Returns:
            The revision number of this edit
        """
        with self._lock:
            self._revision += 1
            self._pending = {self._revision: text}
            return self._revision

    def publish(self, revision: int, html: str) -> bool:
        """Display ``html`` rendered from ``revision``.

        Returns:
            False (and changes nothing) if ``revision`` is not the newest
            undisplayed edit
        """
        with self._lock:
            if revision <= self._current.revision or revision not in self._pending:
                logger.debug(
                    "Discarding stale render of revision %d (showing %d)",
                    revision,
                    self._current.revision,
                )
                return False
            source = self._pending.pop(revision)
            self._current = Preview(revision=revision, source=source, html=html)
            return True

    def render(self) -> Preview:
        """Render the latest edit and publish it.

        Returns:
            The preview on display afterwards. If another thread published a
            newer revision meanwhile, that one is returned.
        """
        with self._lock:
            revision = self._revision
            source = self._pending.get(revision)
            if source is None:
                return self._current

        html = self._renderer(source)
        self.publish(revision, html)
        return self.current

    def update(self, text: str) -> Preview:
        """Edit and render in one step."""
        self.edit(text)
        return self.render()


__all__ = ["DEFAULT_DOCUMENT", "Preview", "PreviewSession"]
