"""Tests for the live preview session."""

import logging
import threading

import pytest

from mdpreview.preview import DEFAULT_DOCUMENT, Preview, PreviewSession


def _upper(source: str) -> str:
    return source.upper()


class TestInitialState:
    def test_renders_sample_document(self) -> None:
        session = PreviewSession()
        preview = session.current
        assert preview.revision == 0
        assert preview.source == DEFAULT_DOCUMENT
        assert '<h1 id="welcome-to-my-react-markdown-previewer">' in preview.html

    def test_custom_initial_source(self) -> None:
        session = PreviewSession("*hi*")
        assert session.current.html == "<p><em>hi</em></p>\n"
        assert session.source == "*hi*"
        assert session.revision == 0

    def test_preview_is_frozen(self) -> None:
        preview = Preview(revision=0, source="", html="")
        with pytest.raises(AttributeError):
            preview.html = "x"  # type: ignore[misc]


class TestEdits:
    def test_edit_returns_increasing_revisions(self) -> None:
        session = PreviewSession("", renderer=_upper)
        assert session.edit("a") == 1
        assert session.edit("b") == 2
        assert session.revision == 2
        assert session.source == "b"

    def test_edit_does_not_render(self) -> None:
        session = PreviewSession("start", renderer=_upper)
        session.edit("next")
        assert session.current.html == "START"

    def test_update_renders_latest(self) -> None:
        session = PreviewSession("", renderer=_upper)
        preview = session.update("abc")
        assert preview == Preview(revision=1, source="abc", html="ABC")

    def test_render_without_edits_is_noop(self) -> None:
        calls: list[str] = []

        def renderer(source: str) -> str:
            calls.append(source)
            return source

        session = PreviewSession("x", renderer=renderer)
        before = session.current
        assert session.render() is before
        assert calls == ["x"]

    def test_default_renderer_sanitizes(self) -> None:
        session = PreviewSession("")
        html = session.update("<script>alert(1)</script>\n\nok").html
        assert "script" not in html
        assert "<p>ok</p>" in html


class TestPublish:
    def test_out_of_order_renders(self) -> None:
        session = PreviewSession("", renderer=_upper)
        old = session.edit("old")
        new = session.edit("new")

        assert session.publish(new, "NEW") is True
        assert session.publish(old, "OLD") is False
        assert session.current == Preview(revision=new, source="new", html="NEW")

    def test_older_revision_refused_after_newer_edit(self) -> None:
        session = PreviewSession("", renderer=_upper)
        first = session.edit("a")
        second = session.edit("b")

        assert session.publish(first, "A") is False
        assert session.current.revision == 0
        assert session.publish(second, "B") is True
        assert session.current.source == "b"

    def test_only_newest_edit_is_held(self) -> None:
        session = PreviewSession("", renderer=_upper)
        for i in range(500):
            session.edit("x" * i)
        assert list(session._pending) == [500]
        assert session.source == "x" * 499

    def test_pending_cleared_on_publish(self) -> None:
        session = PreviewSession("", renderer=_upper)
        session.update("a")
        assert session._pending == {}
        assert session.source == "a"

    def test_republish_rejected(self) -> None:
        session = PreviewSession("", renderer=_upper)
        revision = session.edit("a")
        assert session.publish(revision, "A")
        assert not session.publish(revision, "A again")

    def test_unknown_revision_rejected(self) -> None:
        session = PreviewSession("", renderer=_upper)
        assert not session.publish(5, "nope")
        assert session.current.revision == 0

    def test_stale_render_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        session = PreviewSession("", renderer=_upper)
        old = session.edit("a")
        session.publish(session.edit("b"), "B")
        with caplog.at_level(logging.DEBUG, logger="mdpreview"):
            session.publish(old, "A")
        assert any("stale render" in record.getMessage() for record in caplog.records)


class TestConcurrency:
    def test_slow_old_render_does_not_win(self) -> None:
        release = threading.Event()

        def renderer(source: str) -> str:
            if source == "slow":
                release.wait(timeout=5)
            return source.upper()

        session = PreviewSession("", renderer=renderer)
        session.edit("slow")
        worker = threading.Thread(target=session.render)
        worker.start()

        session.update("fast")
        release.set()
        worker.join()

        assert session.current == Preview(revision=2, source="fast", html="FAST")

    def test_many_editors(self) -> None:
        session = PreviewSession("", renderer=_upper)

        def editor(n: int) -> None:
            for i in range(25):
                session.update(f"t{n}-{i}")

        threads = [threading.Thread(target=editor, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert session.revision == 100
        current = session.current
        assert current.html == current.source.upper()
        assert current.revision == 100
