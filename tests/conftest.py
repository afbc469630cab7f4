"""Shared test setup: every test starts from default config and highlighter."""

import pytest

from mdpreview.config import reset_render_config
from mdpreview.highlighting import set_highlighter


@pytest.fixture(autouse=True)
def _default_pipeline_state():
    reset_render_config()
    set_highlighter(None)
    yield
    reset_render_config()
    set_highlighter(None)
