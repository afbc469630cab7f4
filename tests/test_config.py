"""Tests for ContextVar-based render configuration.

Validates defaults, validation, context manager behavior, thread isolation,
and config inheritance for sub-parsers.
"""

from threading import Thread

import pytest

from mdpreview import (
    List,
    Markdown,
    Parser,
    RenderConfig,
    Table,
    get_render_config,
    parse,
    render_config_context,
    reset_render_config,
    set_render_config,
)
from mdpreview.errors import ConfigError


class TestRenderConfigDataclass:
    def test_default_values(self) -> None:
        config = RenderConfig()
        assert config.hard_breaks is True
        assert config.tables_enabled is True
        assert config.strikethrough_enabled is True
        assert config.autolinks_enabled is True
        assert config.html_enabled is True
        assert config.highlight is True
        assert config.heading_ids is True
        assert config.max_nesting == 128

    def test_immutability(self) -> None:
        config = RenderConfig()
        with pytest.raises(AttributeError):
            config.hard_breaks = False  # type: ignore[misc]

    @pytest.mark.parametrize("value", [0, -1])
    def test_max_nesting_must_be_positive(self, value: int) -> None:
        with pytest.raises(ConfigError) as exc_info:
            RenderConfig(max_nesting=value)
        assert exc_info.value.field == "max_nesting"

    @pytest.mark.parametrize("value", ["10", 2.5, True])
    def test_max_nesting_must_be_int(self, value: object) -> None:
        with pytest.raises(ConfigError):
            RenderConfig(max_nesting=value)  # type: ignore[arg-type]


class TestFromDict:
    def test_known_keys(self) -> None:
        config = RenderConfig.from_dict({"hard_breaks": False, "max_nesting": 8})
        assert config.hard_breaks is False
        assert config.max_nesting == 8

    def test_unknown_keys_ignored(self) -> None:
        assert RenderConfig.from_dict({"theme": "dark"}) == RenderConfig()

    def test_bool_fields_type_checked(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            RenderConfig.from_dict({"tables_enabled": "yes"})
        assert exc_info.value.field == "tables_enabled"

    def test_round_trip(self) -> None:
        config = RenderConfig(highlight=False, max_nesting=5)
        assert RenderConfig.from_dict(config.to_dict()) == config


class TestContextVarFunctions:
    def test_get_default(self) -> None:
        assert get_render_config() == RenderConfig()

    def test_set_and_reset(self) -> None:
        set_render_config(RenderConfig(tables_enabled=False))
        assert get_render_config().tables_enabled is False
        reset_render_config()
        assert get_render_config().tables_enabled is True

    def test_context_manager_restores(self) -> None:
        with render_config_context(RenderConfig(html_enabled=False)) as config:
            assert config.html_enabled is False
            assert get_render_config() is config
        assert get_render_config().html_enabled is True

    def test_context_manager_restores_on_error(self) -> None:
        with pytest.raises(RuntimeError):
            with render_config_context(RenderConfig(html_enabled=False)):
                raise RuntimeError("boom")
        assert get_render_config().html_enabled is True

    def test_nested_contexts(self) -> None:
        with render_config_context(RenderConfig(max_nesting=10)):
            with render_config_context(RenderConfig(max_nesting=5)):
                assert get_render_config().max_nesting == 5
            assert get_render_config().max_nesting == 10


class TestSubParserInheritance:
    def test_nested_table_respects_config(self) -> None:
        source = "> | a |\n> |---|\n> | 1 |"
        assert isinstance(parse(source).children[0].children[0], Table)
        with render_config_context(RenderConfig(tables_enabled=False)):
            assert not isinstance(parse(source).children[0].children[0], Table)

    def test_parser_reads_active_config(self) -> None:
        with render_config_context(RenderConfig(max_nesting=1)):
            blocks = Parser("- a\n  - b").parse()
        outer = blocks[0]
        assert isinstance(outer, List)
        assert not isinstance(outer.items[0].children[-1], List)


class TestThreadIsolation:
    def test_config_isolated_per_thread(self) -> None:
        results: dict[str, bool] = {}

        def worker(name: str, enabled: bool) -> None:
            with render_config_context(RenderConfig(tables_enabled=enabled)):
                doc = parse("| a |\n|---|\n| 1 |")
                results[name] = isinstance(doc.children[0], Table)

        threads = [Thread(target=worker, args=(f"t{i}", i % 2 == 0)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == {f"t{i}": i % 2 == 0 for i in range(8)}

    def test_markdown_instances_in_threads(self) -> None:
        plain = Markdown(RenderConfig(hard_breaks=False))
        breaking = Markdown()
        results: dict[str, str] = {}

        def worker(name: str, md: Markdown) -> None:
            for _ in range(20):
                results[name] = md("a\nb")

        threads = [Thread(target=worker, args=("plain", plain)), Thread(target=worker, args=("breaking", breaking))]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert "<br" not in results["plain"]
        assert "<br" in results["breaking"]
