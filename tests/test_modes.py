"""Tests for mode construction and sort strategies."""

import webbrowser

import pytest

from hyperpalette.config.constants import CloseOn, EmptyMode, ItemType, SortMode, UpdateAction
from hyperpalette.core.modes import (
    NavigableModeConfig,
    build_mode_config,
    build_modes,
    keys_mapper,
)
from hyperpalette.exceptions import ConfigurationError
from hyperpalette.models.items import Navigable
from palette_fixtures import SubstringSearcher, by_name, make_action


def pages_options(**overrides):
    options = {"type": "NAVIGABLE", "prefix": "", "map_to_search": by_name}
    options.update(overrides)
    return options


class TestBuildModeConfig:
    """Tests for a single mode's options."""

    def test_applies_defaults(self) -> None:
        config = build_mode_config("pages", pages_options())

        assert isinstance(config, NavigableModeConfig)
        assert config.type is ItemType.NAVIGABLE
        assert config.close_on is CloseOn.ALWAYS
        assert config.empty_mode is EmptyMode.ALL
        assert config.sort_mode is SortMode.SORTED
        assert config.update_action is UpdateAction.UPDATE_IF_OPEN
        assert config.open_action is None
        assert config.close_action is None
        assert config.on_external is webbrowser.open_new_tab
        assert config.shortcut == []

    def test_coerces_enum_strings(self) -> None:
        config = build_mode_config("pages", pages_options(empty_mode="HISTORY", sort_mode="REVERSED"))
        assert config.empty_mode is EmptyMode.HISTORY
        assert config.sort_mode is SortMode.REVERSED

    @pytest.mark.parametrize(
        "overrides,setting",
        [
            ({"type": "WIDGET"}, "type"),
            ({"prefix": None}, "prefix"),
            ({"map_to_search": "name"}, "map_to_search"),
            ({"empty_mode": "SOME"}, "empty_mode"),
            ({"close_on": "ON_CANCEL"}, "close_on"),
            ({"shortcut": "ctrl+k"}, "shortcut"),
        ],
    )
    def test_rejects_invalid_options(self, overrides, setting) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            build_mode_config("pages", pages_options(**overrides))
        assert exc_info.value.context["setting"] == setting
        assert exc_info.value.context["mode"] == "pages"

    def test_rejects_options_of_other_variants(self) -> None:
        with pytest.raises(ConfigurationError, match="on_selection"):
            build_mode_config("pages", pages_options(on_selection=lambda item, source: None))

    def test_actionable_accepts_on_cancel(self) -> None:
        config = build_mode_config(
            "commands", {"type": "ACTIONABLE", "prefix": ">", "map_to_search": by_name, "close_on": "ON_CANCEL"}
        )
        assert config.close_on is CloseOn.ON_CANCEL


class TestBuildModes:
    """Tests for the set of modes."""

    def test_keeps_configuration_order(self) -> None:
        modes = build_modes(
            {
                "commands": {"type": "ACTIONABLE", "prefix": ">", "map_to_search": by_name},
                "pages": pages_options(),
            },
            SubstringSearcher,
        )
        assert list(modes) == ["commands", "pages"]
        assert isinstance(modes["pages"].searcher, SubstringSearcher)

    def test_accepts_sequence_of_pairs(self) -> None:
        modes = build_modes([("pages", pages_options())])
        assert list(modes) == ["pages"]

    def test_requires_at_least_one_mode(self) -> None:
        with pytest.raises(ConfigurationError):
            build_modes({})

    def test_requires_empty_prefix_mode(self) -> None:
        with pytest.raises(ConfigurationError, match="empty prefix"):
            build_modes({"commands": {"type": "ACTIONABLE", "prefix": ">", "map_to_search": by_name}})

    def test_rejects_duplicate_prefix(self) -> None:
        with pytest.raises(ConfigurationError, match="Duplicate prefix"):
            build_modes(
                {
                    "pages": pages_options(),
                    "docs": {"type": "SEARCHABLE", "prefix": "", "map_to_search": by_name},
                }
            )

    def test_rejects_duplicate_name_in_pairs(self) -> None:
        with pytest.raises(ConfigurationError, match="Duplicate mode"):
            build_modes([("pages", pages_options()), ("pages", pages_options(prefix="/"))])

    @pytest.mark.parametrize("sort_by", [[], ["name", 3], "name"])
    def test_rejects_invalid_sort_by(self, sort_by) -> None:
        with pytest.raises(ConfigurationError):
            build_modes({"pages": pages_options(sort_by=sort_by)})


class TestModeSort:
    """Tests for sort strategies and the sorted raw view."""

    def test_default_sort_uses_search_string(self) -> None:
        mode = build_modes({"pages": pages_options()})["pages"]
        assert mode.sort.kind == "search"

        for item in (Navigable("/b", name="beta"), Navigable("/a", name="Alpha")):
            mode.cache_sort_key(item)
            mode.raw_items.append(item)
        mode.resort()

        assert [i.name for i in mode.raw_items_sorted] == ["Alpha", "beta"]

    def test_sort_by_keys_reversed(self) -> None:
        mode = build_modes(
            {
                "commands": {
                    "type": "ACTIONABLE",
                    "prefix": "",
                    "map_to_search": lambda item: item.description,
                    "sort_by": ["category", "name"],
                    "sort_mode": "REVERSED",
                }
            }
        )["commands"]
        assert mode.sort.kind == "keys"

        for item in (make_action("Alpha", category="A"), make_action("Beta", category="A")):
            mode.cache_sort_key(item)
            mode.raw_items.append(item)
        mode.resort()

        assert [i.name for i in mode.raw_items_sorted] == ["Beta", "Alpha"]
        assert [i.name for i in mode.raw_items] == ["Alpha", "Beta"]

    def test_unsorted_keeps_insertion_order(self) -> None:
        mode = build_modes({"pages": pages_options(sort_mode="UNSORTED")})["pages"]
        for item in (Navigable("/b", name="b"), Navigable("/a", name="a")):
            mode.cache_sort_key(item)
            mode.raw_items.append(item)
        mode.resort()

        assert [i.name for i in mode.raw_items_sorted] == ["b", "a"]

    def test_custom_sorter(self) -> None:
        def by_length(items):
            items.sort(key=lambda i: len(i.name))

        mode = build_modes({"pages": pages_options(sort_by=by_length)})["pages"]
        assert mode.sort.kind == "custom"
        assert mode.sort.sort_key(Navigable("/x")) == ""

    def test_keys_mapper_joins_trimmed_strings(self) -> None:
        item = make_action(" Reload ", category=" View")
        assert keys_mapper(["category", "name", "shortcut"])(item) == "ViewReload"


class TestPaletteMode:
    """Tests for per-mode helpers."""

    def test_push_history_moves_to_front(self) -> None:
        mode = build_modes({"pages": pages_options()})["pages"]
        seen = []
        mode.history.subscribe(lambda value: seen.append(list(value)))

        mode.push_history("a")
        mode.push_history("b")
        mode.push_history("a")

        assert mode.history.value == ["a", "b"]
        assert seen[-1] == ["a", "b"]

    def test_strip_prefix(self) -> None:
        mode = build_modes(
            {"pages": pages_options(), "commands": {"type": "ACTIONABLE", "prefix": ">", "map_to_search": by_name}}
        )["commands"]
        assert mode.strip_prefix(">reload") == "reload"
        assert mode.strip_prefix("reload") == "reload"
