"""Pilot-based tests for the Textual palette host."""

from unittest.mock import MagicMock

import pytest
from textual.widgets import Input, ListView

from hyperpalette.config.options import PaletteOptions
from hyperpalette.core.controller import PaletteController
from hyperpalette.keybindings import KeyBindingService
from hyperpalette.models.items import Navigable, Searchable
from hyperpalette.ui import PaletteApp, PaletteResultWidget, PaletteScreen, describe_item
from palette_fixtures import SubstringSearcher, default_modes, make_action


@pytest.fixture
def controller():
    palette = PaletteController(
        PaletteOptions(modes=default_modes(), debounce=0, reset_on_open=True),
        key_bindings=KeyBindingService(),
        searcher_factory=SubstringSearcher,
    )
    palette.register_item("commands", [make_action("Quit"), make_action("Reload", category="Window")])
    yield palette
    palette.destroy()


class TestDescribeItem:
    """Tests for the secondary text of a result."""

    def test_actionable(self) -> None:
        item = make_action("Reload", category="Window", description="Reload the window", shortcut=["ctrl+r"])
        assert describe_item(item) == "Window · Reload the window · ctrl+r"

    def test_navigable(self) -> None:
        assert describe_item(Navigable("https://github.com/org")) == "github.com/org"

    def test_searchable(self) -> None:
        assert describe_item(Searchable({"k": "v"})) == ""


class TestPaletteApp:
    """Tests for the palette screen lifecycle."""

    @pytest.mark.asyncio
    async def test_open_shows_screen_and_registers_shortcuts(self, controller) -> None:
        app = PaletteApp(controller)
        async with app.run_test() as pilot:
            assert [b.key for b in controller.key_bindings.bindings] == ["ctrl+k", "escape"]

            controller.open_palette("commands")
            await pilot.pause()

            assert isinstance(app.screen, PaletteScreen)
            assert app.screen.query_one("#palette-input", Input).value == ">"
            results = app.screen.query_one("#palette-results", ListView)
            assert len(results.query(PaletteResultWidget)) == 2

    @pytest.mark.asyncio
    async def test_typing_filters_and_enter_submits(self, controller) -> None:
        app = PaletteApp(controller)
        async with app.run_test() as pilot:
            controller.open_palette("commands")
            await pilot.pause()

            app.screen.query_one("#palette-input", Input).value = ">qu"
            await pilot.pause()

            assert [i.name for i in controller.active_mode.results.value] == ["Quit"]
            quit_item = controller.active_mode.results.value[0]

            await pilot.press("enter")
            await pilot.pause()

            quit_item.on_action.assert_called_once()
            assert controller.states.search_input.value == ">"

    @pytest.mark.asyncio
    async def test_close_dismisses_screen(self, controller) -> None:
        app = PaletteApp(controller)
        async with app.run_test() as pilot:
            controller.open_palette()
            await pilot.pause()
            assert isinstance(app.screen, PaletteScreen)

            controller.close_palette()
            await pilot.pause()

            assert not isinstance(app.screen, PaletteScreen)
            assert controller.is_open is False

    @pytest.mark.asyncio
    async def test_error_is_notified(self, controller) -> None:
        app = PaletteApp(controller)
        app.notify = MagicMock()
        failing = make_action("Fail", on_action=MagicMock(side_effect=RuntimeError("boom")), close_on="NEVER")
        controller.register_item("commands", failing)
        async with app.run_test() as pilot:
            controller.open_palette("commands")
            await pilot.pause()

            await controller.click(failing.id)
            await pilot.pause()

            app.notify.assert_called_once()
            assert app.notify.call_args.args[0] == "boom"
