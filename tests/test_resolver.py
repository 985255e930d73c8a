"""Tests for item resolution and close policies."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from hyperpalette.config.constants import RequestSourceType
from hyperpalette.core.resolver import ResolutionOutcome
from hyperpalette.exceptions import ActionExecutionError
from hyperpalette.models.items import Navigable, Searchable
from palette_fixtures import by_name, make_action


@pytest.fixture
def commands(palette):
    """Open the palette in the commands mode and return a registering helper."""

    def register(*items):
        palette.register_item("commands", list(items))
        palette.open_palette("commands")
        palette.input(">")
        return palette

    return register


class TestActionable:
    """Tests for actionable items."""

    @pytest.mark.asyncio
    async def test_success(self, commands) -> None:
        item = make_action("Reload")
        palette = commands(item)
        palette.input(">rel")

        outcome = await palette.submit()

        assert outcome is ResolutionOutcome.SUCCEEDED
        item.on_action.assert_called_once()
        called_item, source, rarg = item.on_action.call_args.args
        assert called_item is item
        assert source.type is RequestSourceType.SUBMIT
        assert rarg is None
        assert palette.states.error.value is None
        assert palette.states.modes["commands"].history.value == [item.id]
        assert palette.states.modes["commands"].current.value is None
        # Default close action resets the input, the palette stays open
        assert palette.states.search_input.value == ">"
        assert palette.is_open

    @pytest.mark.asyncio
    async def test_request_result_is_passed_to_action(self, commands) -> None:
        item = make_action("Rename", on_request=AsyncMock(return_value="new name"))
        palette = commands(item)

        await palette.submit()

        assert item.on_action.call_args.args[2] == "new name"

    @pytest.mark.asyncio
    async def test_cancel(self, commands) -> None:
        item = make_action("Delete", on_request=MagicMock(return_value=False))
        palette = commands(item)
        palette.input(">del")

        outcome = await palette.submit()

        assert outcome is ResolutionOutcome.CANCELLED
        item.on_action.assert_not_called()
        assert palette.states.modes["commands"].history.value == []
        assert palette.states.modes["commands"].current.value is None
        assert palette.states.search_input.value == ">"

    @pytest.mark.asyncio
    async def test_cancel_without_close(self, commands) -> None:
        item = make_action("Delete", on_request=MagicMock(return_value=False), close_on="ON_SUCCESS")
        palette = commands(item)
        palette.input(">del")

        assert await palette.submit() is ResolutionOutcome.CANCELLED
        assert palette.states.search_input.value == ">del"

    @pytest.mark.asyncio
    async def test_action_error(self, commands) -> None:
        boom = RuntimeError("boom")
        on_error = MagicMock()
        item = make_action("Reload", on_action=MagicMock(side_effect=boom), on_error=on_error)
        palette = commands(item)

        outcome = await palette.submit()

        assert outcome is ResolutionOutcome.FAILED
        error = palette.states.error.value
        assert isinstance(error, ActionExecutionError)
        assert error.error is boom
        assert error.item is item
        assert error.mode == "commands"
        on_error.assert_called_once()
        assert on_error.call_args.args[:2] == (boom, item)
        assert palette.states.modes["commands"].history.value == [item.id]
        assert palette.states.modes["commands"].current.value is None

    @pytest.mark.asyncio
    async def test_request_error(self, commands) -> None:
        item = make_action("Reload", on_request=MagicMock(side_effect=ValueError("nope")))
        palette = commands(item)

        assert await palette.submit() is ResolutionOutcome.FAILED
        item.on_action.assert_not_called()
        assert isinstance(palette.states.error.value.error, ValueError)

    @pytest.mark.asyncio
    async def test_success_clears_previous_error(self, commands) -> None:
        failing = make_action("Fail", on_action=MagicMock(side_effect=RuntimeError("boom")))
        working = make_action("Work")
        palette = commands(failing, working)

        await palette.click(failing.id)
        assert palette.states.error.value is not None

        await palette.click(working.id)
        assert palette.states.error.value is None

    @pytest.mark.asyncio
    async def test_async_action(self, commands) -> None:
        item = make_action("Sync", on_action=AsyncMock())
        palette = commands(item)

        assert await palette.submit() is ResolutionOutcome.SUCCEEDED
        item.on_action.assert_awaited_once()


class TestClosePolicies:
    """Tests for close_on and close_action."""

    @pytest.mark.asyncio
    async def test_on_error_with_close_action_close(self, commands) -> None:
        item = make_action(
            "Reload",
            on_action=MagicMock(side_effect=RuntimeError("boom")),
            close_on="ON_ERROR",
            close_action="CLOSE",
        )
        palette = commands(item)

        await palette.submit()

        assert palette.is_open is False
        assert palette.states.error.value is not None
        assert palette.states.selected.value.index == -1

    @pytest.mark.asyncio
    async def test_on_error_does_not_close_on_success(self, commands) -> None:
        item = make_action("Reload", close_on="ON_ERROR", close_action="CLOSE")
        palette = commands(item)

        await palette.submit()

        assert palette.is_open is True

    @pytest.mark.asyncio
    async def test_on_success_does_not_close_on_error(self, commands) -> None:
        item = make_action(
            "Reload", on_action=MagicMock(side_effect=RuntimeError), close_on="ON_SUCCESS", close_action="CLOSE"
        )
        palette = commands(item)

        await palette.submit()

        assert palette.is_open is True

    @pytest.mark.asyncio
    async def test_never(self, commands) -> None:
        item = make_action("Reload", close_on="NEVER", close_action="CLOSE")
        palette = commands(item)
        palette.input(">rel")

        await palette.submit()

        assert palette.is_open is True
        assert palette.states.search_input.value == ">rel"

    @pytest.mark.asyncio
    async def test_on_trigger_closes_before_action(self, commands) -> None:
        seen = {}
        item = make_action("Reload", close_on="ON_TRIGGER")
        palette = commands(item)
        item.on_action.side_effect = lambda *args: seen.setdefault("input", palette.states.search_input.value)
        palette.input(">rel")

        await palette.submit()

        assert seen["input"] == ">"

    @pytest.mark.asyncio
    async def test_close_action_from_mode(self, make_palette) -> None:
        palette = make_palette(
            {
                "pages": {
                    "type": "NAVIGABLE",
                    "prefix": "",
                    "map_to_search": by_name,
                    "close_action": "CLOSE",
                    "on_navigation": MagicMock(),
                }
            }
        )
        home = Navigable("/home", name="Home")
        palette.register_item("pages", home)
        palette.open_palette()
        palette.input("ho")

        await palette.submit()

        assert palette.is_open is False
        assert palette.mode_state("pages").last_input == "ho"

    @pytest.mark.asyncio
    async def test_keep_close_reopens_closed_palette(self, palette, key_bindings) -> None:
        item = make_action("Reload", shortcut=["ctrl+r"], close_action="KEEP_CLOSE")
        palette.register_item("commands", item)
        assert palette.is_open is False

        await key_bindings.dispatch("ctrl+r")

        assert palette.is_open is True

    @pytest.mark.asyncio
    async def test_reset_close_resets_input(self, commands) -> None:
        item = make_action("Reload", close_action="RESET_CLOSE")
        palette = commands(item)
        palette.input(">rel")

        await palette.submit()

        assert palette.states.search_input.value == ">"
        assert palette.is_open is True

    @pytest.mark.asyncio
    async def test_no_action(self, commands) -> None:
        item = make_action("Reload", close_action="NO_ACTION")
        palette = commands(item)
        palette.input(">rel")

        await palette.submit()

        assert palette.states.search_input.value == ">rel"
        assert palette.mode_state("commands").last_input == ">rel"


class TestConcurrency:
    """Tests for the per-mode in-flight guard."""

    @pytest.mark.asyncio
    async def test_second_trigger_is_busy(self, commands) -> None:
        release = asyncio.Event()

        async def slow_action(item, source, rarg):
            await release.wait()

        slow = make_action("Slow", on_action=slow_action)
        other = make_action("Other")
        palette = commands(slow, other)

        first = asyncio.ensure_future(palette.click(slow.id))
        await asyncio.sleep(0)

        assert await palette.click(other.id) is ResolutionOutcome.BUSY
        other.on_action.assert_not_called()

        release.set()
        assert await first is ResolutionOutcome.SUCCEEDED
        assert await palette.click(other.id) is ResolutionOutcome.SUCCEEDED


class TestNavigable:
    """Tests for navigable items."""

    @pytest.mark.asyncio
    async def test_on_navigation_wins(self, palette, pages) -> None:
        palette.register_item("pages", pages)
        palette.search("home")

        outcome = await palette.submit()

        assert outcome is ResolutionOutcome.SUCCEEDED
        palette.mode_state("pages").config.on_navigation.assert_called_once_with(pages[0])

    @pytest.mark.asyncio
    async def test_local_and_external(self, make_palette) -> None:
        on_local, on_external = MagicMock(), MagicMock()
        palette = make_palette(
            {
                "pages": {
                    "type": "NAVIGABLE",
                    "prefix": "",
                    "map_to_search": by_name,
                    "on_local": on_local,
                    "on_external": on_external,
                }
            }
        )
        local = Navigable("/docs", name="Docs")
        external = Navigable("https://example.com/x", name="Example")
        palette.register_item("pages", [local, external])
        palette.search("")

        await palette.click(local.id)
        palette.search("")
        await palette.click(external.id)

        on_local.assert_called_once_with("/docs")
        on_external.assert_called_once_with("https://example.com/x")

    @pytest.mark.asyncio
    async def test_navigation_error_fires_mode_on_error(self, make_palette) -> None:
        on_error = MagicMock()
        palette = make_palette(
            {
                "pages": {
                    "type": "NAVIGABLE",
                    "prefix": "",
                    "map_to_search": by_name,
                    "on_navigation": MagicMock(side_effect=OSError("offline")),
                    "on_error": on_error,
                }
            }
        )
        home = Navigable("/home", name="Home")
        palette.register_item("pages", home)
        palette.search("")

        assert await palette.submit() is ResolutionOutcome.FAILED
        on_error.assert_called_once()
        assert palette.states.modes["pages"].history.value == [home.id]
        assert palette.states.modes["pages"].current.value is None


class TestSearchable:
    """Tests for searchable items."""

    def searchable_modes(self, **options):
        return {
            "docs": {"type": "SEARCHABLE", "prefix": "", "map_to_search": lambda i: i.data["title"], **options}
        }

    @pytest.mark.asyncio
    async def test_on_selection(self, make_palette) -> None:
        on_selection = AsyncMock()
        palette = make_palette(self.searchable_modes(on_selection=on_selection))
        doc = Searchable({"title": "Guide"})
        palette.register_item("docs", doc)
        palette.search("guide")

        assert await palette.submit() is ResolutionOutcome.SUCCEEDED
        on_selection.assert_awaited_once()
        assert on_selection.call_args.args[0] is doc

    @pytest.mark.asyncio
    async def test_without_on_selection_is_unhandled(self, make_palette) -> None:
        palette = make_palette(self.searchable_modes())
        doc = Searchable({"title": "Guide"})
        palette.register_item("docs", doc)
        palette.search("")

        assert await palette.submit() is ResolutionOutcome.UNHANDLED
        assert palette.states.modes["docs"].history.value == []
