"""
Palette Screen - modal overlay hosting a PaletteController.

The screen only forwards terminal events to the controller (input changes,
arrows, enter, clicks, shortcut keys) and re-renders from its observables;
every palette decision is taken by the controller.
"""

import logging
from typing import Any, Optional

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Label, ListItem, ListView, Static

from hyperpalette.core.controller import PaletteController
from hyperpalette.keybindings import KeyScope
from hyperpalette.models.items import Actionable, HyperItem, Navigable

logger = logging.getLogger(__name__)


def describe_item(item: HyperItem) -> str:
    """Secondary text shown next to an item name."""
    if isinstance(item, Actionable):
        parts = [p for p in (item.category, item.description) if p]
        if item.shortcut:
            parts.append(" / ".join(item.shortcut))
        return " · ".join(parts)
    if isinstance(item, Navigable):
        return item.url_host_pathname
    return ""


class PaletteResultWidget(ListItem):
    """Widget for a single palette result."""

    DEFAULT_CSS = """
    PaletteResultWidget {
        height: 1;
        padding: 0 1;
    }
    """

    def __init__(self, item: HyperItem, **kwargs):
        super().__init__(**kwargs)
        self.item = item

    def compose(self) -> ComposeResult:
        name = self.item.name
        if len(name) > 50:
            name = name[:47] + "..."
        subtitle = describe_item(self.item)
        if len(subtitle) > 35:
            subtitle = subtitle[:32] + "..."
        yield Static(f"{name}  [dim]{subtitle}[/dim]" if subtitle else name, markup=True)


class PaletteScreen(ModalScreen):
    """Command palette modal overlay."""

    CSS = """
    PaletteScreen {
        align: center top;
        padding-top: 5;
    }

    #palette-panel {
        width: 80;
        height: auto;
        max-height: 30;
        background: $surface;
        border: solid $primary;
    }

    #palette-label {
        display: none;
    }

    #palette-input {
        width: 100%;
        height: 3;
        border: none;
        border-bottom: solid $primary-darken-1;
        background: $surface-darken-1;
        padding: 0 1;
    }

    #palette-results {
        height: auto;
        max-height: 20;
        min-height: 5;
        padding: 0;
    }

    #palette-hints {
        height: 1;
        background: $surface-darken-1;
        color: $text-muted;
        padding: 0 1;
    }

    ListItem.--highlight {
        background: $accent;
    }
    """

    BINDINGS = [
        Binding("up", "cursor_up", "Up", show=False),
        Binding("down", "cursor_down", "Down", show=False),
        Binding("ctrl+p", "cursor_up", "Up", show=False),
        Binding("ctrl+n", "cursor_down", "Down", show=False),
    ]

    def __init__(self, controller: PaletteController, **kwargs):
        super().__init__(**kwargs)
        self.controller = controller
        self._unsubscribe: list = []
        self._render_id = 0

    def compose(self) -> ComposeResult:
        states = self.controller.states
        with Vertical(id="palette-panel"):
            yield Label("Search", id="palette-label")
            yield Input(
                value=states.search_input.value,
                placeholder=states.placeholder.value or "",
                id="palette-input",
            )
            yield ListView(id="palette-results")
            yield Static("↑↓ Navigate │ Enter Select │ Esc Close", id="palette-hints")

    def on_mount(self) -> None:
        states = self.controller.states
        self._unsubscribe.append(states.selected.subscribe(lambda _: self._schedule_render()))
        for mode in states.modes.values():
            self._unsubscribe.append(mode.results.subscribe(lambda _: self._schedule_render()))
        self._unsubscribe.append(states.search_input.subscribe(self._on_search_input))
        self._unsubscribe.append(states.placeholder.subscribe(self._on_placeholder))
        self._unsubscribe.append(states.error.subscribe(self._on_error))
        self._unsubscribe.append(states.open.subscribe(self._on_open))
        self.query_one("#palette-input", Input).focus()

    def on_unmount(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe.clear()

    # ------------------------------------------------------------------
    # Controller -> widgets
    # ------------------------------------------------------------------

    def _schedule_render(self) -> None:
        self._render_id += 1
        self.call_later(self._render_results, self._render_id)

    async def _render_results(self, render_id: int) -> None:
        # Skip if a newer render was requested
        if render_id != self._render_id:
            return

        results = self.controller.active_mode.results.value
        results_view = self.query_one("#palette-results", ListView)
        await results_view.clear()

        if not results:
            await results_view.append(ListItem(Static("[dim]No results found[/dim]")))
            return

        for item in results:
            await results_view.append(PaletteResultWidget(item))

        index = self.controller.states.selected.value.index
        if index >= 0:
            results_view.index = index

    def _on_search_input(self, value: str) -> None:
        input_widget = self.query_one("#palette-input", Input)
        if input_widget.value != value:
            input_widget.value = value
            input_widget.cursor_position = len(value)

    def _on_placeholder(self, value: Optional[str]) -> None:
        self.query_one("#palette-input", Input).placeholder = value or ""

    def _on_error(self, error: Any) -> None:
        if error is not None:
            self.notify(str(error.error), title=f"{error.item.name} failed", severity="error")

    def _on_open(self, value: bool) -> None:
        if not value and self.is_attached and self.app.screen is self:
            self.dismiss()

    # ------------------------------------------------------------------
    # Widgets -> controller
    # ------------------------------------------------------------------

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "palette-input":
            return
        # Echo of a value the controller already holds
        if event.value == self.controller.states.search_input.value:
            return
        self.controller.input(event.value)

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        await self.controller.submit(event)

    def action_cursor_up(self) -> None:
        self.controller.select_previous()

    def action_cursor_down(self) -> None:
        self.controller.select_next()

    async def on_list_view_selected(self, event: ListView.Selected) -> None:
        if isinstance(event.item, PaletteResultWidget):
            await self.controller.click(event.item.item.id, event)

    async def on_key(self, event) -> None:
        key = event.key
        if key == "tab":
            event.stop()
            return
        if key != "escape" and "+" not in key:
            return
        if await self.controller.key_bindings.dispatch(key, KeyScope.PALETTE):
            event.stop()
            event.prevent_default()

    def on_click(self, event) -> None:
        # Clicks on the backdrop land on the screen itself
        if event.widget is self:
            self.controller.click_outside()
