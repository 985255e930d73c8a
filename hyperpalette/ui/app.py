"""
Palette host application.

Routes global shortcut keys to the controller's key binding service and
shows the palette screen whenever the controller's ``open`` state turns on.
"""

import logging

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Static

from hyperpalette.core.controller import PaletteController
from hyperpalette.keybindings import KeyScope

from .palette_screen import PaletteScreen

logger = logging.getLogger(__name__)


class PaletteApp(App):
    """Minimal app hosting a command palette."""

    CSS = """
    #status {
        height: 1fr;
        content-align: center middle;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, controller: PaletteController, **kwargs):
        super().__init__(**kwargs)
        self.controller = controller
        self._unsubscribe_open = None

    def compose(self) -> ComposeResult:
        shortcuts = [
            s for mode in self.controller.modes.values() for s in mode.config.shortcut
        ]
        hint = f"Press {' or '.join(shortcuts)} to open the palette" if shortcuts else "hyperpalette"
        with Vertical():
            yield Static(hint, id="status")
        yield Footer()

    def on_mount(self) -> None:
        self.controller.register_palette_shortcuts()
        self._unsubscribe_open = self.controller.states.open.subscribe(self._on_open)

    def on_unmount(self) -> None:
        if self._unsubscribe_open is not None:
            self._unsubscribe_open()
        self.controller.destroy()

    def set_status(self, text: str) -> None:
        """Show ``text`` in the status area."""
        self.query_one("#status", Static).update(text)

    def _on_open(self, value: bool) -> None:
        if value and not isinstance(self.screen, PaletteScreen):
            logger.debug("Showing palette screen")
            self.push_screen(PaletteScreen(self.controller), self._on_palette_dismissed)

    def _on_palette_dismissed(self, result=None) -> None:
        # Dismissed from the UI side (e.g. screen popped) without closing
        self.controller.close_palette()

    async def on_key(self, event) -> None:
        if isinstance(self.screen, PaletteScreen):
            return
        if await self.controller.key_bindings.dispatch(event.key, KeyScope.GLOBAL):
            event.stop()
            event.prevent_default()
