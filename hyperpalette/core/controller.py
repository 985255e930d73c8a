"""
Palette controller.

Top-level orchestrator of a palette: owns the active mode pointer, the open
flag, the search text and the error slot, and routes input, selection and
triggers to the modes, the selection cursor and the action resolver.

Routes queries on prefix: text starting with a mode's non-empty prefix
activates that mode, anything else falls back to the mode with the empty
prefix.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from functools import partial
from typing import Any, Optional, Union

from hyperpalette.config.constants import (
    ESCAPE_SHORTCUT,
    PALETTE_ELEMENT_NAMES,
    CloseAction,
    EmptyMode,
    OpenAction,
    UpdateAction,
)
from hyperpalette.config.options import PaletteOptions
from hyperpalette.exceptions import (
    ActionExecutionError,
    ConfigurationError,
    InvalidConfigError,
    InvalidSelectionError,
)
from hyperpalette.keybindings import KeyBindingService, KeyScope
from hyperpalette.models.items import HyperItem, HyperItemId, RequestSource, generate_id

from .modes import PaletteMode, build_modes
from .observable import Observable, Unsubscribe
from .registry import Cleanup, ItemMatcher, ItemRegistry
from .resolver import ActionResolver, ResolutionOutcome
from .searcher import SearcherFactory, default_searcher_factory
from .selection import Selection, SelectionCursor

logger = logging.getLogger(__name__)


@dataclass
class ModeStates:
    """Observables of a single mode."""

    items: Observable[list[HyperItem]]
    results: Observable[list[HyperItem]]
    history: Observable[list[HyperItemId]]
    current: Observable[Optional[HyperItem]]


@dataclass
class PaletteStates:
    """Observables exposed to the UI layer and to callers."""

    open: Observable[bool]
    error: Observable[Optional[ActionExecutionError]]
    mode: Observable[str]
    placeholder: Observable[Optional[str]]
    portal: Observable[Any]
    search_input: Observable[str]
    selected: Observable[Selection]
    modes: dict[str, ModeStates]


def _initial_mode(modes: dict[str, PaletteMode], search: str, initial: Optional[str]) -> PaletteMode:
    if search:
        for mode in modes.values():
            if mode.prefix and search.startswith(mode.prefix):
                return mode
        for mode in modes.values():
            if not mode.prefix:
                return mode
    if initial is not None:
        mode = modes.get(initial)
        if mode is None:
            raise ConfigurationError(
                f"Invalid initial mode: '{initial}', expected one of {list(modes)}",
                setting="defaults.mode",
            )
        return mode
    return next(iter(modes.values()))


class PaletteController:
    """
    Command palette engine.

    Args:
        options: Palette options
        key_bindings: Service item and palette shortcuts are bound through
        searcher_factory: Builds the search index of each mode
    """

    def __init__(
        self,
        options: PaletteOptions,
        *,
        key_bindings: Optional[KeyBindingService] = None,
        searcher_factory: Optional[SearcherFactory] = None,
    ):
        self._options = options
        self.key_bindings = key_bindings if key_bindings is not None else KeyBindingService()
        self._registry = ItemRegistry(
            build_modes(options.modes, searcher_factory or default_searcher_factory),
            self.key_bindings,
            self._item_shortcut_handler,
            on_change=self._on_items_changed,
        )

        defaults = options.defaults
        self._mode = _initial_mode(self._registry.modes, defaults.search, defaults.mode)
        self._selection = SelectionCursor()
        self._stale: set[str] = set()
        self._debounce_handle: Optional[asyncio.TimerHandle] = None
        self._palette_shortcuts: list[Cleanup] = []
        self._subscriptions: list[Unsubscribe] = []

        self.ids = {name: defaults.ids.get(name) or generate_id() for name in PALETTE_ELEMENT_NAMES}
        self.states = PaletteStates(
            open=options.open if options.open is not None else Observable(defaults.open),
            error=Observable(None),
            mode=Observable(self._mode.name),
            placeholder=(
                options.placeholder if options.placeholder is not None else Observable(defaults.placeholder)
            ),
            portal=Observable(options.portal),
            search_input=Observable(defaults.search),
            selected=self._selection.state,
            modes={
                name: ModeStates(
                    items=mode.items,
                    results=mode.results,
                    history=mode.history,
                    current=mode.current,
                )
                for name, mode in self._registry.modes.items()
            },
        )
        self._resolver = ActionResolver(self.states.error, self._resolve_close_action)
        self._subscriptions.append(self.states.open.subscribe(self._on_open_changed))

        logger.debug(
            f"Created palette with modes {list(self._registry.modes)}, initial mode '{self._mode.name}'"
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def options(self) -> PaletteOptions:
        return self._options

    @property
    def active_mode(self) -> PaletteMode:
        return self._mode

    @property
    def modes(self) -> dict[str, PaletteMode]:
        return self._registry.modes

    @property
    def is_open(self) -> bool:
        return bool(self.states.open.value)

    def mode_state(self, name: str) -> PaletteMode:
        """Get a mode by name; raises UnknownModeError."""
        return self._registry.get(name)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_item(
        self,
        mode: str,
        item: Union[HyperItem, Iterable[HyperItem]],
        override: bool = False,
        silent: bool = True,
    ) -> Cleanup:
        """Register items in ``mode``; returns a callable unregistering the new ones."""
        return self._registry.register(mode, item, override=override, silent=silent)

    def unregister_item(self, mode: str, matcher: Union[ItemMatcher, list[ItemMatcher]]) -> int:
        """Unregister the items of ``mode`` matched by ``matcher``."""
        return self._registry.unregister(mode, matcher)

    def _on_items_changed(self, mode: PaletteMode) -> None:
        action = mode.config.update_action
        if action == UpdateAction.NO_ACTION:
            return

        active = mode is self._mode
        if action == UpdateAction.UPDATE_IF_OPEN:
            refresh = active and self.is_open
        else:
            refresh = active

        if refresh:
            self._update_results()
        elif action == UpdateAction.UPDATE:
            self._stale.add(mode.name)

    def _item_shortcut_handler(self, mode: PaletteMode, item: HyperItem, shortcut: str) -> Callable[[], Any]:
        async def handler() -> ResolutionOutcome:
            return await self._resolver.resolve(mode, item, RequestSource.from_shortcut(shortcut))

        return handler

    # ------------------------------------------------------------------
    # Search pipeline
    # ------------------------------------------------------------------

    def _search_and_update(self, query: str) -> None:
        mode = self._mode
        if query == "":
            empty_mode = mode.config.empty_mode
            if empty_mode == EmptyMode.ALL:
                results = list(mode.raw_items_sorted)
            elif empty_mode == EmptyMode.HISTORY:
                results = []
                for item_id in mode.history.value:
                    item = mode.get(item_id)
                    if item is not None:
                        results.append(item)
            elif empty_mode == EmptyMode.NONE:
                results = []
            else:
                raise InvalidConfigError(f"Invalid empty mode: {empty_mode!r}", setting="empty_mode")
        else:
            results = mode.searcher.search(query)
            mode.sort.sorter(results)

        mode.results.set(results)
        self._selection.reset(results)
        self._stale.discard(mode.name)

    def _update_results(self) -> None:
        self._search_and_update(self._mode.strip_prefix(self.states.search_input.value))

    def _set_empty_results(self) -> None:
        self._mode.results.set([])
        self._selection.clear()

    def _match_mode(self, text: str) -> Optional[PaletteMode]:
        fallback = None
        for mode in self._registry.modes.values():
            if not mode.prefix:
                fallback = fallback or mode
            elif text.startswith(mode.prefix):
                return mode
        return fallback

    def _activate(self, mode: PaletteMode) -> None:
        if mode is self._mode:
            return
        logger.debug(f"Switching mode '{self._mode.name}' -> '{mode.name}'")
        self._cancel_debounce()
        self._mode = mode
        self.states.mode.set(mode.name)

    def _cancel_debounce(self) -> None:
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None

    def _run_debounced(self, mode: PaletteMode, query: str) -> None:
        self._debounce_handle = None
        if mode is not self._mode:
            return
        self._search_and_update(query)

    def search(self, pattern: str) -> list[HyperItem]:
        """Run the pipeline on ``pattern`` right away, leaving the input text untouched."""
        self._cancel_debounce()
        self._search_and_update(self._mode.strip_prefix(pattern.strip()))
        return self._mode.results.value

    def input(self, text: str) -> None:
        """
        Handle a change of the input text.

        Switches mode when the text selects another prefix, then runs the
        pipeline after ``debounce`` ms. A mode switch or a non-positive
        debounce runs it immediately.
        """
        self.states.search_input.set(text)
        debounce = self._options.debounce
        force = debounce <= 0

        if not self._mode.prefix or not text.startswith(self._mode.prefix):
            mode = self._match_mode(text)
            if mode is None:
                self._cancel_debounce()
                self._set_empty_results()
                return
            if mode is not self._mode:
                force = True
                self._activate(mode)

        self._cancel_debounce()
        query = self._mode.strip_prefix(text)
        if force:
            self._search_and_update(query)
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._search_and_update(query)
            return
        self._debounce_handle = loop.call_later(debounce / 1000, self._run_debounced, self._mode, query)

    # ------------------------------------------------------------------
    # Open / close
    # ------------------------------------------------------------------

    def _effective_close_action(self, mode: PaletteMode, item: Optional[HyperItem]) -> CloseAction:
        if item is not None and item.close_action is not None:
            return item.close_action
        if mode.config.close_action is not None:
            return mode.config.close_action
        return self._options.close_action

    def _resolve_close_action(self, mode: Optional[PaletteMode] = None, item: Optional[HyperItem] = None) -> None:
        """Apply the close action of ``item`` (or of ``mode``) to the input and open state."""
        action = self._effective_close_action(mode or self._mode, item)
        active = self._mode
        active.last_input = self.states.search_input.value

        if action in (CloseAction.RESET, CloseAction.RESET_CLOSE):
            self._cancel_debounce()
            self.states.search_input.set(active.prefix)
            self._search_and_update("")

        if action == CloseAction.CLOSE:
            self.states.open.set(False)
            self._selection.clear()
        elif action in (CloseAction.KEEP_CLOSE, CloseAction.RESET_CLOSE) and not self.is_open:
            # Reopens a palette closed before the action resolved
            self.states.open.set(True)

    def open_palette(self, mode: Optional[str] = None) -> None:
        """Open the palette, in ``mode`` when given."""
        target = self._mode if mode is None else self._registry.get(mode)
        self._activate(target)
        self.states.open.set(True)

        action = target.config.open_action
        if action is None:
            action = OpenAction.RESET if self._options.reset_on_open else OpenAction.NO_ACTION

        if action == OpenAction.RESET:
            target.current.set(None)
            self._cancel_debounce()
            self.states.search_input.set(target.prefix)
            self._update_results()
        elif action == OpenAction.UPDATE or target.name in self._stale:
            self._update_results()
        logger.debug(f"Opened palette in mode '{target.name}' ({action.value})")

    def close_palette(self) -> None:
        if not self.is_open:
            return
        self.states.open.set(False)
        self._resolve_close_action()

    def toggle_palette(self, mode: Optional[str] = None) -> None:
        if self.is_open:
            self.close_palette()
        else:
            self.open_palette(mode)

    def click_outside(self) -> None:
        """Handle a click outside the palette panel."""
        if self._options.close_on_click_outside:
            self.close_palette()

    def _on_open_changed(self, value: bool) -> None:
        if not value:
            self._cancel_debounce()

    # ------------------------------------------------------------------
    # Shortcuts
    # ------------------------------------------------------------------

    def register_palette_shortcuts(self) -> None:
        """Bind the mode shortcuts (open in mode) and escape (close)."""
        if self._palette_shortcuts:
            return
        for mode in self._registry.modes.values():
            for shortcut in mode.config.shortcut:
                self._palette_shortcuts.append(
                    self.key_bindings.bind(
                        KeyScope.GLOBAL,
                        shortcut,
                        partial(self.open_palette, mode.name),
                        description=f"Open palette ({mode.name})",
                    )
                )
        if self._options.close_on_escape:
            self._palette_shortcuts.append(
                self.key_bindings.bind(
                    KeyScope.PALETTE, ESCAPE_SHORTCUT, self.close_palette, description="Close palette"
                )
            )

    def unregister_palette_shortcuts(self) -> None:
        for unbind in self._palette_shortcuts:
            unbind()
        self._palette_shortcuts.clear()

    # ------------------------------------------------------------------
    # Selection and triggers
    # ------------------------------------------------------------------

    def select_next(self) -> None:
        self._selection.select_next(self._mode.results.value)

    def select_previous(self) -> None:
        self._selection.select_previous(self._mode.results.value)

    def select_index(self, index: int) -> HyperItem:
        return self._selection.select_index(self._mode.results.value, index)

    async def submit(self, event: Any = None) -> Optional[ResolutionOutcome]:
        """
        Resolve the selected result (the first one when nothing is selected).

        Returns:
            The resolution outcome, or None when there are no results
        """
        mode = self._mode
        results = mode.results.value
        if not results:
            return None

        index = self._selection.index
        if index < 0:
            item = self._selection.select_index(results, 0)
        elif index < len(results):
            item = results[index]
        else:
            raise InvalidSelectionError(
                f"Selected index is out of the results of mode '{mode.name}'", index=index
            )
        return await self._resolver.resolve(mode, item, RequestSource.submit(event))

    async def click(self, item_id: HyperItemId, event: Any = None) -> ResolutionOutcome:
        """Resolve the result with ``item_id``."""
        mode = self._mode
        for item in mode.results.value:
            if item.id == item_id:
                return await self._resolver.resolve(mode, item, RequestSource.click(event))
        raise InvalidSelectionError(f"No result with id '{item_id}' in mode '{mode.name}'")

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def destroy(self) -> None:
        """Release every key binding and internal subscription."""
        self._cancel_debounce()
        self.unregister_palette_shortcuts()
        self._registry.clear()
        for unsubscribe in self._subscriptions:
            unsubscribe()
        self._subscriptions.clear()
        logger.debug("Destroyed palette")


def create_palette(
    options: Union[PaletteOptions, dict[str, Any]],
    *,
    key_bindings: Optional[KeyBindingService] = None,
    searcher_factory: Optional[SearcherFactory] = None,
) -> PaletteController:
    """Create a palette from options or from a plain mapping of options."""
    if not isinstance(options, PaletteOptions):
        options = PaletteOptions.from_dict(options)
    return PaletteController(options, key_bindings=key_bindings, searcher_factory=searcher_factory)
