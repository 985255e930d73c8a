"""
Item registry.

Owns the palette modes and keeps, for every mode, the raw item list, the
sorted view, the items observable, the search index and the item shortcuts
consistent across registration and unregistration.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Any, Optional, Union

from hyperpalette.exceptions import DuplicateIdError, InvalidItemError, UnknownModeError
from hyperpalette.keybindings import KeyBindingService, KeyScope
from hyperpalette.models.items import Actionable, HyperItem, HyperItemId
from hyperpalette.utils.hooks import fire_and_forget

from .modes import PaletteMode

logger = logging.getLogger(__name__)

Cleanup = Callable[[], None]
ItemMatcher = Union[HyperItemId, HyperItem, Callable[[HyperItem], bool]]
ShortcutHandlerFactory = Callable[[PaletteMode, HyperItem, str], Callable[[], Any]]
ChangeListener = Callable[[PaletteMode], None]


def _as_list(value: Any) -> list:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class ItemRegistry:
    """
    Registry of modes and their items.

    Args:
        modes: Modes by name, as built by ``build_modes``
        key_bindings: Service the item shortcuts are bound through
        shortcut_handler: Builds the handler run when an item shortcut fires
        on_change: Called with the mode after its items changed
    """

    def __init__(
        self,
        modes: dict[str, PaletteMode],
        key_bindings: KeyBindingService,
        shortcut_handler: ShortcutHandlerFactory,
        on_change: Optional[ChangeListener] = None,
    ):
        self._modes = modes
        self._key_bindings = key_bindings
        self._shortcut_handler = shortcut_handler
        self._on_change = on_change
        self._shortcut_cleanup: dict[HyperItemId, list[Cleanup]] = {}

    @property
    def modes(self) -> dict[str, PaletteMode]:
        return self._modes

    def get(self, mode: str) -> PaletteMode:
        """Get a mode by name."""
        state = self._modes.get(mode)
        if state is None:
            raise UnknownModeError(f"Mode '{mode}' was not registered", mode=mode)
        return state

    def find_owner(self, item_id: HyperItemId) -> Optional[PaletteMode]:
        """Get the mode holding the item with ``item_id``."""
        for state in self._modes.values():
            if state.index_of(item_id) != -1:
                return state
        return None

    # ------------------------------------------------------------------
    # Shortcuts and teardown
    # ------------------------------------------------------------------

    def _bind_shortcuts(self, state: PaletteMode, item: HyperItem) -> None:
        if not isinstance(item, Actionable) or not item.shortcut:
            return
        cleanup: list[Cleanup] = []
        for shortcut in item.shortcut:
            cleanup.append(
                self._key_bindings.bind(
                    KeyScope.GLOBAL,
                    shortcut,
                    self._shortcut_handler(state, item, shortcut),
                    description=item.name,
                )
            )
        self._shortcut_cleanup[item.id] = cleanup

    def _unbind_shortcuts(self, item: HyperItem) -> None:
        for unbind in self._shortcut_cleanup.pop(item.id, []):
            unbind()

    def _teardown(self, state: PaletteMode, item: HyperItem) -> None:
        """Release everything tied to ``item``: shortcuts, hook, index entry."""
        self._unbind_shortcuts(item)
        on_unregister = getattr(item, "on_unregister", None)
        if on_unregister is not None:
            fire_and_forget(on_unregister, item, what=f"on_unregister of '{item.id}'")
        state.searcher.remove(item)

    def _remove_at(self, state: PaletteMode, idx: int) -> HyperItem:
        removed = state.raw_items.pop(idx)
        self._teardown(state, removed)
        for i, item in enumerate(state.raw_items_sorted):
            if item is removed:
                del state.raw_items_sorted[i]
                break
        return removed

    def _changed(self, state: PaletteMode) -> None:
        state.sync_items()
        if self._on_change is not None:
            self._on_change(state)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def _validate_candidates(
        self,
        state: PaletteMode,
        candidates: list[HyperItem],
        override: bool,
        silent: bool,
    ) -> list[HyperItem]:
        """Drop the candidates to skip; raise before anything is mutated."""
        accepted: list[HyperItem] = []
        seen: set[HyperItemId] = {item.id for item in state.raw_items}
        for item in candidates:
            if not isinstance(item, HyperItem):
                raise InvalidItemError(f"Expected a palette item, got {item!r}", mode=state.name)
            if item.type != state.type:
                raise InvalidItemError(
                    f"Mode '{state.name}' holds {state.type.value.lower()} items, "
                    f"got a {item.type.value.lower()} item",
                    mode=state.name,
                    id=item.id,
                )

            owner = self.find_owner(item.id)
            if owner is not None and owner is not state:
                if silent:
                    logger.debug(f"Skipping '{item.id}', already registered in mode '{owner.name}'")
                    continue
                raise DuplicateIdError(
                    f"Item id already registered in mode '{owner.name}'", id=item.id
                )

            if item.id in seen and not override:
                if silent:
                    logger.debug(f"Skipping duplicate item '{item.id}' in mode '{state.name}'")
                    continue
                raise DuplicateIdError(
                    f"Item already exists in mode '{state.name}'", id=item.id
                )

            seen.add(item.id)
            accepted.append(item)
        return accepted

    def register(
        self,
        mode: str,
        item: Union[HyperItem, Iterable[HyperItem]],
        override: bool = False,
        silent: bool = True,
    ) -> Cleanup:
        """
        Register one or many items in ``mode``.

        Args:
            mode: Name of the mode
            item: Item or list of items
            override: Replace items whose id is already registered
            silent: Skip duplicates instead of raising DuplicateIdError

        Returns:
            A callable unregistering the items newly added by this call
        """
        state = self.get(mode)
        candidates = self._validate_candidates(state, _as_list(item), override, silent)
        new_items: list[HyperItem] = []

        for new_item in candidates:
            state.cache_sort_key(new_item)
            found_idx = state.index_of(new_item.id)

            if found_idx == -1:
                state.raw_items.append(new_item)
                state.searcher.add(new_item)
                self._bind_shortcuts(state, new_item)
                new_items.append(new_item)
                continue

            removed = state.raw_items[found_idx]
            self._teardown(state, removed)
            state.raw_items[found_idx] = new_item
            for idx, added in enumerate(new_items):
                if added is removed:
                    # Replaced an item added by this same call
                    new_items[idx] = new_item
                    break
            self._bind_shortcuts(state, new_item)
            state.searcher.add(new_item)
            logger.debug(f"Replaced item '{new_item.id}' in mode '{mode}'")

        state.resort()
        logger.debug(f"Registered {len(candidates)} item(s) in mode '{mode}' ({len(new_items)} new)")
        self._changed(state)

        def unregister_new_items() -> None:
            removed_count = 0
            for new_item in new_items:
                for idx, existing in enumerate(state.raw_items):
                    if existing is new_item:
                        self._remove_at(state, idx)
                        removed_count += 1
                        break
            new_items.clear()
            if removed_count:
                self._changed(state)

        return unregister_new_items

    def unregister(self, mode: str, matcher: Union[ItemMatcher, list[ItemMatcher]]) -> int:
        """
        Unregister the items of ``mode`` matched by ``matcher``.

        A matcher is an id (first hit), an item (identity, first hit) or a
        predicate (every hit).

        Returns:
            Number of removed items
        """
        state = self.get(mode)
        removed_count = 0

        for selector in _as_list(matcher):
            to_remove: list[int] = []
            if isinstance(selector, str):
                idx = state.index_of(selector)
                if idx != -1:
                    to_remove.append(idx)
            elif isinstance(selector, HyperItem):
                for i, item in enumerate(state.raw_items):
                    if item is selector:
                        to_remove.append(i)
                        break
            elif callable(selector):
                to_remove = [i for i, item in enumerate(state.raw_items) if selector(item)]
            else:
                raise TypeError(f"Invalid item matcher: {selector!r}")

            for idx in reversed(to_remove):
                self._remove_at(state, idx)
            removed_count += len(to_remove)

        if removed_count == 0:
            return 0

        logger.debug(f"Unregistered {removed_count} item(s) from mode '{mode}'")
        self._changed(state)
        return removed_count

    def clear(self) -> None:
        """Release the shortcuts of every registered item."""
        for item_id in list(self._shortcut_cleanup):
            for unbind in self._shortcut_cleanup.pop(item_id):
                unbind()
