"""
Action resolution.

Runs the request -> action -> error lifecycle of a triggered item and decides,
from the item's ``close_on`` policy, when the palette close action resolves:

- ON_TRIGGER: before any hook runs
- ON_CANCEL: after ``on_request`` vetoed the action (Actionable only)
- ON_SUCCESS / ON_ERROR: after the hook succeeded / raised
- ALWAYS: on cancel, success and error
- NEVER: never

Errors raised by hooks are published through the palette ``error`` state as
ActionExecutionError and never re-raised.
"""

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any, Optional

from hyperpalette.config.constants import CloseOn, ItemType
from hyperpalette.exceptions import ActionExecutionError
from hyperpalette.models.items import Actionable, HyperItem, Navigable, RequestSource, Searchable
from hyperpalette.utils.hooks import fire_and_forget, maybe_await

from .modes import NavigableModeConfig, PaletteMode, SearchableModeConfig
from .observable import Observable

logger = logging.getLogger(__name__)

CloseResolver = Callable[[PaletteMode, Optional[HyperItem]], None]


class ResolutionOutcome(Enum):
    """Result of a single item resolution."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"
    BUSY = "busy"  # Another resolution is in flight on the same mode
    UNHANDLED = "unhandled"  # The mode has no hook for this item


class ActionResolver:
    """
    Per-variant resolution state machine.

    Args:
        error: Palette error state, set on failure and cleared on success
        resolve_close: Resolves the close action for a mode/item
    """

    def __init__(self, error: Observable[Optional[ActionExecutionError]], resolve_close: CloseResolver):
        self._error = error
        self._resolve_close = resolve_close
        self._in_flight: set[str] = set()

    async def resolve(self, mode: PaletteMode, item: HyperItem, source: RequestSource) -> ResolutionOutcome:
        """Resolve ``item`` of ``mode`` requested through ``source``."""
        if mode.name in self._in_flight:
            logger.warning(f"Ignoring '{item.id}': a resolution is already running in mode '{mode.name}'")
            return ResolutionOutcome.BUSY

        self._in_flight.add(mode.name)
        try:
            if item.type == ItemType.ACTIONABLE:
                outcome = await self._resolve_actionable(mode, item, source)
            elif item.type == ItemType.NAVIGABLE:
                outcome = await self._resolve_navigable(mode, item, source)
            elif item.type == ItemType.SEARCHABLE:
                outcome = await self._resolve_searchable(mode, item, source)
            else:
                raise AssertionError(f"Unhandled item type: {item.type!r}")
        finally:
            self._in_flight.discard(mode.name)

        logger.debug(f"Resolved '{item.id}' in mode '{mode.name}' via {source.type.value}: {outcome.value}")
        return outcome

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _close_on(mode: PaletteMode, item: HyperItem) -> CloseOn:
        return item.close_on or mode.config.close_on

    def _fail(
        self,
        mode: PaletteMode,
        item: HyperItem,
        source: RequestSource,
        error: Exception,
        on_error: Optional[Callable[..., Any]],
    ) -> None:
        logger.info(f"Action of '{item.id}' in mode '{mode.name}' failed: {error}")
        self._error.set(ActionExecutionError(error, item, source, mode.name))
        if on_error is not None:
            fire_and_forget(on_error, error, item, source, what=f"on_error of '{item.id}'")

    async def _run_hook(
        self,
        mode: PaletteMode,
        item: HyperItem,
        source: RequestSource,
        hook: Callable[[], Any],
        on_error: Optional[Callable[..., Any]],
    ) -> ResolutionOutcome:
        """Run ``hook`` with the success/error/close flow shared by every variant."""
        close_on = self._close_on(mode, item)
        try:
            await maybe_await(hook())
            self._error.set(None)
        except Exception as e:
            self._fail(mode, item, source, e, on_error)
            if close_on in (CloseOn.ON_ERROR, CloseOn.ALWAYS):
                self._resolve_close(mode, item)
            return ResolutionOutcome.FAILED
        finally:
            mode.push_history(item.id)

        if close_on in (CloseOn.ON_SUCCESS, CloseOn.ALWAYS):
            self._resolve_close(mode, item)
        return ResolutionOutcome.SUCCEEDED

    def _trigger(self, mode: PaletteMode, item: HyperItem) -> None:
        mode.current.set(item)
        if self._close_on(mode, item) == CloseOn.ON_TRIGGER:
            self._resolve_close(mode, item)

    # ------------------------------------------------------------------
    # Variants
    # ------------------------------------------------------------------

    async def _resolve_actionable(
        self, mode: PaletteMode, item: Actionable, source: RequestSource
    ) -> ResolutionOutcome:
        self._trigger(mode, item)
        close_on = self._close_on(mode, item)

        try:
            rarg = await maybe_await(item.on_request(item, source))
        except Exception as e:
            self._fail(mode, item, source, e, item.on_error)
            mode.push_history(item.id)
            if close_on in (CloseOn.ON_ERROR, CloseOn.ALWAYS):
                self._resolve_close(mode, item)
            mode.current.set(None)
            return ResolutionOutcome.FAILED

        if rarg is False:
            logger.debug(f"Request of '{item.id}' was cancelled")
            if close_on in (CloseOn.ON_CANCEL, CloseOn.ALWAYS):
                self._resolve_close(mode, item)
                mode.current.set(None)
            return ResolutionOutcome.CANCELLED

        outcome = await self._run_hook(
            mode, item, source, lambda: item.on_action(item, source, rarg), item.on_error
        )
        mode.current.set(None)
        return outcome

    async def _resolve_navigable(
        self, mode: PaletteMode, item: Navigable, source: RequestSource
    ) -> ResolutionOutcome:
        config: NavigableModeConfig = mode.config  # type: ignore[assignment]

        def navigate() -> Any:
            if config.on_navigation is not None:
                return config.on_navigation(item)
            if item.external:
                return config.on_external(item.url)
            return config.on_local(item.url)

        self._trigger(mode, item)
        outcome = await self._run_hook(mode, item, source, navigate, config.on_error)
        mode.current.set(None)
        return outcome

    async def _resolve_searchable(
        self, mode: PaletteMode, item: Searchable, source: RequestSource
    ) -> ResolutionOutcome:
        config: SearchableModeConfig = mode.config  # type: ignore[assignment]
        if config.on_selection is None:
            logger.warning(f"Mode '{mode.name}' has no on_selection hook, '{item.id}' was not handled")
            return ResolutionOutcome.UNHANDLED

        self._trigger(mode, item)
        outcome = await self._run_hook(
            mode, item, source, lambda: config.on_selection(item, source), config.on_error
        )
        mode.current.set(None)
        return outcome
