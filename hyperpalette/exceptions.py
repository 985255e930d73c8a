"""Custom exception hierarchy for hyperpalette.

Configuration and lookup errors are raised synchronously to the caller.
Errors raised by an item's hooks are never re-raised: they are wrapped in an
ActionExecutionError and published through the palette ``error`` state so the
palette stays usable after a failed action.

Exception Hierarchy:
    HyperPaletteError (base)
    ├── ConfigurationError - malformed palette/mode options
    │   └── InvalidConfigError - invalid option found while running
    ├── UnknownModeError - mode name not registered
    ├── DuplicateIdError - item id already registered
    ├── InvalidItemError - malformed item definition
    ├── InvalidSelectionError - submit/click resolved to no item
    └── ActionExecutionError - error raised by an item hook (stored, not raised)

Usage:
    from hyperpalette.exceptions import UnknownModeError

    if name not in modes:
        raise UnknownModeError(f"Mode '{name}' was not registered", mode=name)
"""

from typing import Any, Optional


class HyperPaletteError(Exception):
    """Base exception for all hyperpalette errors.

    Attributes:
        message: Human-readable error description
        context: Additional context about the error (e.g., ids, mode names)
    """

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(HyperPaletteError):
    """Palette or mode configuration error."""

    def __init__(
        self,
        message: str = "Configuration error",
        *,
        setting: Optional[str] = None,
        **context: Any,
    ) -> None:
        if setting:
            context["setting"] = setting
        super().__init__(message, **context)


class InvalidConfigError(ConfigurationError):
    """A configuration value turned out to be invalid while the palette was running."""

    pass


# =============================================================================
# Registry Errors
# =============================================================================


class UnknownModeError(HyperPaletteError):
    """The requested mode was never configured."""

    def __init__(
        self,
        message: str = "Unknown mode",
        *,
        mode: Optional[str] = None,
        **context: Any,
    ) -> None:
        if mode is not None:
            context["mode"] = mode
        self.mode = mode
        super().__init__(message, **context)


class DuplicateIdError(HyperPaletteError):
    """An item with the same id is already registered."""

    def __init__(
        self,
        message: str = "Duplicate item id",
        *,
        id: Optional[str] = None,
        **context: Any,
    ) -> None:
        if id is not None:
            context["id"] = id
        self.id = id
        super().__init__(message, **context)


class InvalidItemError(HyperPaletteError):
    """An item definition is malformed."""

    pass


# =============================================================================
# Resolution Errors
# =============================================================================


class InvalidSelectionError(HyperPaletteError):
    """A submit or click did not resolve to a result item."""

    def __init__(
        self,
        message: str = "Invalid selection",
        *,
        index: Optional[int] = None,
        **context: Any,
    ) -> None:
        if index is not None:
            context["index"] = index
        super().__init__(message, **context)


class ActionExecutionError(HyperPaletteError):
    """Wraps an error raised by an item hook during resolution.

    Instances are published through the palette ``error`` state instead of
    being raised.
    """

    def __init__(self, error: BaseException, item: Any, source: Any, mode: str) -> None:
        self.error = error
        self.item = item
        self.source = source
        self.mode = mode
        super().__init__(
            f"Action failed: {error}",
            item_id=getattr(item, "id", None),
            mode=mode,
        )
