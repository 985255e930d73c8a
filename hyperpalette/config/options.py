"""
Palette options.

``PaletteOptions`` gathers everything ``PaletteController`` is created from.
``PaletteOptions.from_dict`` validates a plain mapping (e.g. parsed YAML)
and applies the defaults below.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Optional

from hyperpalette.exceptions import ConfigurationError

from .constants import DEFAULT_CLOSE_ACTION, DEFAULT_DEBOUNCE_MS, PALETTE_ELEMENT_NAMES, CloseAction


@dataclass
class PaletteDefaults:
    """Initial palette state."""

    open: bool = False
    search: str = ""
    placeholder: Optional[str] = None
    mode: Optional[str] = None
    ids: dict[str, str] = field(default_factory=dict)  # Element name -> id handed to the UI

    @classmethod
    def from_dict(cls, data: Any) -> PaletteDefaults:
        if data is None:
            return cls()
        if isinstance(data, PaletteDefaults):
            return data
        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid defaults: {data!r}", setting="defaults")

        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            raise ConfigurationError(f"Unknown default(s): {sorted(unknown)}", setting="defaults")

        search = data.get("search", "")
        if not isinstance(search, str):
            raise ConfigurationError(f"Invalid default search: {search!r}", setting="defaults.search")

        ids = data.get("ids") or {}
        if not isinstance(ids, dict) or set(ids) - set(PALETTE_ELEMENT_NAMES):
            raise ConfigurationError(
                f"Invalid element ids, expected keys among {list(PALETTE_ELEMENT_NAMES)}",
                setting="defaults.ids",
            )

        return cls(
            open=bool(data.get("open", False)),
            search=search,
            placeholder=data.get("placeholder"),
            mode=data.get("mode"),
            ids={str(k): str(v) for k, v in ids.items()},
        )


@dataclass
class PaletteOptions:
    """
    Options of a palette.

    Attributes:
        modes: Mode name -> mode options (see ``build_modes``)
        close_action: Default close action of every mode
        close_on_click_outside: Close when the UI reports a click outside the panel
        close_on_escape: Bind escape to close while the palette has focus
        debounce: Milliseconds between the last keystroke and the search run
        defaults: Initial state
        portal: Opaque mount target handed to the UI layer
        reset_on_open: Reset the input when the palette opens
        open: External observable driving the open state
        placeholder: External observable driving the input placeholder
    """

    modes: Any
    close_action: CloseAction = DEFAULT_CLOSE_ACTION
    close_on_click_outside: bool = True
    close_on_escape: bool = True
    debounce: int = DEFAULT_DEBOUNCE_MS
    defaults: PaletteDefaults = field(default_factory=PaletteDefaults)
    portal: Any = None
    reset_on_open: bool = False
    open: Any = None
    placeholder: Any = None

    def __post_init__(self) -> None:
        if not self.modes:
            raise ConfigurationError("At least one mode is required", setting="modes")
        try:
            self.close_action = CloseAction(self.close_action)
        except ValueError:
            raise ConfigurationError(
                f"Invalid close_action: {self.close_action!r}", setting="close_action"
            ) from None
        if isinstance(self.debounce, bool) or not isinstance(self.debounce, (int, float)):
            raise ConfigurationError(f"Invalid debounce: {self.debounce!r}", setting="debounce")
        self.defaults = PaletteDefaults.from_dict(self.defaults)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PaletteOptions:
        """Build options from a mapping, rejecting unknown keys."""
        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid palette options: {data!r}")
        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            raise ConfigurationError(f"Unknown palette option(s): {sorted(unknown)}")
        if "modes" not in data:
            raise ConfigurationError("Missing required option 'modes'", setting="modes")
        return cls(**{k: v for k, v in data.items() if v is not None or k == "modes"})
