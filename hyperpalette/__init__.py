"""
hyperpalette - command palette engine

Modes partition items by prefix and variant; the controller turns input into
ranked results, moves a selection cursor and resolves triggered items.

Usage:
    from hyperpalette import Actionable, create_palette

    palette = create_palette({"modes": {"commands": {"type": "ACTIONABLE", "prefix": "", "map_to_search": lambda i: i.name}}})
    palette.register_item("commands", Actionable("Reload", on_action=reload))
    palette.open_palette()
"""

__version__ = "0.3.0"

from hyperpalette.config.constants import (
    CloseAction,
    CloseOn,
    EmptyMode,
    ItemType,
    OpenAction,
    SortMode,
    UpdateAction,
)
from hyperpalette.config.options import PaletteDefaults, PaletteOptions
from hyperpalette.core import (
    FuzzySearcher,
    Observable,
    PaletteController,
    ResolutionOutcome,
    create_palette,
)
from hyperpalette.exceptions import (
    ActionExecutionError,
    ConfigurationError,
    DuplicateIdError,
    HyperPaletteError,
    InvalidConfigError,
    InvalidItemError,
    InvalidSelectionError,
    UnknownModeError,
)
from hyperpalette.keybindings import KeyBindingService, KeyScope
from hyperpalette.models import Actionable, Navigable, RequestSource, Searchable

__all__ = [
    "__version__",
    "ActionExecutionError",
    "Actionable",
    "CloseAction",
    "CloseOn",
    "ConfigurationError",
    "DuplicateIdError",
    "EmptyMode",
    "FuzzySearcher",
    "HyperPaletteError",
    "InvalidConfigError",
    "InvalidItemError",
    "InvalidSelectionError",
    "ItemType",
    "KeyBindingService",
    "KeyScope",
    "Navigable",
    "Observable",
    "OpenAction",
    "PaletteController",
    "PaletteDefaults",
    "PaletteOptions",
    "RequestSource",
    "ResolutionOutcome",
    "Searchable",
    "SortMode",
    "UnknownModeError",
    "UpdateAction",
    "create_palette",
]
