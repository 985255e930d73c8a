"""
Centralized constants for hyperpalette.

Every policy value accepted by a mode or by the palette lives here, together
with the defaults applied when an option is omitted.
"""

from enum import Enum
from pathlib import Path

# =============================================================================
# PATHS
# =============================================================================

HYPERPALETTE_CONFIG_DIR = Path.home() / ".config" / "hyperpalette"
DEFAULT_PALETTE_FILE = HYPERPALETTE_CONFIG_DIR / "palette.yaml"
DEFAULT_LOG_FILE = HYPERPALETTE_CONFIG_DIR / "hyperpalette.log"

# =============================================================================
# POLICIES
# =============================================================================


class ItemType(str, Enum):
    """Item variants. Each mode holds items of exactly one variant."""

    ACTIONABLE = "ACTIONABLE"
    NAVIGABLE = "NAVIGABLE"
    SEARCHABLE = "SEARCHABLE"


class CloseOn(str, Enum):
    """Lifecycle point at which a triggered item closes the palette."""

    ALWAYS = "ALWAYS"
    NEVER = "NEVER"
    ON_TRIGGER = "ON_TRIGGER"
    ON_CANCEL = "ON_CANCEL"  # Actionable only
    ON_SUCCESS = "ON_SUCCESS"
    ON_ERROR = "ON_ERROR"


ACTIONABLE_CLOSE_ON = frozenset(CloseOn)
NAVIGABLE_CLOSE_ON = frozenset(CloseOn) - {CloseOn.ON_CANCEL}
SEARCHABLE_CLOSE_ON = NAVIGABLE_CLOSE_ON

CLOSE_ON_BY_TYPE = {
    ItemType.ACTIONABLE: ACTIONABLE_CLOSE_ON,
    ItemType.NAVIGABLE: NAVIGABLE_CLOSE_ON,
    ItemType.SEARCHABLE: SEARCHABLE_CLOSE_ON,
}


class CloseAction(str, Enum):
    """What happens to the input text and open state when a close resolves."""

    NO_ACTION = "NO_ACTION"
    CLOSE = "CLOSE"
    RESET = "RESET"
    KEEP_CLOSE = "KEEP_CLOSE"
    RESET_CLOSE = "RESET_CLOSE"


class OpenAction(str, Enum):
    """What happens to the mode state when the palette opens in a mode."""

    NO_ACTION = "NO_ACTION"
    RESET = "RESET"
    UPDATE = "UPDATE"


class UpdateAction(str, Enum):
    """When results are recomputed after items of a mode change."""

    NO_ACTION = "NO_ACTION"
    UPDATE = "UPDATE"
    UPDATE_IF_OPEN = "UPDATE_IF_OPEN"
    UPDATE_IF_CURRENT = "UPDATE_IF_CURRENT"


class EmptyMode(str, Enum):
    """Which results to show when the query is empty."""

    ALL = "ALL"
    HISTORY = "HISTORY"
    NONE = "NONE"


class SortMode(str, Enum):
    """How the sorted raw item view relates to the sort strategy."""

    SORTED = "SORTED"
    REVERSED = "REVERSED"
    UNSORTED = "UNSORTED"


class RequestSourceType(str, Enum):
    """How an item resolution was requested."""

    SUBMIT = "submit"
    SHORTCUT = "shortcut"
    CLICK = "click"


# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_DEBOUNCE_MS = 150
DEFAULT_CLOSE_ACTION = CloseAction.RESET
DEFAULT_CLOSE_ON = CloseOn.ALWAYS
DEFAULT_EMPTY_MODE = EmptyMode.ALL
DEFAULT_SORT_MODE = SortMode.SORTED
DEFAULT_UPDATE_ACTION = UpdateAction.UPDATE_IF_OPEN

# Fuzzy searcher: minimum score (0-1) for a result to be returned
DEFAULT_SEARCH_THRESHOLD = 0.3

ESCAPE_SHORTCUT = "escape"

# Element ids handed to the UI layer
PALETTE_ELEMENT_NAMES = ("palette", "panel", "form", "label", "input")
