"""
Palette modes.

A mode is a named, prefix-scoped partition of items of one variant. It owns
its configuration, the raw item collection (source of truth), the sorted view
of it, a search index, and the observable results/history/current state.

``build_modes`` validates the user's mode options and applies the per-variant
defaults.
"""

import logging
import webbrowser
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, fields
from typing import Any, Optional

from hyperpalette.config.constants import (
    CLOSE_ON_BY_TYPE,
    DEFAULT_CLOSE_ON,
    DEFAULT_EMPTY_MODE,
    DEFAULT_SORT_MODE,
    DEFAULT_UPDATE_ACTION,
    CloseAction,
    CloseOn,
    EmptyMode,
    ItemType,
    OpenAction,
    SortMode,
    UpdateAction,
)
from hyperpalette.exceptions import ConfigurationError
from hyperpalette.models.items import HyperItem, HyperItemId

from .observable import Observable
from .searcher import Searcher, SearcherFactory, default_searcher_factory

logger = logging.getLogger(__name__)


def _default_on_local(url: str) -> None:
    logger.warning(f"No local navigation handler configured, ignoring '{url}'")


@dataclass
class ModeConfig:
    """Options shared by every mode variant."""

    prefix: str
    map_to_search: Callable[[Any], str]
    shortcut: list[str] = field(default_factory=list)
    open_action: Optional[OpenAction] = None  # None: palette reset_on_open decides
    update_action: UpdateAction = DEFAULT_UPDATE_ACTION
    close_action: Optional[CloseAction] = None  # None: palette close_action applies
    empty_mode: EmptyMode = DEFAULT_EMPTY_MODE
    sort_by: Any = None  # None | list of attribute names | callable(items) sorting in place
    sort_mode: SortMode = DEFAULT_SORT_MODE
    close_on: CloseOn = DEFAULT_CLOSE_ON

    TYPE = ItemType.ACTIONABLE

    @property
    def type(self) -> ItemType:
        return self.TYPE


@dataclass
class ActionableModeConfig(ModeConfig):
    TYPE = ItemType.ACTIONABLE


@dataclass
class NavigableModeConfig(ModeConfig):
    on_external: Callable[[str], Any] = webbrowser.open_new_tab
    on_local: Callable[[str], Any] = _default_on_local
    on_navigation: Optional[Callable[..., Any]] = None  # Replaces on_external/on_local
    on_error: Optional[Callable[..., Any]] = None

    TYPE = ItemType.NAVIGABLE


@dataclass
class SearchableModeConfig(ModeConfig):
    on_selection: Optional[Callable[..., Any]] = None
    on_error: Optional[Callable[..., Any]] = None

    TYPE = ItemType.SEARCHABLE


CONFIG_CLASSES: dict[ItemType, type[ModeConfig]] = {
    ItemType.ACTIONABLE: ActionableModeConfig,
    ItemType.NAVIGABLE: NavigableModeConfig,
    ItemType.SEARCHABLE: SearchableModeConfig,
}

_ENUM_OPTIONS = {
    "open_action": OpenAction,
    "update_action": UpdateAction,
    "close_action": CloseAction,
    "empty_mode": EmptyMode,
    "sort_mode": SortMode,
    "close_on": CloseOn,
}


# =============================================================================
# Sort strategies
# =============================================================================


def default_item_sorter(items: list[HyperItem]) -> None:
    """Sort items in place by their cached sort key."""
    items.sort(key=lambda item: item.hcache.get("sort", ""))


def keys_mapper(keys: list[str]) -> Callable[[Any], str]:
    """Build a mapper concatenating the trimmed string attributes listed in ``keys``."""

    def mapper(item: Any) -> str:
        result = ""
        for key in keys:
            value = getattr(item, key, None)
            if isinstance(value, str):
                result += value.strip()
        return result

    return mapper


@dataclass(frozen=True)
class ModeSort:
    """Sort strategy chosen once when the mode is built."""

    kind: str  # "search" | "keys" | "custom"
    sorter: Callable[[list], Any]
    mapper: Optional[Callable[[Any], str]] = None

    def sort_key(self, item: Any) -> str:
        if self.mapper is None:
            return ""
        return self.mapper(item).lower()


def make_sort(config: ModeConfig) -> ModeSort:
    sort_by = config.sort_by
    if sort_by is None:
        return ModeSort(kind="search", sorter=default_item_sorter, mapper=config.map_to_search)
    if callable(sort_by):
        return ModeSort(kind="custom", sorter=sort_by)
    if (
        not isinstance(sort_by, (list, tuple))
        or len(sort_by) == 0
        or not all(isinstance(k, str) for k in sort_by)
    ):
        raise ConfigurationError(f"Invalid sort_by: {sort_by!r}", setting="sort_by")
    return ModeSort(kind="keys", sorter=default_item_sorter, mapper=keys_mapper(list(sort_by)))


# =============================================================================
# Mode state
# =============================================================================


class PaletteMode:
    """State of a single mode."""

    def __init__(
        self,
        name: str,
        config: ModeConfig,
        sort: ModeSort,
        searcher: Searcher,
    ):
        self.name = name
        self.config = config
        self.sort = sort
        self.searcher = searcher
        self.raw_items: list[HyperItem] = []
        self.raw_items_sorted: list[HyperItem] = []
        self.items: Observable[list[HyperItem]] = Observable([])
        self.results: Observable[list[HyperItem]] = Observable([])
        self.history: Observable[list[HyperItemId]] = Observable([])
        self.current: Observable[Optional[HyperItem]] = Observable(None)
        self.last_input = ""

    @property
    def prefix(self) -> str:
        return self.config.prefix

    @property
    def type(self) -> ItemType:
        return self.config.type

    def index_of(self, item_id: HyperItemId) -> int:
        """Index of the item with ``item_id`` in raw_items, or -1."""
        for i, item in enumerate(self.raw_items):
            if item.id == item_id:
                return i
        return -1

    def get(self, item_id: HyperItemId) -> Optional[HyperItem]:
        idx = self.index_of(item_id)
        return self.raw_items[idx] if idx != -1 else None

    def cache_sort_key(self, item: HyperItem) -> None:
        item.hcache["sort"] = self.sort.sort_key(item)

    def resort(self) -> None:
        """Recompute raw_items_sorted from raw_items honoring sort_mode."""
        self.raw_items_sorted = list(self.raw_items)
        if self.config.sort_mode == SortMode.UNSORTED:
            return
        self.sort.sorter(self.raw_items_sorted)
        if self.config.sort_mode == SortMode.REVERSED:
            self.raw_items_sorted.reverse()

    def sync_items(self) -> None:
        """Publish raw_items through the items observable."""
        self.items.set(list(self.raw_items))

    def push_history(self, item_id: HyperItemId) -> None:
        """Move ``item_id`` to the front of the history."""
        history = self.history.value
        if item_id in history:
            history.remove(item_id)
        history.insert(0, item_id)
        self.history.sync()

    def strip_prefix(self, text: str) -> str:
        """Remove the mode prefix from ``text``; text without it is used whole."""
        if self.prefix and text.startswith(self.prefix):
            return text[len(self.prefix):]
        return text

    def __repr__(self) -> str:
        return f"PaletteMode(name={self.name!r}, prefix={self.prefix!r}, items={len(self.raw_items)})"


# =============================================================================
# Construction
# =============================================================================


def _iter_mode_options(modes: Any) -> Iterable[tuple[Any, Any]]:
    if isinstance(modes, Mapping):
        return list(modes.items())
    if isinstance(modes, (list, tuple)):
        pairs = []
        for entry in modes:
            if not isinstance(entry, (list, tuple)) or len(entry) != 2:
                raise ConfigurationError(
                    f"Invalid modes entry, expected (name, options) got {entry!r}",
                    setting="modes",
                )
            pairs.append((entry[0], entry[1]))
        return pairs
    raise ConfigurationError(
        f"Invalid modes configuration, expected a mapping of mode options got {modes!r}",
        setting="modes",
    )


def _coerce_enum(name: str, value: Any, mode: str) -> Any:
    enum_cls = _ENUM_OPTIONS[name]
    try:
        return enum_cls(value)
    except ValueError:
        raise ConfigurationError(
            f"Invalid {name}: {value!r}", setting=name, mode=mode
        ) from None


def build_mode_config(mode: str, options: Mapping[str, Any]) -> ModeConfig:
    """Validate one mode's options and apply the variant defaults."""
    if not isinstance(options, Mapping):
        raise ConfigurationError(
            f"Invalid mode configuration, expected a mapping got {options!r}", mode=mode
        )

    try:
        item_type = ItemType(options.get("type"))
    except ValueError:
        raise ConfigurationError(
            f"Invalid item type: {options.get('type')!r}", setting="type", mode=mode
        ) from None

    config_cls = CONFIG_CLASSES[item_type]
    allowed = {f.name for f in fields(config_cls)}
    unknown = set(options) - allowed - {"type"}
    if unknown:
        raise ConfigurationError(
            f"Unknown option(s) {sorted(unknown)} for {item_type.value.lower()} mode", mode=mode
        )

    prefix = options.get("prefix")
    if not isinstance(prefix, str):
        raise ConfigurationError(f"Invalid prefix: {prefix!r}", setting="prefix", mode=mode)
    if not callable(options.get("map_to_search")):
        raise ConfigurationError("map_to_search must be callable", setting="map_to_search", mode=mode)

    kwargs: dict[str, Any] = {}
    for key, value in options.items():
        if key == "type" or value is None:
            continue
        if key in _ENUM_OPTIONS:
            value = _coerce_enum(key, value, mode)
        kwargs[key] = value

    if "close_on" in kwargs and kwargs["close_on"] not in CLOSE_ON_BY_TYPE[item_type]:
        raise ConfigurationError(
            f"close_on '{kwargs['close_on'].value}' is not supported by {item_type.value.lower()} modes",
            setting="close_on",
            mode=mode,
        )

    shortcut = kwargs.get("shortcut", [])
    if isinstance(shortcut, str) or not all(isinstance(s, str) for s in shortcut):
        raise ConfigurationError(f"Invalid shortcut list: {shortcut!r}", setting="shortcut", mode=mode)
    kwargs["shortcut"] = list(shortcut)

    return config_cls(**kwargs)


def build_modes(
    modes: Any,
    searcher_factory: SearcherFactory = default_searcher_factory,
) -> dict[str, PaletteMode]:
    """
    Create the palette modes from their options.

    Args:
        modes: Mapping (or sequence of pairs) of mode name to mode options
        searcher_factory: Builds each mode's searcher from its map_to_search

    Returns:
        Modes by name, in configuration order

    Raises:
        ConfigurationError: On malformed options, duplicated names or prefixes,
            invalid sort_by, or when no mode has the empty prefix
    """
    pairs = _iter_mode_options(modes)
    if not pairs:
        raise ConfigurationError("At least one mode is required", setting="modes")

    result: dict[str, PaletteMode] = {}
    prefixes: set[str] = set()
    for name, options in pairs:
        if not isinstance(name, str) or not name:
            raise ConfigurationError(f"Invalid mode name: {name!r}", setting="modes")
        if name in result:
            raise ConfigurationError(f"Duplicate mode: '{name}'", mode=name)

        config = build_mode_config(name, options)
        if config.prefix in prefixes:
            raise ConfigurationError(f"Duplicate prefix: '{config.prefix}'", mode=name)

        sort = make_sort(config)
        result[name] = PaletteMode(name, config, sort, searcher_factory(config.map_to_search))
        prefixes.add(config.prefix)
        logger.debug(f"Built {config.type.value.lower()} mode '{name}' with prefix '{config.prefix}'")

    if "" not in prefixes:
        raise ConfigurationError("A mode with the empty prefix '' is required", setting="modes")

    return result
