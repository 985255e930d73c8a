"""
Palette configuration loader.

Loads a palette definition from ~/.config/hyperpalette/palette.yaml (or any
given path). Hooks cannot be written in YAML: actions are referenced by name
and resolved through an ``action_factory``, mode hooks are passed in code.
"""

import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from hyperpalette.core.controller import PaletteController
from hyperpalette.exceptions import ConfigurationError, HyperPaletteError
from hyperpalette.keybindings import KeyBindingService
from hyperpalette.models.items import Actionable, HyperItem, Navigable, Searchable

from .constants import DEFAULT_PALETTE_FILE, ItemType
from .options import PaletteOptions

logger = logging.getLogger(__name__)

ActionFactory = Callable[[str], Callable[..., Any]]

DEFAULT_SEARCH_FIELDS = ["name"]

# Example config content for new users
EXAMPLE_CONFIG = """# hyperpalette configuration
#
# palette:    palette options (debounce, close_action, reset_on_open, defaults, ...)
# modes:      one entry per mode, exactly one of them with the empty prefix
#   type:           ACTIONABLE | NAVIGABLE | SEARCHABLE
#   prefix:         text typed first to switch to the mode
#   search_fields:  item attributes matched by the search (default: [name])
#   items:          items registered when the palette is loaded

palette:
  debounce: 150
  reset_on_open: true
  defaults:
    placeholder: "Search pages, or type > for commands"

modes:
  pages:
    type: NAVIGABLE
    prefix: ""
    search_fields: [name, url]
    items:
      - url: /
      - url: /settings
      - url: https://github.com
        name: GitHub

  commands:
    type: ACTIONABLE
    prefix: ">"
    shortcut: [ctrl+k]
    search_fields: [name, category, description]
    items:
      - name: Toggle theme
        category: View
        action: toggle_theme
        shortcut: [ctrl+t]
      - name: Quit
        action: quit
"""

_ITEM_KEYS = {
    ItemType.ACTIONABLE: {"name", "id", "category", "description", "shortcut", "action", "close_on", "close_action", "meta"},
    ItemType.NAVIGABLE: {"url", "name", "id", "close_on", "close_action", "meta"},
    ItemType.SEARCHABLE: {"data", "name", "id", "close_on", "close_action", "meta"},
}


def get_config_path() -> Path:
    """Get the path to the default palette file."""
    return DEFAULT_PALETTE_FILE


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load a palette configuration from YAML.

    Args:
        path: Palette file, defaults to ~/.config/hyperpalette/palette.yaml

    Returns:
        The parsed mapping

    Raises:
        ConfigurationError: If the file is missing, unreadable or not a mapping
    """
    config_path = Path(path) if path is not None else get_config_path()
    if not config_path.exists():
        raise ConfigurationError(f"Palette file not found: {config_path}", setting="path")

    try:
        with open(config_path) as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}", setting="path") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {config_path}: {e}", setting="path") from e

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ConfigurationError(f"Expected a mapping at the top of {config_path}", setting="path")

    logger.debug(f"Loaded palette config from {config_path}")
    return config


def save_example_config(path: Optional[Path] = None) -> bool:
    """
    Save the example config file if it doesn't exist.

    Returns:
        True if file was created, False if it already exists
    """
    config_path = Path(path) if path is not None else get_config_path()
    if config_path.exists():
        return False

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(EXAMPLE_CONFIG)
    logger.info(f"Created example palette config at {config_path}")
    return True


def fields_mapper(search_fields: List[str]) -> Callable[[Any], str]:
    """Build a ``map_to_search`` joining the listed attributes (or data keys) of an item."""

    def mapper(item: Any) -> str:
        parts = []
        for name in search_fields:
            value = getattr(item, name, None)
            if value is None and isinstance(getattr(item, "data", None), Mapping):
                value = item.data.get(name)
            if value is None:
                value = item.meta.get(name)
            if value is not None and value != "":
                parts.append(str(value))
        return " ".join(parts)

    return mapper


def unbound_action(name: str) -> Callable[..., Any]:
    """Action used when no factory is given: logs that ``name`` has no handler."""

    def on_action(item: Actionable, source: Any, rarg: Any) -> None:
        logger.warning(f"No handler bound to action '{name}' (item '{item.id}')")

    return on_action


def _build_item(
    mode: str,
    item_type: ItemType,
    entry: Any,
    action_factory: ActionFactory,
) -> HyperItem:
    if not isinstance(entry, dict):
        raise ConfigurationError(f"Invalid item, expected a mapping got {entry!r}", mode=mode)

    unknown = set(entry) - _ITEM_KEYS[item_type]
    if unknown:
        raise ConfigurationError(f"Unknown item key(s) {sorted(unknown)}", mode=mode)

    common = {
        "id": None if entry.get("id") is None else str(entry["id"]),
        "close_on": entry.get("close_on"),
        "close_action": entry.get("close_action"),
        "meta": entry.get("meta"),
    }

    try:
        if item_type == ItemType.ACTIONABLE:
            if "name" not in entry or "action" not in entry:
                raise ConfigurationError("Actionable items need a name and an action", mode=mode)
            return Actionable(
                str(entry["name"]),
                action_factory(str(entry["action"])),
                category=entry.get("category", ""),
                description=entry.get("description", ""),
                shortcut=entry.get("shortcut"),
                **common,
            )
        if item_type == ItemType.NAVIGABLE:
            if "url" not in entry:
                raise ConfigurationError("Navigable items need a url", mode=mode)
            return Navigable(entry["url"], name=entry.get("name"), **common)
        return Searchable(entry.get("data"), name=str(entry.get("name", "")), **common)
    except ConfigurationError:
        raise
    except HyperPaletteError as e:
        raise ConfigurationError(f"Invalid item: {e.message}", mode=mode) from e


def build_palette(
    config: Dict[str, Any],
    *,
    action_factory: Optional[ActionFactory] = None,
    mode_hooks: Optional[Dict[str, Dict[str, Any]]] = None,
) -> Tuple[PaletteOptions, Dict[str, List[HyperItem]]]:
    """
    Turn a parsed palette configuration into options and items.

    Args:
        config: Mapping with ``palette`` and ``modes`` sections
        action_factory: Maps an action name to its ``on_action`` hook
        mode_hooks: Extra options per mode, e.g. ``{"pages": {"on_local": fn}}``

    Returns:
        Palette options and the items to register, by mode
    """
    action_factory = action_factory or unbound_action
    mode_hooks = mode_hooks or {}

    unknown = set(config) - {"palette", "modes"}
    if unknown:
        raise ConfigurationError(f"Unknown section(s) {sorted(unknown)}")

    palette = config.get("palette") or {}
    if not isinstance(palette, dict):
        raise ConfigurationError("'palette' must be a mapping", setting="palette")
    if "modes" in palette:
        raise ConfigurationError("Modes go in the top-level 'modes' section", setting="palette.modes")

    raw_modes = config.get("modes")
    if not isinstance(raw_modes, dict) or not raw_modes:
        raise ConfigurationError("'modes' must be a non-empty mapping", setting="modes")

    modes: Dict[str, Dict[str, Any]] = {}
    items: Dict[str, List[HyperItem]] = {}
    for name, raw in raw_modes.items():
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Invalid mode configuration, expected a mapping got {raw!r}", mode=name)

        options = dict(raw)
        search_fields = options.pop("search_fields", None) or DEFAULT_SEARCH_FIELDS
        if not isinstance(search_fields, list) or not all(isinstance(f, str) for f in search_fields):
            raise ConfigurationError(f"Invalid search_fields: {search_fields!r}", setting="search_fields", mode=name)
        entries = options.pop("items", None) or []
        if not isinstance(entries, list):
            raise ConfigurationError("'items' must be a list", setting="items", mode=name)

        options["map_to_search"] = fields_mapper(search_fields)
        options.update(mode_hooks.get(name, {}))
        modes[name] = options

        try:
            item_type = ItemType(options.get("type"))
        except ValueError:
            raise ConfigurationError(
                f"Invalid item type: {options.get('type')!r}", setting="type", mode=name
            ) from None
        items[name] = [_build_item(name, item_type, entry, action_factory) for entry in entries]

    return PaletteOptions.from_dict({**palette, "modes": modes}), items


def load_palette(
    path: Optional[Path] = None,
    *,
    action_factory: Optional[ActionFactory] = None,
    mode_hooks: Optional[Dict[str, Dict[str, Any]]] = None,
    key_bindings: Optional[KeyBindingService] = None,
) -> PaletteController:
    """Load a palette file and return a controller with its items registered."""
    options, items = build_palette(
        load_config(path), action_factory=action_factory, mode_hooks=mode_hooks
    )
    palette = PaletteController(options, key_bindings=key_bindings)
    for mode, mode_items in items.items():
        if mode_items:
            palette.register_item(mode, mode_items, silent=False)
    logger.info(f"Loaded palette with {sum(len(v) for v in items.values())} item(s)")
    return palette
