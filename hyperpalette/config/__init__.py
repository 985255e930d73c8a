"""Configuration: policy enums, palette options and the YAML palette loader."""

from .constants import (
    DEFAULT_PALETTE_FILE,
    CloseAction,
    CloseOn,
    EmptyMode,
    ItemType,
    OpenAction,
    SortMode,
    UpdateAction,
)
from .options import PaletteDefaults, PaletteOptions

__all__ = [
    "DEFAULT_PALETTE_FILE",
    "CloseAction",
    "CloseOn",
    "EmptyMode",
    "ItemType",
    "OpenAction",
    "PaletteDefaults",
    "PaletteOptions",
    "SortMode",
    "UpdateAction",
]
