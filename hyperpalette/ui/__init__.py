"""Textual adapter for the palette controller."""

from .app import PaletteApp
from .palette_screen import PaletteResultWidget, PaletteScreen, describe_item

__all__ = ["PaletteApp", "PaletteResultWidget", "PaletteScreen", "describe_item"]
