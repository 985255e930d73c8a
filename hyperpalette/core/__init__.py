"""Palette engine: modes, registry, search pipeline and action resolution."""

from .controller import ModeStates, PaletteController, PaletteStates, create_palette
from .modes import (
    ActionableModeConfig,
    ModeConfig,
    ModeSort,
    NavigableModeConfig,
    PaletteMode,
    SearchableModeConfig,
    build_mode_config,
    build_modes,
)
from .observable import Observable
from .registry import ItemRegistry
from .resolver import ActionResolver, ResolutionOutcome
from .searcher import FuzzySearcher, Searcher, default_searcher_factory
from .selection import Selection, SelectionCursor

__all__ = [
    "ActionResolver",
    "ActionableModeConfig",
    "FuzzySearcher",
    "ItemRegistry",
    "ModeConfig",
    "ModeSort",
    "ModeStates",
    "NavigableModeConfig",
    "Observable",
    "PaletteController",
    "PaletteMode",
    "PaletteStates",
    "ResolutionOutcome",
    "SearchableModeConfig",
    "Searcher",
    "Selection",
    "SelectionCursor",
    "build_mode_config",
    "build_modes",
    "create_palette",
    "default_searcher_factory",
]
