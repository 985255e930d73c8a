"""
hyperpalette keybinding service.

Usage:
    from hyperpalette.keybindings import KeyBindingService, KeyScope

    service = KeyBindingService()
    unbind = service.bind(KeyScope.GLOBAL, "ctrl+k", handler)

    conflicts = service.detect_conflicts()
"""

from .context import KeyScope
from .service import (
    ConflictReport,
    ConflictSeverity,
    ConflictType,
    KeyBinding,
    KeyBindingService,
    normalize_shortcut,
)

__all__ = [
    "KeyScope",
    "KeyBinding",
    "KeyBindingService",
    "ConflictReport",
    "ConflictType",
    "ConflictSeverity",
    "normalize_shortcut",
]
