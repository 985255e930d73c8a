"""
Scopes for the keybinding service.

Scopes form a hierarchy where child scopes inherit bindings from their
parents: while the palette is open, keys are dispatched in the PALETTE scope,
which still reaches GLOBAL bindings (item shortcuts, mode shortcuts).
"""

from enum import Enum


class KeyScope(Enum):
    """
    Scopes where keybindings apply.

    Hierarchy:
        GLOBAL
        └── PALETTE (while the palette is open)
    """

    GLOBAL = "global"
    PALETTE = "palette"

    @classmethod
    def get_parent_scopes(cls, scope: "KeyScope") -> list["KeyScope"]:
        """Get parent scopes in inheritance order (closest first)."""
        hierarchy = {
            cls.GLOBAL: [],
            cls.PALETTE: [cls.GLOBAL],
        }
        return hierarchy.get(scope, [])

    @classmethod
    def from_string(cls, value: str) -> "KeyScope":
        for scope in cls:
            if scope.value == value:
                return scope
        raise ValueError(f"Unknown key scope: '{value}'")
