"""
Keybinding service with conflict detection.

The palette registers item shortcuts, per-mode open shortcuts and the escape
shortcut through ``KeyBindingService.bind``; the UI layer feeds key presses in
through ``dispatch``.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from hyperpalette.utils.hooks import maybe_await

from .context import KeyScope

logger = logging.getLogger(__name__)

Unbind = Callable[[], None]

MODIFIER_ORDER = ("ctrl", "alt", "shift", "meta")

KEY_ALIASES = {
    "$mod": "ctrl",
    "control": "ctrl",
    "cmd": "meta",
    "command": "meta",
    "super": "meta",
    "option": "alt",
    "esc": "escape",
    "return": "enter",
    "arrowup": "up",
    "arrowdown": "down",
    "arrowleft": "left",
    "arrowright": "right",
}


def normalize_shortcut(shortcut: str) -> str:
    """
    Normalize a shortcut string.

    "Ctrl+Shift+P" -> "ctrl+shift+p", "$mod+k" -> "ctrl+k", "Esc" -> "escape".
    Modifiers are ordered ctrl, alt, shift, meta so equivalent spellings
    compare equal.
    """
    parts = [p.strip().lower() for p in shortcut.strip().split("+") if p.strip()]
    if not parts:
        raise ValueError(f"Invalid shortcut: {shortcut!r}")

    parts = [KEY_ALIASES.get(p, p) for p in parts]
    modifiers = sorted(
        {p for p in parts[:-1] if p in MODIFIER_ORDER},
        key=MODIFIER_ORDER.index,
    )
    unknown = [p for p in parts[:-1] if p not in MODIFIER_ORDER]
    if unknown:
        raise ValueError(f"Invalid modifier(s) {unknown} in shortcut {shortcut!r}")

    return "+".join([*modifiers, parts[-1]])


class ConflictType(Enum):
    """Types of keybinding conflicts."""

    SAME_SCOPE = "same_scope"  # Two bindings for same key in same scope
    PARENT_CHILD = "parent_child"  # Child scope shadows parent (usually OK)


class ConflictSeverity(Enum):
    """Severity levels for conflicts."""

    WARNING = "warning"  # Both handlers run, probably unintended
    INFO = "info"  # Intentional override, just informational


@dataclass(eq=False)
class KeyBinding:
    """A single handler bound to a key in a scope."""

    key: str  # Normalized shortcut, e.g. "ctrl+k"
    scope: KeyScope
    handler: Callable[[], Any]
    description: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "key": self.key,
            "scope": self.scope.value,
            "description": self.description,
        }


@dataclass
class ConflictReport:
    """Describes a keybinding conflict."""

    key: str
    binding1: KeyBinding
    binding2: KeyBinding
    conflict_type: ConflictType
    severity: ConflictSeverity = ConflictSeverity.WARNING

    def to_string(self) -> str:
        """Format conflict for logging/display."""
        return (
            f"[{self.severity.value.upper()}] Key '{self.key}' conflict:\n"
            f"  {self.binding1.description or '<unnamed>'} ({self.binding1.scope.value})\n"
            f"  {self.binding2.description or '<unnamed>'} ({self.binding2.scope.value})\n"
            f"  Type: {self.conflict_type.value}"
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "key": self.key,
            "severity": self.severity.value,
            "type": self.conflict_type.value,
            "binding1": self.binding1.to_dict(),
            "binding2": self.binding2.to_dict(),
        }


@dataclass
class KeyBindingService:
    """
    Registry of live key handlers.

    Usage:
        service = KeyBindingService()
        unbind = service.bind(KeyScope.GLOBAL, "ctrl+k", open_palette)

        # From the UI layer
        await service.dispatch("ctrl+k")

        # Release
        unbind()
    """

    # All live bindings, in bind order
    bindings: List[KeyBinding] = field(default_factory=list)

    # Bindings indexed by key for dispatch and conflict detection
    by_key: Dict[str, List[KeyBinding]] = field(default_factory=dict)

    # Detected conflicts
    conflicts: List[ConflictReport] = field(default_factory=list)

    def bind(
        self,
        scope: KeyScope,
        shortcut: str,
        handler: Callable[[], Any],
        description: str = "",
    ) -> Unbind:
        """
        Bind ``handler`` to ``shortcut`` in ``scope``.

        Returns:
            A callable releasing exactly this binding. Calling it more than
            once is harmless.
        """
        binding = KeyBinding(
            key=normalize_shortcut(shortcut),
            scope=scope,
            handler=handler,
            description=description,
        )
        self.bindings.append(binding)
        self.by_key.setdefault(binding.key, []).append(binding)
        logger.debug(f"Bound '{binding.key}' in {scope.value}: {description}")

        def unbind() -> None:
            self._remove(binding)

        return unbind

    def _remove(self, binding: KeyBinding) -> None:
        if binding not in self.bindings:
            return
        self.bindings.remove(binding)
        same_key = self.by_key.get(binding.key, [])
        if binding in same_key:
            same_key.remove(binding)
        if not same_key:
            self.by_key.pop(binding.key, None)
        logger.debug(f"Unbound '{binding.key}' in {binding.scope.value}")

    def get_bindings_for_key(self, key: str, scope: KeyScope = KeyScope.GLOBAL) -> List[KeyBinding]:
        """Get the bindings reached by ``key`` in ``scope`` (own scope first, then parents)."""
        key = normalize_shortcut(key)
        candidates = self.by_key.get(key, [])
        result: List[KeyBinding] = []
        for s in [scope] + KeyScope.get_parent_scopes(scope):
            result.extend(b for b in candidates if b.scope == s)
        return result

    async def dispatch(self, key: str, scope: KeyScope = KeyScope.GLOBAL) -> bool:
        """
        Run every handler bound to ``key`` reachable from ``scope``.

        Async handlers are awaited in turn.

        Returns:
            True if at least one handler ran.
        """
        try:
            bindings = self.get_bindings_for_key(key, scope)
        except ValueError:
            return False

        for binding in bindings:
            await maybe_await(binding.handler())
        return bool(bindings)

    def detect_conflicts(self) -> List[ConflictReport]:
        """
        Detect keys bound more than once.

        Returns:
            List of conflict reports, warnings first
        """
        self.conflicts = []

        for key, bindings in self.by_key.items():
            for i, binding1 in enumerate(bindings):
                for binding2 in bindings[i + 1 :]:
                    if binding1.scope == binding2.scope:
                        conflict_type = ConflictType.SAME_SCOPE
                        severity = ConflictSeverity.WARNING
                    else:
                        conflict_type = ConflictType.PARENT_CHILD
                        severity = ConflictSeverity.INFO
                    self.conflicts.append(
                        ConflictReport(
                            key=key,
                            binding1=binding1,
                            binding2=binding2,
                            conflict_type=conflict_type,
                            severity=severity,
                        )
                    )

        severity_order = {ConflictSeverity.WARNING: 0, ConflictSeverity.INFO: 1}
        self.conflicts.sort(key=lambda c: severity_order[c.severity])

        for conflict in self.conflicts:
            if conflict.severity == ConflictSeverity.WARNING:
                logger.warning(conflict.to_string())

        return self.conflicts

    def get_conflicts_by_severity(self, severity: ConflictSeverity) -> List[ConflictReport]:
        """Get conflicts filtered by severity."""
        return [c for c in self.conflicts if c.severity == severity]

    def clear(self) -> None:
        """Release every binding."""
        self.bindings.clear()
        self.by_key.clear()
        self.conflicts.clear()

    def summary(self) -> str:
        """Get a summary of the service state."""
        lines = [
            "Keybinding Summary:",
            f"  Total bindings: {len(self.bindings)}",
            f"  Unique keys: {len(self.by_key)}",
            f"  Conflicts: {len(self.conflicts)}",
        ]
        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "bindings": [b.to_dict() for b in self.bindings],
            "conflicts": [c.to_dict() for c in self.conflicts],
            "summary": {
                "total_bindings": len(self.bindings),
                "unique_keys": len(self.by_key),
                "conflicts": len(self.conflicts),
            },
        }
