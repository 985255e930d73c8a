"""Observable values exposed to the UI layer and to callers."""

from collections.abc import Callable
from typing import Any, Generic, TypeVar

T = TypeVar("T")

Unsubscribe = Callable[[], None]


class Observable(Generic[T]):
    """
    A value with subscribe/notify semantics.

    Subscribers are called with the current value on subscription and on every
    ``set``/``update``/``sync``. In-place mutations of a mutable value (e.g.
    ``results.value.append(...)``) are published by calling ``sync()``.
    """

    def __init__(self, value: T):
        self._value = value
        self._subscribers: list[Callable[[T], Any]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        self._notify()

    def update(self, fn: Callable[[T], T]) -> None:
        self.set(fn(self._value))

    def sync(self) -> None:
        """Notify subscribers after an in-place mutation of the value."""
        self._notify()

    def subscribe(self, fn: Callable[[T], Any]) -> Unsubscribe:
        self._subscribers.append(fn)
        fn(self._value)

        def unsubscribe() -> None:
            if fn in self._subscribers:
                self._subscribers.remove(fn)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _notify(self) -> None:
        for fn in list(self._subscribers):
            fn(self._value)

    def __repr__(self) -> str:
        return f"Observable({self._value!r})"
