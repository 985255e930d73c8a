"""
Palette item variants.

Every item shares a base shape (id, name, type, hcache) and adds the fields of
its variant:

- Actionable: runs ``on_request`` then ``on_action`` when triggered
- Navigable: navigates to ``url`` (local when it starts with '/')
- Searchable: carries opaque ``data`` handed to the mode's ``on_selection``

``id`` and ``type`` are read-only once constructed, as are the url-derived
fields of a Navigable.
"""

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlsplit

from hyperpalette.config.constants import (
    CLOSE_ON_BY_TYPE,
    CloseAction,
    CloseOn,
    ItemType,
    RequestSourceType,
)
from hyperpalette.exceptions import InvalidItemError

HyperItemId = str


def generate_id() -> HyperItemId:
    """Generate a random unique item id."""
    return uuid.uuid4().hex


@dataclass
class RequestSource:
    """How an item resolution was requested."""

    type: RequestSourceType
    shortcut: Optional[str] = None  # Only set for shortcut requests
    event: Any = None  # UI event that caused the request, if any

    @classmethod
    def submit(cls, event: Any = None) -> "RequestSource":
        return cls(RequestSourceType.SUBMIT, event=event)

    @classmethod
    def from_shortcut(cls, shortcut: str, event: Any = None) -> "RequestSource":
        return cls(RequestSourceType.SHORTCUT, shortcut=shortcut, event=event)

    @classmethod
    def click(cls, event: Any = None) -> "RequestSource":
        return cls(RequestSourceType.CLICK, event=event)


def _coerce_close_on(item_type: ItemType, close_on: Any) -> Optional[CloseOn]:
    if close_on is None:
        return None
    try:
        value = CloseOn(close_on)
    except ValueError:
        raise InvalidItemError(f"Invalid close_on: '{close_on}'", type=item_type.value) from None
    if value not in CLOSE_ON_BY_TYPE[item_type]:
        raise InvalidItemError(
            f"close_on '{value.value}' is not supported by {item_type.value.lower()} items",
            type=item_type.value,
        )
    return value


def _coerce_close_action(close_action: Any) -> Optional[CloseAction]:
    if close_action is None:
        return None
    try:
        return CloseAction(close_action)
    except ValueError:
        raise InvalidItemError(f"Invalid close_action: '{close_action}'") from None


class HyperItem:
    """Base class of all palette items."""

    TYPE: ItemType

    def __init__(
        self,
        name: str,
        *,
        id: Optional[HyperItemId] = None,
        close_on: Any = None,
        close_action: Any = None,
        meta: Optional[dict[str, Any]] = None,
    ):
        self._id: HyperItemId = id if id is not None else generate_id()
        self.name = name
        self.close_on: Optional[CloseOn] = _coerce_close_on(self.TYPE, close_on)
        self.close_action: Optional[CloseAction] = _coerce_close_action(close_action)
        self.meta: dict[str, Any] = dict(meta or {})
        # Derived values computed by the registry (e.g. the sort key)
        self._hcache: dict[str, Any] = {}

    @property
    def id(self) -> HyperItemId:
        return self._id

    @property
    def type(self) -> ItemType:
        return self.TYPE

    @property
    def hcache(self) -> dict[str, Any]:
        return self._hcache

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self._id!r}, name={self.name!r})"


def _default_on_request(item: "Actionable", source: RequestSource) -> None:
    return None


class Actionable(HyperItem):
    """An item that runs an action when triggered."""

    TYPE = ItemType.ACTIONABLE

    def __init__(
        self,
        name: str,
        on_action: Callable[..., Any],
        *,
        id: Optional[HyperItemId] = None,
        category: str = "",
        description: str = "",
        shortcut: Optional[list[str]] = None,
        on_request: Optional[Callable[..., Any]] = None,
        on_error: Optional[Callable[..., Any]] = None,
        on_unregister: Optional[Callable[..., Any]] = None,
        close_on: Any = None,
        close_action: Any = None,
        meta: Optional[dict[str, Any]] = None,
    ):
        if not callable(on_action):
            raise InvalidItemError("Actionable items need a callable on_action", name=name)
        super().__init__(name, id=id, close_on=close_on, close_action=close_action, meta=meta)
        self.category = category
        self.description = description
        self.shortcut: list[str] = list(shortcut or [])
        self.on_request = on_request or _default_on_request
        self.on_action = on_action
        self.on_error = on_error
        self.on_unregister = on_unregister


class Navigable(HyperItem):
    """An item pointing at a local path or an external url."""

    TYPE = ItemType.NAVIGABLE

    def __init__(
        self,
        url: str,
        *,
        name: Optional[str] = None,
        id: Optional[HyperItemId] = None,
        close_on: Any = None,
        close_action: Any = None,
        meta: Optional[dict[str, Any]] = None,
    ):
        if not isinstance(url, str) or not url:
            raise InvalidItemError(f"Invalid url: {url!r}")

        external = not url.startswith("/")
        parts = urlsplit(url)
        if external:
            if not parts.scheme or not parts.netloc:
                raise InvalidItemError(f"Invalid external url: '{url}'")
            host_pathname = parts.netloc + parts.path
        else:
            host_pathname = parts.path

        if name is None:
            segments = [s for s in parts.path.split("/") if s]
            name = segments[-1] if segments else "index"

        super().__init__(name, id=id, close_on=close_on, close_action=close_action, meta=meta)
        self._url = url
        self._external = external
        self._url_host_pathname = host_pathname

    @property
    def url(self) -> str:
        return self._url

    @property
    def external(self) -> bool:
        return self._external

    @property
    def url_host_pathname(self) -> str:
        return self._url_host_pathname


class Searchable(HyperItem):
    """An item carrying arbitrary data, handed to the mode's on_selection hook."""

    TYPE = ItemType.SEARCHABLE

    def __init__(
        self,
        data: Any,
        *,
        name: str = "",
        id: Optional[HyperItemId] = None,
        close_on: Any = None,
        close_action: Any = None,
        meta: Optional[dict[str, Any]] = None,
    ):
        super().__init__(name, id=id, close_on=close_on, close_action=close_action, meta=meta)
        self.data = data
