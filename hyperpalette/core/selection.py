"""Selection cursor over the results of the active mode."""

from dataclasses import dataclass
from typing import Optional, Sequence

from hyperpalette.exceptions import InvalidSelectionError
from hyperpalette.models.items import HyperItem, HyperItemId

from .observable import Observable


@dataclass
class Selection:
    """Highlighted result. index -1 / id None means nothing is selected."""

    index: int = -1
    id: Optional[HyperItemId] = None


class SelectionCursor:
    """Cyclic cursor publishing its position through an observable."""

    def __init__(self):
        self.state: Observable[Selection] = Observable(Selection())

    @property
    def index(self) -> int:
        return self.state.value.index

    @property
    def id(self) -> Optional[HyperItemId]:
        return self.state.value.id

    def _set(self, index: int, item_id: Optional[HyperItemId]) -> None:
        self.state.value.index = index
        self.state.value.id = item_id
        self.state.sync()

    def clear(self) -> None:
        self._set(-1, None)

    def reset(self, results: Sequence[HyperItem]) -> None:
        """Select the first result, or nothing when there are none."""
        if results:
            self._set(0, results[0].id)
        else:
            self.clear()

    def select_index(self, results: Sequence[HyperItem], index: int) -> HyperItem:
        if not 0 <= index < len(results):
            raise InvalidSelectionError(f"No result at index {index}", index=index)
        item = results[index]
        self._set(index, item.id)
        return item

    def select_next(self, results: Sequence[HyperItem]) -> None:
        if not results:
            return
        if self.index == -1:
            new_index = 0
        else:
            new_index = (self.index + 1) % len(results)
        self._set(new_index, results[new_index].id)

    def select_previous(self, results: Sequence[HyperItem]) -> None:
        if not results:
            return
        if self.index == -1:
            new_index = len(results) - 1
        else:
            new_index = (self.index - 1 + len(results)) % len(results)
        self._set(new_index, results[new_index].id)
