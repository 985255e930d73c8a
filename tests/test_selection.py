"""Tests for the selection cursor."""

import pytest

from hyperpalette.core.selection import Selection, SelectionCursor
from hyperpalette.exceptions import InvalidSelectionError
from hyperpalette.models.items import Searchable


@pytest.fixture
def results():
    return [Searchable(None, id=str(i)) for i in range(3)]


class TestSelectionCursor:
    """Tests for cyclic selection."""

    def test_starts_empty(self) -> None:
        cursor = SelectionCursor()
        assert cursor.state.value == Selection(-1, None)

    def test_next_wraps(self, results) -> None:
        cursor = SelectionCursor()
        indexes = []
        for _ in range(4):
            cursor.select_next(results)
            indexes.append(cursor.index)
        assert indexes == [0, 1, 2, 0]
        assert cursor.id == "0"

    def test_previous_wraps(self, results) -> None:
        cursor = SelectionCursor()
        cursor.select_previous(results)
        assert cursor.index == 2
        cursor.select_index(results, 0)
        cursor.select_previous(results)
        assert (cursor.index, cursor.id) == (2, "2")

    def test_empty_results_are_ignored(self) -> None:
        cursor = SelectionCursor()
        cursor.select_next([])
        cursor.select_previous([])
        assert cursor.index == -1

    def test_reset(self, results) -> None:
        cursor = SelectionCursor()
        cursor.reset(results)
        assert (cursor.index, cursor.id) == (0, "0")
        cursor.reset([])
        assert (cursor.index, cursor.id) == (-1, None)

    def test_select_index_out_of_range(self, results) -> None:
        cursor = SelectionCursor()
        with pytest.raises(InvalidSelectionError) as exc_info:
            cursor.select_index(results, 3)
        assert exc_info.value.context["index"] == 3

    def test_changes_are_published(self, results) -> None:
        cursor = SelectionCursor()
        seen = []
        cursor.state.subscribe(lambda s: seen.append(s.index))
        cursor.select_next(results)
        cursor.select_next(results)
        assert seen == [-1, 0, 1]
