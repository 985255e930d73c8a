"""
Search index used by each mode.

The palette only relies on the ``Searcher`` protocol: ``add``, ``remove`` and
``search``. Results need not be stable-sorted; the mode re-sorts them with its
own sort strategy afterwards.
"""

import logging
from collections.abc import Callable
from difflib import SequenceMatcher
from typing import Any, Protocol

from hyperpalette.config.constants import DEFAULT_SEARCH_THRESHOLD

logger = logging.getLogger(__name__)


class Searcher(Protocol):
    """Ranking capability over an indexed set of items."""

    def add(self, item: Any) -> None: ...

    def remove(self, item: Any) -> None: ...

    def search(self, query: str) -> list[Any]: ...


SearcherFactory = Callable[[Callable[[Any], str]], Searcher]


class FuzzySearcher:
    """
    Fuzzy searcher over the strings produced by ``mapper``.

    Scoring:
    - exact substring match scores 0.9 plus a bonus for the matched share
    - otherwise the best of the whole-string ratio and the per-word ratios,
      plus a bonus for every query word contained in the text
    """

    def __init__(self, mapper: Callable[[Any], str], threshold: float = DEFAULT_SEARCH_THRESHOLD):
        self.mapper = mapper
        self.threshold = threshold
        self._entries: list[tuple[Any, str]] = []

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, item: Any) -> None:
        self._entries.append((item, self.mapper(item).lower()))

    def remove(self, item: Any) -> None:
        for i, (entry, _) in enumerate(self._entries):
            if entry is item:
                del self._entries[i]
                return
        logger.debug(f"Item not indexed, nothing to remove: {item!r}")

    def _score(self, query: str, text: str) -> float:
        if not text:
            return 0.0

        if query in text:
            return 0.9 + (len(query) / len(text)) * 0.1

        score = SequenceMatcher(None, query, text).ratio()
        words = text.split()
        if words:
            score = max(score, max(SequenceMatcher(None, query, w).ratio() for w in words))

        for qw in query.split():
            if qw in text:
                score += 0.15

        return score

    def search(self, query: str) -> list[Any]:
        query_lower = query.lower().strip()
        if not query_lower:
            return [item for item, _ in self._entries]

        scored: list[tuple[float, Any]] = []
        for item, text in self._entries:
            score = self._score(query_lower, text)
            if score >= self.threshold:
                scored.append((score, item))

        # Sort by score descending
        scored.sort(key=lambda x: -x[0])

        return [item for _, item in scored]


def default_searcher_factory(mapper: Callable[[Any], str]) -> Searcher:
    return FuzzySearcher(mapper)
