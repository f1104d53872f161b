"""Per-side highlight storage."""
from __future__ import annotations

from typing import Dict, Iterator, List, Optional

from revision_compare.core.errors import StoreContractViolation
from revision_compare.core.logging import LogEvent, get_logger
from revision_compare.services.types import Highlight

logger = get_logger(__name__)


class HighlightCounter:
    """会话级高亮ID计数器，从0开始，只增不减"""

    def __init__(self, start: int = 0):
        self._value = start

    @property
    def value(self) -> int:
        return self._value

    def next(self) -> int:
        self._value += 1
        return self._value


class HighlightStore:
    """
    单侧文档的高亮集合

    Insertion ordered, never deduplicated. Ids come from the injected counter so
    both sides of a session share one id sequence. ``limit`` is the current
    document length; ``None`` disables the upper bound check.
    """

    def __init__(self, counter: HighlightCounter, limit: Optional[int] = None, name: str = ""):
        self.counter = counter
        self.limit = limit
        self.name = name
        self._items: Dict[int, Highlight] = {}

    def add(self, start: int, end: int, color: Optional[str] = None) -> int:
        if start < 0 or start >= end or (self.limit is not None and end > self.limit):
            raise StoreContractViolation(start, end, self.limit)

        highlight = Highlight(self.counter.next(), start, end, color)
        self._items[highlight.id] = highlight
        logger.debug(
            LogEvent.HIGHLIGHT_ADDED,
            store=self.name,
            highlight_id=highlight.id,
            start=start,
            end=end,
            color=color,
        )
        return highlight.id

    def get(self, highlight_id: int) -> Optional[Highlight]:
        return self._items.get(highlight_id)

    def remove(self, highlight_id: int) -> Optional[Highlight]:
        removed = self._items.pop(highlight_id, None)
        if removed is not None:
            logger.debug(LogEvent.HIGHLIGHT_REMOVED, store=self.name, highlight_ids=[highlight_id])
        return removed

    def remove_overlapping(self, start: int, end: int) -> List[Highlight]:
        """删除与 [start, end) 相交的所有高亮，返回被删除的高亮"""
        removed = [h for h in self._items.values() if h.overlaps(start, end)]
        for highlight in removed:
            del self._items[highlight.id]
        if removed:
            logger.debug(
                LogEvent.HIGHLIGHT_REMOVED,
                store=self.name,
                highlight_ids=[h.id for h in removed],
            )
        return removed

    def clear(self) -> None:
        self._items.clear()
        logger.debug(LogEvent.HIGHLIGHTS_CLEARED, store=self.name)

    def highlights(self) -> List[Highlight]:
        return list(self._items.values())

    def __iter__(self) -> Iterator[Highlight]:
        return iter(self.highlights())

    def __len__(self) -> int:
        return len(self._items)
