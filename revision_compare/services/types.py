"""Shared dataclasses used across services."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Side(str, Enum):
    """Document side in a comparison session."""

    LEFT = "left"
    RIGHT = "right"

    @property
    def other(self) -> "Side":
        return Side.RIGHT if self is Side.LEFT else Side.LEFT


@dataclass(frozen=True, slots=True)
class Highlight:
    """Colored code-point range owned by one side's store.

    ``color`` is ``None`` for an uncolored highlight.
    """

    id: int
    start: int
    end: int
    color: Optional[str] = None

    def overlaps(self, start: int, end: int) -> bool:
        return self.start < end and self.end > start


@dataclass(frozen=True, slots=True)
class MatchCandidate:
    """Untrusted snippet returned by the semantic matcher.

    ``start``/``end`` are the matcher's own offsets and are advisory only.
    """

    snippet: str
    explanation: str = ""
    start: Optional[int] = None
    end: Optional[int] = None


@dataclass(frozen=True, slots=True)
class ResolvedSpan:
    """Validated code-point span, or the not-found sentinel.

    ``plausible`` records whether the fuzzy stage saw a roughly similar
    passage when no literal match existed.
    """

    start: int
    end: int
    plausible: bool = True

    @property
    def found(self) -> bool:
        return self.start >= 0 and self.end > self.start

    def __bool__(self) -> bool:
        return self.found


NOT_FOUND = ResolvedSpan(-1, -1, plausible=False)
# 没有字面匹配，但模糊阶段认为目标中有相近片段
PLAUSIBLE_MISS = ResolvedSpan(-1, -1, plausible=True)


@dataclass(frozen=True, slots=True)
class Segment:
    """Compositor output unit: a span plus at most one color."""

    start: int
    end: int
    color: Optional[str] = None
    highlight_id: Optional[int] = None


@dataclass(frozen=True, slots=True)
class Run:
    """Segment text ready for markup generation."""

    text: str
    color: Optional[str] = None
    highlight_id: Optional[int] = None
