"""Locate a matcher snippet inside the target text.

Fallback chain, first success wins:

1. case-sensitive literal search
2. case-insensitive literal search (per-character lowercasing, offsets mapped
   back to the original text)
3. normalized fuzzy search with whitespace and punctuation stripped

The fuzzy stage only reports whether the target contains something roughly
similar. Normalization destroys offsets, so it never yields a span.
"""
from __future__ import annotations

import math
import unicodedata
from difflib import SequenceMatcher
from typing import List, Optional, Tuple

from revision_compare.core.logging import LogEvent, preview
from revision_compare.services.base_service import BaseService
from revision_compare.services.types import NOT_FOUND, PLAUSIBLE_MISS, ResolvedSpan


def _is_stripped(char: str) -> bool:
    return char.isspace() or unicodedata.category(char).startswith("P")


def normalize(text: str) -> str:
    """去除空白和标点并转小写"""
    return "".join(char.lower() for char in text if not _is_stripped(char))


def _fold_with_origin(text: str) -> Tuple[str, List[int]]:
    """Lowercase ``text`` char by char, remembering each output char's source index."""
    folded: List[str] = []
    origin: List[int] = []
    for index, char in enumerate(text):
        lowered = char.lower()
        folded.append(lowered)
        origin.extend([index] * len(lowered))
    return "".join(folded), origin


def find_exact(target: str, pattern: str) -> Optional[Tuple[int, int]]:
    index = target.find(pattern)
    if index == -1:
        return None
    return index, index + len(pattern)


def find_case_insensitive(target: str, pattern: str) -> Optional[Tuple[int, int]]:
    folded, origin = _fold_with_origin(target)
    needle = "".join(char.lower() for char in pattern)
    if not needle:
        return None

    index = folded.find(needle)
    while index != -1:
        stop = index + len(needle)
        # 匹配边界必须落在原文字符边界上
        starts_clean = index == 0 or origin[index - 1] != origin[index]
        ends_clean = stop == len(folded) or origin[stop] != origin[stop - 1]
        if starts_clean and ends_clean:
            return origin[index], origin[stop - 1] + 1
        index = folded.find(needle, index + 1)
    return None


def fuzzy_score(target: str, pattern: str, threshold: float = 0.3) -> float:
    """
    近似匹配得分，0为完全匹配，1为完全不匹配

    Both arguments are expected to be normalized already. The score is the share
    of pattern characters left unmatched inside the best window of the target,
    so substitutions, insertions and deletions all cost something instead of
    failing outright.
    """
    if not pattern or not target:
        return 1.0
    if pattern in target:
        return 0.0

    size = len(pattern)
    slack = max(1, math.ceil(size * threshold))
    matcher = SequenceMatcher(None, target, pattern, autojunk=False)

    anchors = {block.a - block.b for block in matcher.get_matching_blocks() if block.size}
    longest = matcher.find_longest_match(0, len(target), 0, size)
    if longest.size:
        anchors.add(longest.a - longest.b)

    best = 1.0
    for anchor in sorted(anchors):
        window = target[max(0, anchor - slack): max(0, anchor + size + slack)]
        if not window:
            continue
        window_matcher = SequenceMatcher(None, window, pattern, autojunk=False)
        matched = sum(block.size for block in window_matcher.get_matching_blocks())
        best = min(best, 1.0 - matched / size)
        if best == 0.0:
            break
    return best


class TextLocator(BaseService):
    """精确定位匹配文本在目标文本中的位置"""

    def __init__(self, threshold: Optional[float] = None):
        super().__init__()
        self.threshold = self.settings.fuzzy_threshold if threshold is None else threshold

    def locate(self, target: str, pattern: str) -> ResolvedSpan:
        """
        返回匹配文本的码点区间，找不到时返回 NOT_FOUND 或 PLAUSIBLE_MISS

        Never raises; callers turn a miss into a user notification.
        """
        if not pattern or not pattern.strip() or not target:
            self.logger.info(LogEvent.LOCATE_MISS, reason="empty_input", pattern=preview(pattern))
            return NOT_FOUND

        span = find_exact(target, pattern)
        stage = "exact"
        if span is None:
            span = find_case_insensitive(target, pattern)
            stage = "case_insensitive"

        if span is not None:
            self.logger.debug(LogEvent.LOCATE_HIT, stage=stage, start=span[0], end=span[1])
            return ResolvedSpan(span[0], span[1])

        score = fuzzy_score(normalize(target), normalize(pattern), self.threshold)
        plausible = score <= self.threshold
        self.logger.info(
            LogEvent.LOCATE_MISS,
            reason="fuzzy_only" if plausible else "no_match",
            fuzzy_score=round(score, 3),
            pattern=preview(pattern),
        )
        if plausible:
            return PLAUSIBLE_MISS
        return NOT_FOUND


def locate(target: str, pattern: str, threshold: Optional[float] = None) -> ResolvedSpan:
    """Module-level shortcut for :meth:`TextLocator.locate`."""
    return TextLocator(threshold).locate(target, pattern)
