"""Shrink over-broad matcher snippets before locating them."""
from __future__ import annotations

import re
from dataclasses import replace

from revision_compare.core.logging import LogEvent, get_logger, preview
from revision_compare.services.types import MatchCandidate

logger = get_logger(__name__)

_TOKEN = re.compile(r"\S+")

# 匹配结果的词数超过选区词数的这个倍数时视为过宽
OVER_BROAD_RATIO = 2


def refine(candidate: MatchCandidate, original_selection: str) -> MatchCandidate:
    """
    截断过宽的匹配结果

    When the snippet has more than twice as many whitespace-separated tokens as
    the selection, keep only its first N tokens (N = selection token count),
    re-joined with single spaces. Advisory offsets move with the kept prefix.
    The prefix is always kept; no window scoring is attempted.
    """
    selection_count = len(original_selection.split())
    tokens = list(_TOKEN.finditer(candidate.snippet))

    if selection_count == 0 or len(tokens) <= OVER_BROAD_RATIO * selection_count:
        return candidate

    kept = tokens[:selection_count]
    snippet = " ".join(token.group() for token in kept)

    start, end = candidate.start, candidate.end
    if candidate.start is not None:
        start = candidate.start + kept[0].start()
        end = candidate.start + kept[-1].end()

    logger.info(
        LogEvent.SNIPPET_REFINED,
        original_tokens=len(tokens),
        kept_tokens=selection_count,
        snippet=preview(snippet),
    )
    return replace(candidate, snippet=snippet, start=start, end=end)
