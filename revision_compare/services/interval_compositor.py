"""Turn overlapping highlights into disjoint render segments.

Sweep line over boundary events. Events are ordered by position, then end
before start, then by highlight id, so the result depends only on positions
and ids and never on the order highlights are stored in. Where highlights
overlap, the most recently opened one that is still active colors the segment.
"""
from __future__ import annotations

import html
from typing import Iterable, List, Optional, Tuple

from revision_compare.services.types import Highlight, Run, Segment

_END = 0
_START = 1


def _events(highlights: Iterable[Highlight], length: int) -> List[Tuple[int, int, int, Optional[str]]]:
    events = []
    for highlight in highlights:
        start = max(0, min(highlight.start, length))
        end = max(0, min(highlight.end, length))
        if start >= end:
            continue
        events.append((start, _START, highlight.id, highlight.color))
        events.append((end, _END, highlight.id, highlight.color))
    events.sort(key=lambda event: event[:3])
    return events


def render(document: str, highlights: Iterable[Highlight]) -> List[Segment]:
    """
    计算文档的渲染分段

    Returns segments covering ``[0, len(document))`` exactly once, ordered and
    contiguous. An empty document yields no segments.
    """
    length = len(document)
    segments: List[Segment] = []
    # 按打开顺序排列的活动高亮
    active: List[Tuple[int, Optional[str]]] = []
    last_pos = 0

    for pos, kind, highlight_id, color in _events(highlights, length):
        if pos > last_pos:
            top_id, top_color = active[-1] if active else (None, None)
            segments.append(Segment(last_pos, pos, top_color, top_id))
            last_pos = pos

        if kind == _START:
            active.append((highlight_id, color))
        else:
            for index in range(len(active) - 1, -1, -1):
                if active[index][0] == highlight_id:
                    del active[index]
                    break

    if last_pos < length:
        segments.append(Segment(last_pos, length))
    return segments


def to_runs(document: str, segments: Iterable[Segment]) -> List[Run]:
    return [Run(document[s.start:s.end], s.color, s.highlight_id) for s in segments]


def to_markup(runs: Iterable[Run]) -> str:
    """
    生成高亮HTML

    Text is escaped before embedding; colored runs become ``<mark>`` elements and
    newlines become ``<br/>``.
    """
    parts = []
    for run in runs:
        text = html.escape(run.text, quote=True)
        if run.color is None:
            parts.append(text)
        else:
            parts.append(
                f'<mark data-highlight-id="{run.highlight_id}" '
                f'style="background-color: {html.escape(run.color, quote=True)}; color: inherit;">'
                f"{text}</mark>"
            )
    return "".join(parts).replace("\n", "<br/>")
