"""Two-sided comparison session.

Wires addressing, the highlight stores, the semantic matcher, the refiner, the
locator and the compositor together. Each user selection records its own
highlight right away and then schedules one independent task that asks the
matcher for the corresponding passage on the other side. Tasks are neither
coalesced nor ordered: whichever response arrives first is applied first.
"""
from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Set, Union
from uuid import uuid4

from revision_compare.core.config import CLEAR_COLOR, get_settings
from revision_compare.core.errors import (
    CollaboratorFailure,
    InvalidRequestError,
    LocatorMiss,
    ResourceNotFoundError,
)
from revision_compare.core.logging import LogEvent, get_logger, preview
from revision_compare.models.similarity import SimilarMatch
from revision_compare.services import interval_compositor
from revision_compare.services.highlight_store import HighlightCounter, HighlightStore
from revision_compare.services.match_refiner import refine
from revision_compare.services.text_addressing import to_code_point_offset
from revision_compare.services.text_locator import TextLocator
from revision_compare.services.types import Highlight, Run, Segment, Side

logger = get_logger(__name__)

NO_MATCH_MESSAGE = "未找到相似的句子"


class SimilarityMatcher(Protocol):
    async def find_similar(self, source_text: str, target_text: str, selected_text: str) -> SimilarMatch:
        ...


@dataclass
class ActivityEntry:
    """控制台记录"""
    kind: str
    side: str
    text: str
    start: Optional[int] = None
    end: Optional[int] = None


@dataclass
class Notification:
    message: str = NO_MATCH_MESSAGE
    visible: bool = False


@dataclass
class SelectionOutcome:
    """一次选区操作的结果"""
    side: Side
    start: int
    end: int
    highlight_id: Optional[int] = None
    removed: List[Highlight] = field(default_factory=list)
    task: Optional["asyncio.Task[Optional[int]]"] = None


@dataclass
class RenderResult:
    segments: List[Segment]
    runs: List[Run]
    markup: str


class DocumentSide:
    """单侧文档：文本加上它独占的高亮集合"""

    def __init__(self, side: Side, counter: HighlightCounter):
        self.side = side
        self.text = ""
        self.store = HighlightStore(counter, limit=0, name=side.value)

    def set_text(self, text: str) -> None:
        # 文本整体替换，已有高亮在渲染时裁剪到新长度
        self.text = text
        self.store.limit = len(text)

    def render(self) -> RenderResult:
        segments = interval_compositor.render(self.text, self.store.highlights())
        runs = interval_compositor.to_runs(self.text, segments)
        return RenderResult(segments, runs, interval_compositor.to_markup(runs))


class CompareSession:
    """双文档高亮对比会话"""

    def __init__(
        self,
        matcher: SimilarityMatcher,
        locator: Optional[TextLocator] = None,
        counter: Optional[HighlightCounter] = None,
        palette: Optional[List[str]] = None,
        dismiss_seconds: Optional[float] = None,
        session_id: Optional[str] = None,
    ):
        settings = get_settings()
        self.id = session_id or uuid4().hex
        self.matcher = matcher
        self.locator = locator or TextLocator()
        self.counter = counter or HighlightCounter()
        self.palette = [c.upper() for c in (palette or settings.get_palette())]
        self.dismiss_seconds = (
            settings.notification_dismiss_seconds if dismiss_seconds is None else dismiss_seconds
        )
        self.sides: Dict[Side, DocumentSide] = {
            side: DocumentSide(side, self.counter) for side in Side
        }
        # 初始为白色，即清除模式
        self.selected_color: Optional[str] = None
        self.activity: List[ActivityEntry] = []
        self.notification = Notification()
        self._dismiss_handle: Optional[asyncio.TimerHandle] = None
        self._pending: Set[asyncio.Task] = set()
        self.logger = logger.bind(session_id=self.id)

    # 文档

    def document(self, side: Union[Side, str]) -> DocumentSide:
        return self.sides[Side(side)]

    def set_document(self, side: Union[Side, str], text: str) -> None:
        self.document(side).set_text(text)

    # 颜色

    @property
    def clear_mode(self) -> bool:
        return self.selected_color is None

    def set_color(self, color: Optional[str]) -> None:
        """选择颜色；白色或 None 进入清除模式"""
        if color is None or color.upper() == CLEAR_COLOR:
            self.enter_clear_mode()
            return
        normalized = color.upper()
        if normalized not in self.palette:
            raise InvalidRequestError(
                f"Color {color} is not in the palette",
                details={"palette": self.palette},
            )
        self.selected_color = normalized

    def enter_clear_mode(self) -> None:
        self.selected_color = None

    # 选区

    def select_range(self, side: Union[Side, str], code_unit_start: int, code_unit_end: int) -> SelectionOutcome:
        """
        处理一次用户选区

        Offsets are UTF-16 code units as reported by the UI. In clear mode every
        highlight on that side overlapping the selection is removed. Otherwise
        the selection is highlighted immediately and a match task is scheduled
        on the running event loop.
        """
        side = Side(side)
        doc = self.document(side)
        start = to_code_point_offset(doc.text, code_unit_start)
        end = to_code_point_offset(doc.text, code_unit_end)
        if start > end:
            start, end = end, start

        outcome = SelectionOutcome(side, start, end)
        if start == end:
            return outcome

        if self.clear_mode:
            outcome.removed = doc.store.remove_overlapping(start, end)
            return outcome

        # 先取事件循环，失败时不留下高亮
        loop = asyncio.get_running_loop()
        color = self.selected_color
        selected_text = doc.text[start:end]
        outcome.highlight_id = doc.store.add(start, end, color)
        self.activity.append(ActivityEntry("selected", side.value, selected_text, start, end))

        task = loop.create_task(
            self._resolve_match(side, selected_text, color, doc.text, self.document(side.other).text)
        )
        self._pending.add(task)
        task.add_done_callback(self._on_task_done)
        outcome.task = task
        return outcome

    async def _resolve_match(
        self,
        side: Side,
        selected_text: str,
        color: Optional[str],
        source_text: str,
        target_text: str,
    ) -> Optional[int]:
        other = side.other
        self.activity.append(ActivityEntry(
            "request",
            side.value,
            json.dumps(
                {"sourceText": source_text, "targetText": target_text, "selectedText": selected_text},
                ensure_ascii=False,
            ),
        ))

        try:
            match = await self.matcher.find_similar(source_text, target_text, selected_text)
        except CollaboratorFailure as e:
            self.logger.warning(LogEvent.SIMILARITY_ERROR, side=side.value, error=e.message)
            self.activity.append(ActivityEntry("response", side.value, "null"))
            self.notify_no_match()
            return None

        self.activity.append(ActivityEntry("response", side.value, match.model_dump_json()))
        candidate = refine(match.to_candidate(), selected_text)

        # 以解析时目标侧的当前文本为准
        target = self.document(other)
        span = self.locator.locate(target.text, candidate.snippet)
        if not span:
            miss = LocatorMiss(candidate.snippet, plausible=span.plausible)
            self.logger.info(LogEvent.LOCATE_MISS, side=other.value, **miss.details)
            self.activity.append(ActivityEntry("miss", other.value, candidate.snippet))
            self.notify_no_match()
            return None

        highlight_id = target.store.add(span.start, span.end, color)
        self.activity.append(ActivityEntry(
            "highlighted", other.value, target.text[span.start:span.end], span.start, span.end
        ))
        self.logger.info(
            LogEvent.HIGHLIGHT_ADDED,
            side=other.value,
            highlight_id=highlight_id,
            text=preview(target.text[span.start:span.end]),
        )
        return highlight_id

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.logger.error(LogEvent.MATCH_TASK_FAILED, error=str(exc), exc_info=exc)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def wait_pending(self) -> None:
        """等待所有未完成的匹配任务"""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # 通知

    def notify_no_match(self) -> None:
        self.notification.visible = True
        if self._dismiss_handle is not None:
            self._dismiss_handle.cancel()
        loop = asyncio.get_running_loop()
        self._dismiss_handle = loop.call_later(self.dismiss_seconds, self.dismiss_notification)

    def dismiss_notification(self) -> None:
        self.notification.visible = False
        if self._dismiss_handle is not None:
            self._dismiss_handle.cancel()
            self._dismiss_handle = None

    # 清理

    def remove_highlight(self, side: Union[Side, str], highlight_id: int) -> Highlight:
        removed = self.document(side).store.remove(highlight_id)
        if removed is None:
            raise ResourceNotFoundError("Highlight", str(highlight_id))
        return removed

    def clear_all_highlights(self) -> None:
        for doc in self.sides.values():
            doc.store.clear()
        self.activity.clear()
        self.logger.info(LogEvent.HIGHLIGHTS_CLEARED)

    def _cancel_pending(self) -> None:
        for task in list(self._pending):
            task.cancel()

    def reset_documents(self) -> None:
        """取消未完成的匹配，清空两侧文本、高亮、控制台和通知"""
        self._cancel_pending()
        for doc in self.sides.values():
            doc.set_text("")
            doc.store.clear()
        self.activity.clear()
        self.dismiss_notification()

    def render(self, side: Union[Side, str]) -> RenderResult:
        return self.document(side).render()

    async def close(self) -> None:
        self._cancel_pending()
        await self.wait_pending()
        self.dismiss_notification()
