"""Comparison session APIs: documents, color, selections and rendering."""
from __future__ import annotations

import asyncio
from typing import List

from fastapi import APIRouter, Depends, Query, Response

from revision_compare.api.deps import get_matcher, get_session_registry
from revision_compare.core.logging import get_logger
from revision_compare.models.session import (
    ActivityModel,
    ColorUpdate,
    DocumentState,
    DocumentUpdate,
    HighlightModel,
    NotificationModel,
    RenderResponse,
    SegmentModel,
    SelectionRequest,
    SelectionResponse,
    SessionState,
)
from revision_compare.services.compare_session import CompareSession, SimilarityMatcher
from revision_compare.services.session_registry import SessionRegistry
from revision_compare.services.types import Highlight, Side

logger = get_logger(__name__)
router = APIRouter(prefix="/api/v1/sessions", tags=["Sessions"])


def _session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> CompareSession:
    return registry.get(session_id)


def _highlights(items: List[Highlight]) -> List[HighlightModel]:
    return [HighlightModel(id=h.id, start=h.start, end=h.end, color=h.color) for h in items]


def _state(session: CompareSession) -> SessionState:
    return SessionState(
        id=session.id,
        selected_color=session.selected_color,
        clear_mode=session.clear_mode,
        palette=session.palette,
        pending=session.pending_count,
        documents=[
            DocumentState(
                side=side,
                text=doc.text,
                highlights=_highlights(doc.store.highlights()),
            )
            for side, doc in session.sides.items()
        ],
        activity=[
            ActivityModel(kind=a.kind, side=a.side, text=a.text, start=a.start, end=a.end)
            for a in session.activity
        ],
        notification=NotificationModel(
            message=session.notification.message,
            visible=session.notification.visible,
        ),
    )


@router.post("", response_model=SessionState, status_code=201, summary="Create a comparison session")
async def create_session(
    registry: SessionRegistry = Depends(get_session_registry),
    matcher: SimilarityMatcher = Depends(get_matcher),
) -> SessionState:
    return _state(registry.create(matcher))


@router.get("/{session_id}", response_model=SessionState, summary="Get session state")
async def get_session(session: CompareSession = Depends(_session)) -> SessionState:
    return _state(session)


@router.delete("/{session_id}", status_code=204, summary="Close a session")
async def delete_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> Response:
    await registry.close(session_id)
    return Response(status_code=204)


@router.put("/{session_id}/documents/{side}", response_model=SessionState, summary="Replace one side's text")
async def put_document(
    side: Side,
    payload: DocumentUpdate,
    session: CompareSession = Depends(_session),
) -> SessionState:
    session.set_document(side, payload.text)
    return _state(session)


@router.put("/{session_id}/color", response_model=SessionState, summary="Select highlight color")
async def put_color(payload: ColorUpdate, session: CompareSession = Depends(_session)) -> SessionState:
    session.set_color(payload.color)
    return _state(session)


@router.post("/{session_id}/clear-mode", response_model=SessionState, summary="Enter clear mode")
async def clear_mode(session: CompareSession = Depends(_session)) -> SessionState:
    session.enter_clear_mode()
    return _state(session)


@router.post("/{session_id}/selections", response_model=SelectionResponse, summary="Apply a user selection")
async def post_selection(
    payload: SelectionRequest,
    wait: bool = Query(False, description="Wait for the cross-document match before responding"),
    session: CompareSession = Depends(_session),
) -> SelectionResponse:
    outcome = session.select_range(payload.side, payload.start, payload.end)
    matched = None
    if wait and outcome.task is not None:
        # 重置或关闭会话会取消匹配任务，此时没有匹配结果
        await asyncio.wait({outcome.task})
        if not outcome.task.cancelled():
            matched = outcome.task.result()
    return SelectionResponse(
        side=outcome.side,
        start=outcome.start,
        end=outcome.end,
        highlight_id=outcome.highlight_id,
        removed=_highlights(outcome.removed),
        pending=outcome.task is not None and not outcome.task.done(),
        matched_highlight_id=matched,
    )


@router.delete(
    "/{session_id}/highlights/{side}/{highlight_id}",
    status_code=204,
    summary="Remove one highlight",
)
async def delete_highlight(
    side: Side,
    highlight_id: int,
    session: CompareSession = Depends(_session),
) -> Response:
    session.remove_highlight(side, highlight_id)
    return Response(status_code=204)


@router.post("/{session_id}/clear", response_model=SessionState, summary="Clear all highlights")
async def clear_highlights(session: CompareSession = Depends(_session)) -> SessionState:
    session.clear_all_highlights()
    return _state(session)


@router.post("/{session_id}/reset", response_model=SessionState, summary="Reset both documents")
async def reset_documents(session: CompareSession = Depends(_session)) -> SessionState:
    session.reset_documents()
    return _state(session)


@router.get("/{session_id}/render/{side}", response_model=RenderResponse, summary="Render one side")
async def render_side(side: Side, session: CompareSession = Depends(_session)) -> RenderResponse:
    result = session.render(side)
    return RenderResponse(
        side=side,
        segments=[
            SegmentModel(
                start=segment.start,
                end=segment.end,
                text=run.text,
                color=segment.color,
                highlight_id=segment.highlight_id,
            )
            for segment, run in zip(result.segments, result.runs)
        ],
        html=result.markup,
    )
