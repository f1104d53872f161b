"""Semantic matching endpoint used by the comparison front end."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from revision_compare.api.deps import get_matcher
from revision_compare.core.logging import get_logger
from revision_compare.models.similarity import SimilarityRequest, SimilarMatch
from revision_compare.services.compare_session import SimilarityMatcher

logger = get_logger(__name__)
router = APIRouter(prefix="/api/v1", tags=["Similarity"])


@router.post("/find-similar-sentence", response_model=SimilarMatch, summary="Find the most similar passage")
async def find_similar_sentence(
    payload: SimilarityRequest,
    matcher: SimilarityMatcher = Depends(get_matcher),
) -> SimilarMatch:
    """在目标文本中查找与选中内容最相似的片段，偏移量仅供参考"""
    return await matcher.find_similar(payload.source_text, payload.target_text, payload.selected_text)
