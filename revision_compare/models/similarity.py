"""
语义匹配数据模型 - 外部匹配服务的请求与响应
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from revision_compare.services.types import MatchCandidate


class SimilarityRequest(BaseModel):
    """语义匹配请求"""
    model_config = ConfigDict(populate_by_name=True)

    source_text: str = Field(..., alias="sourceText")
    target_text: str = Field(..., alias="targetText")
    selected_text: str = Field(..., alias="selectedText", min_length=1)


class SimilarMatch(BaseModel):
    """语义匹配响应，偏移量仅供参考"""
    similar_text: str = ""
    start: Optional[int] = None
    end: Optional[int] = None
    explanation: str = ""

    def to_candidate(self) -> MatchCandidate:
        return MatchCandidate(
            snippet=self.similar_text,
            explanation=self.explanation,
            start=self.start,
            end=self.end,
        )
