"""
会话数据模型 - API 请求与响应
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from revision_compare.services.types import Side


class DocumentUpdate(BaseModel):
    """替换一侧文本"""
    text: str = Field(default="", max_length=500000)


class ColorUpdate(BaseModel):
    """选择颜色，白色或空值进入清除模式"""
    color: Optional[str] = None


class SelectionRequest(BaseModel):
    """用户选区，偏移量为 UTF-16 code unit"""
    side: Side
    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)


class HighlightModel(BaseModel):
    id: int
    start: int
    end: int
    color: Optional[str]


class SegmentModel(BaseModel):
    start: int
    end: int
    text: str
    color: Optional[str]
    highlight_id: Optional[int]


class ActivityModel(BaseModel):
    kind: str
    side: str
    text: str
    start: Optional[int] = None
    end: Optional[int] = None


class NotificationModel(BaseModel):
    message: str
    visible: bool


class DocumentState(BaseModel):
    side: Side
    text: str
    highlights: List[HighlightModel]


class SessionState(BaseModel):
    id: str
    selected_color: Optional[str]
    clear_mode: bool
    palette: List[str]
    pending: int
    documents: List[DocumentState]
    activity: List[ActivityModel]
    notification: NotificationModel


class SelectionResponse(BaseModel):
    side: Side
    start: int
    end: int
    highlight_id: Optional[int] = None
    removed: List[HighlightModel] = Field(default_factory=list)
    pending: bool = False
    matched_highlight_id: Optional[int] = None


class RenderResponse(BaseModel):
    side: Side
    segments: List[SegmentModel]
    html: str
