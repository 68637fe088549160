from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SegmentRequest(BaseModel):
    text: str = ""
    settings: Optional[Dict[str, Any]] = None


class SpanResponse(BaseModel):
    text: str
    color: Optional[str] = None
    rule_id: Optional[str] = None


class SegmentResponse(BaseModel):
    id: str
    raw_content: str
    decorated_content: str
    start_offset: int
    end_offset: int
    ordinal: int
    total: int
    carried_markup_id: Optional[str] = None
    length: int
    forced: bool = False
    spans: Optional[List[SpanResponse]] = None


class SplitResponse(BaseModel):
    segments: List[SegmentResponse] = Field(default_factory=list)
    characters: int
    parts: int


class DraftRequest(BaseModel):
    text: str = ""


class DraftResponse(BaseModel):
    text: str
    characters: int
