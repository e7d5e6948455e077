"""Pydantic schemas for the live session API."""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from live_session.models import Alert, CoverageResult, Segment, SessionInfo, Suggestion


class StartReq(BaseModel):
    framework_id: Optional[str] = None
    session_id: Optional[str] = None
    mock_source: bool = False


class SegmentReq(BaseModel):
    speaker: str
    text: str
    timestamp_seconds: float = Field(ge=0.0)
    tags: List[str] = Field(default_factory=list)
    confidences: Dict[str, float] = Field(default_factory=dict)
    segment_id: Optional[str] = None


class ExtractionReq(BaseModel):
    field: str
    value: str
    confidence: float
    source_segment_id: Optional[str] = None


class SessionResp(BaseModel):
    session: SessionInfo
    coverage: CoverageResult


class SegmentResp(BaseModel):
    segment: Segment
    segment_count: int
    coverage: CoverageResult
    alerts: List[Alert] = Field(default_factory=list)


class ExtractionResp(BaseModel):
    applied: bool
    coverage: CoverageResult


class TranscriptResp(BaseModel):
    session_id: str
    segments: List[Segment] = Field(default_factory=list)


class SuggestionResp(BaseModel):
    session_id: str
    suggestion: Optional[Suggestion] = None


class AlertsResp(BaseModel):
    session_id: str
    alerts: List[Alert] = Field(default_factory=list)
