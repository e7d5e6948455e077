"""Pydantic models shared by the live coverage engine."""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

SessionState = Literal["idle", "live", "ended"]
FieldStatusLiteral = Literal["complete", "partial", "missing"]
AlertKind = Literal["monologue"]


class FrameworkField(BaseModel):  # One qualification field of a framework
    key: str = Field(min_length=1)
    label: str
    required: bool = True
    prompt: str = ""
    questions: List[str] = Field(default_factory=list)


class Framework(BaseModel):  # Ordered set of qualification fields
    id: str
    name: str
    fields: List[FrameworkField] = Field(default_factory=list)

    @field_validator("fields")
    @classmethod
    def _unique_keys(cls, fields: List[FrameworkField]) -> List[FrameworkField]:
        seen: set[str] = set()
        for item in fields:
            if item.key in seen:
                raise ValueError(f"duplicate framework field key: {item.key}")
            seen.add(item.key)
        return fields

    def keys(self) -> List[str]:
        return [item.key for item in self.fields]

    def get_field(self, key: str) -> Optional[FrameworkField]:
        return next((item for item in self.fields if item.key == key), None)


class Segment(BaseModel):  # Immutable transcript entry
    model_config = ConfigDict(frozen=True)

    id: str
    speaker: str
    text: str
    timestamp: float = Field(ge=0.0)
    tags: Tuple[str, ...] = ()


class SegmentEvent(BaseModel):  # Inbound event delivered by a segment source
    speaker: str
    text: str
    timestamp_seconds: float = Field(ge=0.0)
    tags: List[str] = Field(default_factory=list)
    confidences: Dict[str, float] = Field(default_factory=dict)
    segment_id: Optional[str] = None


class Extraction(BaseModel):  # Current belief about one framework field
    model_config = ConfigDict(frozen=True)

    field: str
    value: str
    confidence: float
    source_segment_id: Optional[str] = None


class FieldStatus(BaseModel):  # Per-field coverage status
    key: str
    label: str
    required: bool
    status: FieldStatusLiteral
    confidence: Optional[float] = None
    value: Optional[str] = None


class CoverageResult(BaseModel):  # Derived coverage snapshot
    percentage: int
    per_field: List[FieldStatus] = Field(default_factory=list)

    def missing(self) -> List[str]:
        return [item.key for item in self.per_field if item.status == "missing"]

    def missing_required(self) -> List[str]:
        return [item.key for item in self.per_field if item.status == "missing" and item.required]


class Suggestion(BaseModel):  # Coaching prompt emitted by the scheduler
    text: str
    index: int
    emitted_at: float
    field: Optional[str] = None


class Alert(BaseModel):  # Level-triggered advisory
    kind: AlertKind
    message: str


class SessionInfo(BaseModel):  # Lifecycle summary for adapters
    session_id: str
    framework_id: str
    state: SessionState
    created_at: datetime
    ended_at: Optional[datetime] = None
    segment_count: int = 0


__all__ = [
    "Alert",
    "AlertKind",
    "CoverageResult",
    "Extraction",
    "FieldStatus",
    "FieldStatusLiteral",
    "Framework",
    "FrameworkField",
    "Segment",
    "SegmentEvent",
    "SessionInfo",
    "SessionState",
    "Suggestion",
]
