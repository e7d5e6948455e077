"""Live coverage engine: transcript, extractions, coverage and coaching timer."""
from .catalog import BANT, MEDDPICC, FrameworkCatalog, StaticFrameworkCatalog, load_catalog
from .clock import Clock, ManualClock, ThreadingClock
from .controller import LiveSession, LiveSessionConfig
from .coverage import compute
from .errors import (
    AlreadyStartedError,
    InvalidConfidenceError,
    InvalidTransitionError,
    LiveSessionError,
    OutOfOrderError,
    SchedulerCancellationError,
    SessionNotLiveError,
)
from .extractions import ExtractionAggregator, HighestConfidence, LastWriteWins
from .models import (
    Alert,
    CoverageResult,
    Extraction,
    FieldStatus,
    Framework,
    FrameworkField,
    Segment,
    SegmentEvent,
    SessionInfo,
    Suggestion,
)
from .scheduler import SuggestionScheduler
from .source import MockSegmentSource, SegmentSource
from .suggestions import SuggestionCycle
from .transcript import TranscriptStore

__all__ = [
    "Alert",
    "AlreadyStartedError",
    "BANT",
    "Clock",
    "CoverageResult",
    "Extraction",
    "ExtractionAggregator",
    "FieldStatus",
    "Framework",
    "FrameworkCatalog",
    "FrameworkField",
    "HighestConfidence",
    "InvalidConfidenceError",
    "InvalidTransitionError",
    "LastWriteWins",
    "LiveSession",
    "LiveSessionConfig",
    "LiveSessionError",
    "MEDDPICC",
    "ManualClock",
    "MockSegmentSource",
    "OutOfOrderError",
    "SchedulerCancellationError",
    "Segment",
    "SegmentEvent",
    "SegmentSource",
    "SessionInfo",
    "SessionNotLiveError",
    "StaticFrameworkCatalog",
    "Suggestion",
    "SuggestionCycle",
    "SuggestionScheduler",
    "ThreadingClock",
    "TranscriptStore",
    "compute",
    "load_catalog",
]
