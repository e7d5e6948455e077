"""Session controller: lifecycle state machine and public engine contract."""
from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from threading import RLock
from typing import Callable, Dict, List, Literal, Mapping, Optional, Tuple, Union
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from config.registry import LAST_WRITE_WINS, policy_names
from config.settings import Settings, settings
from live_session.clock import Clock, ThreadingClock
from live_session.coverage import compute
from live_session.errors import (
    AlreadyStartedError,
    InvalidConfidenceError,
    InvalidTransitionError,
    OutOfOrderError,
    SchedulerCancellationError,
    SessionNotLiveError,
)
from live_session.extractions import ExtractionAggregator, validate_confidence
from live_session.models import (
    Alert,
    CoverageResult,
    Extraction,
    Framework,
    Segment,
    SegmentEvent,
    SessionInfo,
    SessionState,
    Suggestion,
)
from live_session.scheduler import SuggestionScheduler
from live_session.source import SegmentSource, Subscription
from live_session.suggestions import DEFAULT_SUGGESTIONS, GapTargeter, SuggestionCycle
from live_session.transcript import TranscriptStore
from observability import log_event

logger = logging.getLogger(__name__)

ListenerKind = Literal["segment", "extraction", "suggestion"]


class LiveSessionConfig(BaseModel):  # Per-session tuning snapshot
    first_suggestion_seconds: float = Field(default=15.0, ge=0)
    suggestion_min_seconds: float = Field(default=60.0, gt=0)
    suggestion_max_seconds: float = Field(default=90.0, gt=0)
    suggestion_seed: Optional[int] = None
    target_gaps: bool = False
    monologue_threshold: int = Field(default=10, ge=0)
    merge_policy: str = LAST_WRITE_WINS
    default_tag_confidence: float = Field(default=0.85, ge=0.0, le=1.0)
    suggestions: List[str] = Field(default_factory=lambda: list(DEFAULT_SUGGESTIONS), min_length=1)

    @field_validator("merge_policy")
    @classmethod
    def _known_policy(cls, value: str) -> str:
        if value not in policy_names():
            raise ValueError(f"unknown merge policy: {value}")
        return value

    @classmethod
    def from_settings(cls, source: Optional[Settings] = None) -> "LiveSessionConfig":
        cfg = source or settings
        return cls(
            first_suggestion_seconds=cfg.FIRST_SUGGESTION_SECONDS,
            suggestion_min_seconds=cfg.SUGGESTION_MIN_SECONDS,
            suggestion_max_seconds=cfg.SUGGESTION_MAX_SECONDS,
            suggestion_seed=cfg.SUGGESTION_SEED,
            target_gaps=cfg.SUGGESTION_TARGET_GAPS,
            monologue_threshold=cfg.MONOLOGUE_SEGMENT_THRESHOLD,
            merge_policy=cfg.MERGE_POLICY,
            default_tag_confidence=cfg.DEFAULT_TAG_CONFIDENCE,
        )


class LiveSession:
    """One conversation: transcript, extractions and suggestion timer under one lock.

    States run ``idle -> live -> ended``. Every mutation (append, record,
    transition, suggestion delivery) happens while holding the session's
    ``RLock``, so a session has a single mutator at a time and listeners
    observe events in arrival order. Reads take the same lock briefly and
    return immutable copies.
    """

    def __init__(
        self,
        framework: Framework,
        *,
        session_id: Optional[str] = None,
        config: Optional[LiveSessionConfig] = None,
        clock: Optional[Clock] = None,
        source: Optional[SegmentSource] = None,
        rng: Optional[random.Random] = None,
        on_segment: Optional[Callable[[Segment], None]] = None,
        on_extraction: Optional[Callable[[str, str, float], None]] = None,
        on_suggestion: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.session_id = session_id or uuid4().hex
        self.framework = framework
        self.config = config or LiveSessionConfig.from_settings()
        self.clock: Clock = clock or ThreadingClock()
        self._source = source
        self._lock = RLock()
        self._state: SessionState = "idle"
        self.created_at = datetime.now(timezone.utc)
        self.ended_at: Optional[datetime] = None
        self._subscription: Optional[Subscription] = None
        self._current_suggestion: Optional[Suggestion] = None
        self._listeners: Dict[str, List[Callable[..., None]]] = {
            "segment": [],
            "extraction": [],
            "suggestion": [],
        }
        if on_segment:
            self.add_listener("segment", on_segment)
        if on_extraction:
            self.add_listener("extraction", on_extraction)
        if on_suggestion:
            self.add_listener("suggestion", on_suggestion)

        self.transcript_store = TranscriptStore(lock=self._lock)
        self.aggregator = ExtractionAggregator.with_policy(self.config.merge_policy, lock=self._lock)
        if rng is None:
            rng = random.Random(self.config.suggestion_seed)
        self.scheduler = SuggestionScheduler(
            self.clock,
            self._deliver_suggestion,
            transcript=self.transcript_store,
            aggregator=self.aggregator,
            targeter=GapTargeter(framework) if self.config.target_gaps else None,
            cycle=SuggestionCycle(self.config.suggestions),
            first_delay=self.config.first_suggestion_seconds,
            min_interval=self.config.suggestion_min_seconds,
            max_interval=self.config.suggestion_max_seconds,
            monologue_threshold=self.config.monologue_threshold,
            rng=rng,
            lock=self._lock,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    def start(self, source: Optional[SegmentSource] = None) -> None:
        """Move ``idle -> live``, arm the suggestion timer and subscribe to the source."""

        with self._lock:
            if self._state != "idle":
                raise AlreadyStartedError(self._state)
            self._state = "live"
            self.scheduler.start()
            feed = source or self._source
            if feed is not None:
                try:
                    self._subscription = feed.subscribe(self._on_source_event)
                except Exception:
                    self.scheduler.stop()
                    self._state = "idle"
                    raise
            log_event(
                "session_started",
                self.session_id,
                state=self._state,
                framework=self.framework.id,
                fields=len(self.framework.fields),
            )

    def end(self) -> None:
        """Move ``live -> ended``; calling it again once ended is a no-op.

        By the time this returns the suggestion timer and the source
        subscription are cancelled and later ingests are rejected.
        """

        with self._lock:
            if self._state == "ended":
                return
            if self._state != "live":
                raise InvalidTransitionError("end", self._state)
            self._state = "ended"
            self.ended_at = datetime.now(timezone.utc)
            subscription, self._subscription = self._subscription, None
            try:
                self.scheduler.stop()
            except SchedulerCancellationError as exc:
                log_event(
                    "scheduler_cancel_failed",
                    self.session_id,
                    level=logging.ERROR,
                    state=self._state,
                    error=str(exc),
                )
                raise
            finally:
                if subscription is not None:
                    subscription.stop()
            log_event(
                "session_ended",
                self.session_id,
                state=self._state,
                segments=len(self.transcript_store),
                percentage=compute(self.framework, self.aggregator.snapshot()).percentage,
            )

    def _require_live(self, operation: str) -> None:
        if self._state != "live":
            raise SessionNotLiveError(operation, self._state)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def ingest_segment(
        self,
        segment: Union[Segment, SegmentEvent],
        confidences: Optional[Mapping[str, float]] = None,
    ) -> Segment:
        """Append a segment and record one extraction per tag.

        Tag confidences come from ``confidences`` (or the event's own map)
        and fall back to the configured default. All of them are validated
        before anything is stored, so a rejected segment leaves both the
        transcript and the extraction table untouched.
        """

        with self._lock:
            self._require_live("ingest a segment")
            if isinstance(segment, SegmentEvent):
                stored, supplied = self._segment_from_event(segment), dict(segment.confidences)
            else:
                stored, supplied = segment, {}
            supplied.update(confidences or {})

            resolved: Dict[str, float] = {}
            for tag in stored.tags:
                try:
                    resolved[tag] = validate_confidence(
                        tag, supplied.get(tag, self.config.default_tag_confidence)
                    )
                except InvalidConfidenceError as exc:
                    log_event("segment_rejected", self.session_id, field=tag, error=str(exc))
                    raise

            try:
                length = self.transcript_store.append(stored)
            except OutOfOrderError as exc:
                log_event("segment_rejected", self.session_id, segments=len(self.transcript_store), error=str(exc))
                raise
            log_event("segment_appended", self.session_id, segments=length, tags=list(stored.tags))
            applied = [
                (tag, confidence)
                for tag, confidence in resolved.items()
                if self._store_extraction(tag, stored.text, confidence, stored.id)
            ]
            self._notify("segment", stored)
            for tag, confidence in applied:
                self._notify("extraction", tag, stored.text, confidence)
            return stored

    def record_extraction(
        self,
        field: str,
        value: str,
        confidence: float,
        source_segment_id: Optional[str] = None,
    ) -> bool:
        """Record extraction evidence delivered separately from a segment."""

        with self._lock:
            self._require_live("record an extraction")
            try:
                checked = validate_confidence(field, confidence)
            except InvalidConfidenceError as exc:
                log_event("extraction_rejected", self.session_id, field=field, error=str(exc))
                raise
            applied = self._store_extraction(field, value, checked, source_segment_id)
            if applied:
                self._notify("extraction", field, value, checked)
            return applied

    def _store_extraction(self, field: str, value: str, confidence: float, source_segment_id: Optional[str]) -> bool:
        applied = self.aggregator.record(field, value, confidence, source_segment_id)
        log_event(
            "extraction_recorded",
            self.session_id,
            field=field,
            confidence=confidence,
            applied=applied,
        )
        return applied

    def _segment_from_event(self, event: SegmentEvent) -> Segment:
        return Segment(
            id=event.segment_id or uuid4().hex,
            speaker=event.speaker,
            text=event.text,
            timestamp=event.timestamp_seconds,
            tags=tuple(dict.fromkeys(event.tags)),
        )

    def _on_source_event(self, event: SegmentEvent) -> None:
        with self._lock:
            if self._state != "live":
                logger.debug("session %s not live; ignoring late source event", self.session_id)
                return
            try:
                self.ingest_segment(event)
            except (OutOfOrderError, InvalidConfidenceError) as exc:
                logger.warning("session %s dropped source segment: %s", self.session_id, exc)

    def _deliver_suggestion(self, suggestion: Suggestion) -> None:
        # Runs under the session lock via the scheduler.
        self._current_suggestion = suggestion
        log_event("suggestion_emitted", self.session_id, index=suggestion.index, field=suggestion.field)
        self._notify("suggestion", suggestion.text)

    def dismiss_suggestion(self) -> None:
        with self._lock:
            self._current_suggestion = None

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def add_listener(self, kind: ListenerKind, fn: Callable[..., None]) -> None:
        if kind not in self._listeners:
            raise ValueError(f"unknown listener kind: {kind}")
        with self._lock:
            self._listeners[kind].append(fn)

    def _notify(self, kind: str, *args: object) -> None:
        for listener in list(self._listeners[kind]):
            try:
                listener(*args)
            except Exception:
                logger.exception("session %s %s listener failed", self.session_id, kind)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def transcript(self) -> Tuple[Segment, ...]:
        return self.transcript_store.all()

    def snapshot(self) -> Mapping[str, Extraction]:
        return self.aggregator.snapshot()

    def get(self, field: str) -> Optional[Extraction]:
        return self.aggregator.get(field)

    def coverage(self) -> CoverageResult:
        return compute(self.framework, self.aggregator.snapshot())

    def alerts(self) -> List[Alert]:
        with self._lock:
            return self.scheduler.alerts()

    @property
    def current_suggestion(self) -> Optional[Suggestion]:
        with self._lock:
            return self._current_suggestion

    def info(self) -> SessionInfo:
        with self._lock:
            return SessionInfo(
                session_id=self.session_id,
                framework_id=self.framework.id,
                state=self._state,
                created_at=self.created_at,
                ended_at=self.ended_at,
                segment_count=len(self.transcript_store),
            )


__all__ = ["ListenerKind", "LiveSession", "LiveSessionConfig"]
