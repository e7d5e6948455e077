"""Helpers for creating, tracking and ending live coverage sessions."""
from __future__ import annotations

import random
from pathlib import Path
from threading import RLock
from typing import Callable, Dict, List, Mapping, Optional, Protocol, Union

from config.settings import Settings, settings
from live_session.catalog import FrameworkCatalog, StaticFrameworkCatalog, load_catalog
from live_session.clock import Clock, ThreadingClock
from live_session.controller import LiveSession, LiveSessionConfig
from live_session.models import CoverageResult, Segment, SegmentEvent, SessionInfo
from live_session.source import MockSegmentSource


class SessionNotFoundError(KeyError):  # Raised when session missing
    def __init__(self, session_id: str) -> None:
        super().__init__(session_id)
        self.session_id = session_id


class FrameworkNotFoundError(KeyError):  # Raised when the catalog lacks a framework
    def __init__(self, framework_id: str) -> None:
        super().__init__(framework_id)
        self.framework_id = framework_id


class SessionStore(Protocol):  # Session registry interface
    def create(self, session: LiveSession) -> None: ...

    def get(self, session_id: str) -> LiveSession: ...

    def list(self) -> List[LiveSession]: ...

    def delete(self, session_id: str) -> None: ...


class InMemorySessionStore:  # Thread-safe in-memory store
    def __init__(self) -> None:
        self._sessions: Dict[str, LiveSession] = {}
        self._lock = RLock()

    def create(self, session: LiveSession) -> None:  # Register new session
        with self._lock:
            if session.session_id in self._sessions:
                raise ValueError(f"session already exists: {session.session_id}")
            self._sessions[session.session_id] = session

    def get(self, session_id: str) -> LiveSession:  # Load session
        with self._lock:
            if session_id not in self._sessions:
                raise SessionNotFoundError(session_id)
            return self._sessions[session_id]

    def list(self) -> List[LiveSession]:
        with self._lock:
            return list(self._sessions.values())

    def delete(self, session_id: str) -> None:  # Drop session
        with self._lock:
            self._sessions.pop(session_id, None)


def default_catalog(source: Optional[Settings] = None) -> FrameworkCatalog:
    """Catalog from ``CATALOG_PATH`` when configured, else the built-in frameworks."""

    cfg = source or settings
    if cfg.CATALOG_PATH:
        return load_catalog(Path(cfg.CATALOG_PATH))
    return StaticFrameworkCatalog()


class LiveSessionManager:  # Session lifecycle orchestrator
    def __init__(
        self,
        catalog: Optional[FrameworkCatalog] = None,
        store: Optional[SessionStore] = None,
        clock_factory: Callable[[], Clock] = ThreadingClock,
        config: Optional[Settings] = None,
    ) -> None:
        self.settings = config or settings
        self.catalog = catalog or default_catalog(self.settings)
        self.store = store or InMemorySessionStore()
        self._clock_factory = clock_factory

    def start_session(
        self,
        framework_id: Optional[str] = None,
        *,
        session_id: Optional[str] = None,
        mock_source: bool = False,
    ) -> LiveSession:
        """Create a session for ``framework_id``, register it and start it."""

        framework_key = framework_id or self.settings.DEFAULT_FRAMEWORK_ID
        try:
            framework = self.catalog.get(framework_key)
        except KeyError as exc:
            raise FrameworkNotFoundError(framework_key) from exc

        clock = self._clock_factory()
        source = None
        if mock_source:
            source = MockSegmentSource(
                clock,
                first_delay=self.settings.MOCK_FIRST_SEGMENT_SECONDS,
                min_gap=self.settings.MOCK_SEGMENT_MIN_SECONDS,
                max_gap=self.settings.MOCK_SEGMENT_MAX_SECONDS,
                rng=random.Random(self.settings.SUGGESTION_SEED),
            )
        session = LiveSession(
            framework,
            session_id=session_id,
            config=LiveSessionConfig.from_settings(self.settings),
            clock=clock,
            source=source,
        )
        self.store.create(session)
        try:
            session.start()
        except Exception:
            self.store.delete(session.session_id)
            raise
        return session

    def get(self, session_id: str) -> LiveSession:
        return self.store.get(session_id)

    def ingest(
        self,
        session_id: str,
        segment: Union[Segment, SegmentEvent],
        confidences: Optional[Mapping[str, float]] = None,
    ) -> Segment:
        return self.get(session_id).ingest_segment(segment, confidences)

    def record_extraction(
        self,
        session_id: str,
        field: str,
        value: str,
        confidence: float,
        source_segment_id: Optional[str] = None,
    ) -> bool:
        return self.get(session_id).record_extraction(field, value, confidence, source_segment_id)

    def coverage(self, session_id: str) -> CoverageResult:
        return self.get(session_id).coverage()

    def end_session(self, session_id: str) -> SessionInfo:
        """End the session (idempotent once ended) and return its summary."""

        session = self.get(session_id)
        session.end()
        return session.info()

    def list_sessions(self) -> List[SessionInfo]:
        return [session.info() for session in self.store.list()]

    def discard(self, session_id: str) -> None:
        """End a live session if needed and forget it."""

        session = self.get(session_id)
        if session.state == "live":
            session.end()
        self.store.delete(session_id)

    def shutdown(self) -> None:
        for session in self.store.list():
            if session.state == "live":
                session.end()


__all__ = [
    "FrameworkNotFoundError",
    "InMemorySessionStore",
    "LiveSessionManager",
    "SessionNotFoundError",
    "SessionStore",
    "default_catalog",
]
