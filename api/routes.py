"""FastAPI routes for live session control."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from api.schemas import (
    AlertsResp,
    ExtractionReq,
    ExtractionResp,
    SegmentReq,
    SegmentResp,
    SessionResp,
    StartReq,
    SuggestionResp,
    TranscriptResp,
)
from live_session.errors import InvalidConfidenceError, InvalidTransitionError, OutOfOrderError
from live_session.models import CoverageResult, SegmentEvent
from services.sessions import FrameworkNotFoundError, LiveSessionManager, SessionNotFoundError

router = APIRouter(prefix="/api/live-sessions")

_manager = LiveSessionManager()


def get_manager() -> LiveSessionManager:
    return _manager


def _session_or_404(manager: LiveSessionManager, session_id: str):
    try:
        return manager.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="session not found")


@router.post("/start", response_model=SessionResp)
def start(req: StartReq, manager: LiveSessionManager = Depends(get_manager)) -> SessionResp:
    try:
        session = manager.start_session(
            req.framework_id,
            session_id=req.session_id,
            mock_source=req.mock_source,
        )
    except FrameworkNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"framework not found: {exc.framework_id}")
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return SessionResp(session=session.info(), coverage=session.coverage())


@router.post("/{session_id}/segments", response_model=SegmentResp)
def add_segment(
    session_id: str, req: SegmentReq, manager: LiveSessionManager = Depends(get_manager)
) -> SegmentResp:
    session = _session_or_404(manager, session_id)
    try:
        segment = session.ingest_segment(SegmentEvent(**req.model_dump()))
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except (OutOfOrderError, InvalidConfidenceError) as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return SegmentResp(
        segment=segment,
        segment_count=session.info().segment_count,
        coverage=session.coverage(),
        alerts=session.alerts(),
    )


@router.post("/{session_id}/extractions", response_model=ExtractionResp)
def add_extraction(
    session_id: str, req: ExtractionReq, manager: LiveSessionManager = Depends(get_manager)
) -> ExtractionResp:
    session = _session_or_404(manager, session_id)
    try:
        applied = session.record_extraction(req.field, req.value, req.confidence, req.source_segment_id)
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except InvalidConfidenceError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return ExtractionResp(applied=applied, coverage=session.coverage())


@router.get("/{session_id}/coverage", response_model=CoverageResult)
def coverage(session_id: str, manager: LiveSessionManager = Depends(get_manager)) -> CoverageResult:
    return _session_or_404(manager, session_id).coverage()


@router.get("/{session_id}/transcript", response_model=TranscriptResp)
def transcript(session_id: str, manager: LiveSessionManager = Depends(get_manager)) -> TranscriptResp:
    session = _session_or_404(manager, session_id)
    return TranscriptResp(session_id=session_id, segments=list(session.transcript()))


@router.get("/{session_id}/suggestion", response_model=SuggestionResp)
def suggestion(session_id: str, manager: LiveSessionManager = Depends(get_manager)) -> SuggestionResp:
    session = _session_or_404(manager, session_id)
    return SuggestionResp(session_id=session_id, suggestion=session.current_suggestion)


@router.delete("/{session_id}/suggestion", response_model=SuggestionResp)
def dismiss_suggestion(session_id: str, manager: LiveSessionManager = Depends(get_manager)) -> SuggestionResp:
    session = _session_or_404(manager, session_id)
    session.dismiss_suggestion()
    return SuggestionResp(session_id=session_id, suggestion=None)


@router.get("/{session_id}/alerts", response_model=AlertsResp)
def alerts(session_id: str, manager: LiveSessionManager = Depends(get_manager)) -> AlertsResp:
    session = _session_or_404(manager, session_id)
    return AlertsResp(session_id=session_id, alerts=session.alerts())


@router.post("/{session_id}/end", response_model=SessionResp)
def end(session_id: str, manager: LiveSessionManager = Depends(get_manager)) -> SessionResp:
    session = _session_or_404(manager, session_id)
    try:
        session.end()
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return SessionResp(session=session.info(), coverage=session.coverage())


@router.delete("/{session_id}", status_code=204)
def discard(session_id: str, manager: LiveSessionManager = Depends(get_manager)) -> None:
    try:
        manager.discard(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="session not found")
