"""Replay the scripted discovery call end to end on a manual clock."""
import random

from live_session.catalog import MEDDPICC
from live_session.clock import ManualClock
from live_session.controller import LiveSession, LiveSessionConfig
from live_session.source import DISCOVERY_CALL, MockSegmentSource


def test_full_call_reaches_expected_coverage():
    clock = ManualClock()
    suggestions, extractions = [], []
    session = LiveSession(
        MEDDPICC,
        config=LiveSessionConfig(suggestion_seed=1),
        clock=clock,
        source=MockSegmentSource(clock, min_gap=5.0, max_gap=5.0, rng=random.Random(2)),
        on_suggestion=suggestions.append,
        on_extraction=lambda field, value, confidence: extractions.append(field),
    )
    session.start()

    # one pass of the script: first line at 2s, then every 5s
    clock.advance(2.0 + 5.0 * (len(DISCOVERY_CALL) - 1) + 1.0)
    assert len(session.transcript()) == len(DISCOVERY_CALL)

    coverage = session.coverage()
    covered = {f.key for f in coverage.per_field if f.status == "complete"}
    assert covered == {
        "metrics",
        "economic_buyer",
        "decision_criteria",
        "decision_process",
        "identify_pain",
        "champion",
    }
    assert coverage.percentage == 75
    assert coverage.missing() == ["paper_process", "competition"]
    assert len(suggestions) == 1
    assert session.alerts() == []

    session.end()
    clock.advance(600.0)
    assert len(session.transcript()) == len(DISCOVERY_CALL)
    assert len(suggestions) == 1
