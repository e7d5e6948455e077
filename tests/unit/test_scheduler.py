import random

import pytest

from live_session.clock import ManualClock
from live_session.errors import SchedulerCancellationError
from live_session.extractions import ExtractionAggregator
from live_session.models import Segment
from live_session.scheduler import SuggestionScheduler
from live_session.suggestions import GapTargeter, SuggestionCycle
from live_session.transcript import TranscriptStore


def _scheduler(clock, sink, **kwargs):
    kwargs.setdefault("rng", random.Random(3))
    return SuggestionScheduler(clock, sink.append, transcript=TranscriptStore(), **kwargs)


def test_first_fire_then_jittered_interval(clock):
    fired = []
    sched = _scheduler(clock, fired, cycle=SuggestionCycle(["a", "b"]))
    sched.start()

    clock.advance(14.9)
    assert fired == []
    clock.advance(0.1)
    assert [s.text for s in fired] == ["a"]
    assert fired[0].emitted_at == 15.0

    clock.advance(59.9)
    assert len(fired) == 1
    clock.advance(30.1)
    assert [s.text for s in fired] == ["a", "b"]
    assert 75.0 <= fired[1].emitted_at <= 105.0


def test_intervals_stay_within_bounds(clock):
    fired = []
    sched = _scheduler(clock, fired, first_delay=0.0, rng=random.Random(11))
    sched.start()
    clock.advance(10 * 90.0)

    times = [s.emitted_at for s in fired]
    gaps = [b - a for a, b in zip(times, times[1:])]
    assert gaps
    assert all(60.0 - 1e-9 <= gap <= 90.0 + 1e-9 for gap in gaps)
    assert [s.index for s in fired] == list(range(len(fired)))


def test_stop_guarantees_no_more_callbacks(clock):
    fired = []
    sched = _scheduler(clock, fired)
    sched.start()
    clock.advance(15.0)
    assert len(fired) == 1

    sched.stop()
    clock.advance(2 * 90.0)

    assert len(fired) == 1
    assert clock.pending() == 0
    assert sched.running is False


def test_stop_is_repeatable(clock):
    sched = _scheduler(clock, [])
    sched.stop()
    sched.start()
    sched.stop()
    sched.stop()
    assert clock.pending() == 0


class _LateHandle:
    """Handle whose cancel() comes too late: the timer still fires."""

    active = False

    def cancel(self):
        pass


class _LateClock(ManualClock):
    def call_later(self, delay, fn):
        super().call_later(delay, fn)
        return _LateHandle()


def test_stale_timer_that_still_fires_is_dropped():
    clock = _LateClock()
    fired = []
    sched = _scheduler(clock, fired)
    sched.start()
    sched.stop()

    clock.advance(2 * 90.0)
    assert fired == []


class _StuckHandle:
    active = True

    def cancel(self):
        pass


class _StuckClock(ManualClock):
    def call_later(self, delay, fn):
        return _StuckHandle()


def test_failed_cancellation_is_surfaced():
    sched = _scheduler(_StuckClock(), [])
    sched.start()
    with pytest.raises(SchedulerCancellationError):
        sched.stop()


def test_alerts_follow_transcript_length(clock):
    transcript = TranscriptStore()
    sched = SuggestionScheduler(clock, lambda s: None, transcript=transcript, monologue_threshold=2)
    for idx in range(3):
        assert sched.alerts() == []
        transcript.append(Segment(id=str(idx), speaker="Rep", text="...", timestamp=float(idx)))
    assert [a.kind for a in sched.alerts()] == ["monologue"]


def test_gap_targeting_prefers_framework_questions(clock, framework):
    fired = []
    aggregator = ExtractionAggregator()
    sched = _scheduler(
        clock,
        fired,
        aggregator=aggregator,
        targeter=GapTargeter(framework),
        cycle=SuggestionCycle(["fallback"]),
    )
    sched.start()
    clock.advance(15.0)
    assert fired[-1].field == "champion"
    assert fired[-1].text == "Who internally is most excited about this project?"

    aggregator.record("champion", "COO", 0.9)
    clock.advance(90.0)
    assert fired[-1].field is None
    assert fired[-1].text == "fallback"


def test_invalid_configuration_rejected(clock):
    with pytest.raises(ValueError):
        _scheduler(clock, [], min_interval=90.0, max_interval=60.0)
    with pytest.raises(ValueError):
        _scheduler(clock, [], targeter=object())
