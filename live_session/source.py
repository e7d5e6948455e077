"""Segment source interface and a scripted mock feed."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

from live_session.clock import Clock, TimerHandle
from live_session.models import SegmentEvent

logger = logging.getLogger(__name__)


class Subscription(Protocol):  # Handle returned by a segment source
    def stop(self) -> None: ...


class SegmentSource(Protocol):  # Upstream ASR/NLP feed
    def subscribe(self, on_event: Callable[[SegmentEvent], None]) -> Subscription: ...


@dataclass(frozen=True)
class Utterance:
    speaker: str
    text: str
    tags: Tuple[str, ...] = field(default_factory=tuple)


DISCOVERY_CALL: Tuple[Utterance, ...] = (
    Utterance("Rep", "Thanks for joining today. How have things been going with your current setup?"),
    Utterance(
        "Client",
        "We're seeing about 15% growth quarter over quarter, but our systems are struggling to keep up.",
        ("metrics", "identify_pain"),
    ),
    Utterance("Rep", "That's impressive growth. What specific challenges are you facing?"),
    Utterance(
        "Client",
        "Our processing times have doubled and we're getting customer complaints. "
        "It's costing us roughly $75K per month.",
        ("identify_pain", "metrics", "economic_buyer"),
    ),
    Utterance("Rep", "Who else is impacted by these delays besides your customers?"),
    Utterance(
        "Client",
        "Our operations team is overwhelmed, and the COO has been asking about solutions weekly. "
        "The CEO wants this resolved by end of year.",
        ("decision_process", "champion"),
    ),
    Utterance("Rep", "What would success look like for you?"),
    Utterance(
        "Client",
        "We need to cut processing time by at least 50% and handle our projected growth "
        "without adding headcount.",
        ("decision_criteria", "metrics"),
    ),
    Utterance("Rep", "What's your budget range for solving this?"),
    Utterance(
        "Client",
        "We have $250K approved for this fiscal year. The CFO has final say, "
        "but I'll make the recommendation.",
        ("economic_buyer", "decision_process"),
    ),
)

SECONDS_PER_CHARACTER = 0.05


class _MockSubscription:
    def __init__(self, source: "MockSegmentSource", on_event: Callable[[SegmentEvent], None]) -> None:
        self._source = source
        self._on_event = on_event
        self._lock = Lock()
        self._handle: Optional[TimerHandle] = None
        self._generation = 0
        self._stopped = False
        self._index = 0
        self._timestamp = 0.0

    @property
    def emitted(self) -> int:
        return self._index

    def arm(self, delay: float) -> None:
        with self._lock:
            self._arm_locked(delay)

    def _arm_locked(self, delay: float) -> None:
        generation = self._generation
        self._handle = self._source.clock.call_later(delay, lambda: self._emit(generation))

    def stop(self) -> None:
        with self._lock:
            self._stopped = True
            self._generation += 1
            handle, self._handle = self._handle, None
        if handle is not None:
            handle.cancel()

    def _emit(self, generation: int) -> None:
        with self._lock:
            if self._stopped or generation != self._generation:
                return
            script = self._source.script
            utterance = script[self._index % len(script)]
            event = SegmentEvent(
                speaker=utterance.speaker,
                text=utterance.text,
                timestamp_seconds=round(self._timestamp, 3),
                tags=list(utterance.tags),
                confidences={tag: self._source.tag_confidence() for tag in utterance.tags},
                segment_id=f"seg-{self._index}",
            )
            self._timestamp += len(utterance.text) * SECONDS_PER_CHARACTER
            self._index += 1
            self._arm_locked(self._source.next_delay())
        # Delivered outside our lock; the consumer serializes on its own.
        self._on_event(event)


class MockSegmentSource:
    """Replays a scripted discovery call on a jittered cadence, cycling forever."""

    def __init__(
        self,
        clock: Clock,
        *,
        script: Sequence[Utterance] = DISCOVERY_CALL,
        first_delay: float = 2.0,
        min_gap: float = 4.0,
        max_gap: float = 7.0,
        rng: Optional[random.Random] = None,
    ) -> None:
        if not script:
            raise ValueError("MockSegmentSource needs a non-empty script")
        self.clock = clock
        self.script = tuple(script)
        self.first_delay = first_delay
        self.min_gap = min_gap
        self.max_gap = max_gap
        self._rng = rng or random.Random()
        self.subscriptions: List[_MockSubscription] = []

    def next_delay(self) -> float:
        return self._rng.uniform(self.min_gap, self.max_gap)

    def tag_confidence(self) -> float:
        return round(0.75 + self._rng.random() * 0.2, 3)

    def subscribe(self, on_event: Callable[[SegmentEvent], None]) -> _MockSubscription:
        subscription = _MockSubscription(self, on_event)
        self.subscriptions.append(subscription)
        subscription.arm(self.first_delay)
        logger.debug("mock segment source subscribed (first delay %.1fs)", self.first_delay)
        return subscription


__all__ = [
    "DISCOVERY_CALL",
    "MockSegmentSource",
    "SegmentSource",
    "Subscription",
    "Utterance",
]
