"""Jittered coaching-suggestion timer owned by one live session."""
from __future__ import annotations

import logging
import random
from threading import RLock
from typing import Callable, List, Optional

from live_session.clock import Clock, TimerHandle
from live_session.errors import SchedulerCancellationError
from live_session.extractions import ExtractionAggregator
from live_session.models import Alert, Suggestion
from live_session.suggestions import GapTargeter, SuggestionCycle, monologue_alerts
from live_session.transcript import TranscriptStore

logger = logging.getLogger(__name__)


class SuggestionScheduler:
    """Emit one suggestion per jittered interval until stopped.

    Each fire re-arms a single timer through the injected :class:`Clock`.
    ``stop`` cancels the pending timer handle and bumps a generation counter
    under the shared lock, so a timer thread that already woke up but has
    not yet taken the lock finds itself stale and returns without calling
    ``on_suggestion``. Once ``stop`` returns no further callback runs.
    """

    def __init__(
        self,
        clock: Clock,
        on_suggestion: Callable[[Suggestion], None],
        *,
        transcript: TranscriptStore,
        aggregator: Optional[ExtractionAggregator] = None,
        targeter: Optional[GapTargeter] = None,
        cycle: Optional[SuggestionCycle] = None,
        first_delay: float = 15.0,
        min_interval: float = 60.0,
        max_interval: float = 90.0,
        monologue_threshold: int = 10,
        rng: Optional[random.Random] = None,
        lock: Optional[RLock] = None,
    ) -> None:
        if min_interval > max_interval:
            raise ValueError("min_interval must not exceed max_interval")
        if targeter is not None and aggregator is None:
            raise ValueError("gap targeting needs an extraction aggregator")
        self._clock = clock
        self._on_suggestion = on_suggestion
        self._transcript = transcript
        self._aggregator = aggregator
        self._targeter = targeter
        self._cycle = cycle or SuggestionCycle()
        self.first_delay = first_delay
        self.min_interval = min_interval
        self.max_interval = max_interval
        self.monologue_threshold = monologue_threshold
        self._rng = rng or random.Random()
        self._lock = lock or RLock()
        self._handle: Optional[TimerHandle] = None
        self._generation = 0
        self._running = False
        self.fired = 0

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    def next_interval(self) -> float:
        return self._rng.uniform(self.min_interval, self.max_interval)

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._running = True
            self._arm(self.first_delay)

    def stop(self) -> None:
        """Cancel the pending timer; safe to call repeatedly."""

        with self._lock:
            self._running = False
            self._generation += 1
            handle, self._handle = self._handle, None
            if handle is None:
                return
            handle.cancel()
            if handle.active:
                raise SchedulerCancellationError("suggestion timer is still armed after cancel()")

    def alerts(self) -> List[Alert]:
        """Alerts derived from the current transcript length."""

        return monologue_alerts(len(self._transcript), self.monologue_threshold)

    def _arm(self, delay: float) -> None:
        generation = self._generation
        self._handle = self._clock.call_later(delay, lambda: self._fire(generation))

    def _next_suggestion(self) -> Suggestion:
        now = self._clock.now()
        if self._targeter is not None and self._aggregator is not None:
            targeted = self._targeter.next_question(self._aggregator.snapshot())
            if targeted is not None:
                key, question = targeted
                return Suggestion(text=question, index=self.fired, emitted_at=now, field=key)
        _, text = next(self._cycle)
        return Suggestion(text=text, index=self.fired, emitted_at=now)

    def _fire(self, generation: int) -> None:
        with self._lock:
            if not self._running or generation != self._generation:
                logger.debug("dropping stale suggestion timer (generation %s)", generation)
                return
            suggestion = self._next_suggestion()
            self.fired += 1
            self._arm(self.next_interval())
            self._on_suggestion(suggestion)


__all__ = ["SuggestionScheduler"]
