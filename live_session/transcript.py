"""Append-only transcript log for a single session."""
from __future__ import annotations

from threading import RLock
from typing import List, Optional, Tuple

from live_session.errors import OutOfOrderError
from live_session.models import Segment


class TranscriptStore:
    """Ordered, append-only log of segments.

    Storage order always equals arrival order. Timestamps may tie but never
    decrease; a regressing segment is rejected and the log is left as is.
    There is deliberately no removal or mutation API.
    """

    def __init__(self, lock: Optional[RLock] = None) -> None:
        self._lock = lock or RLock()
        self._segments: List[Segment] = []

    def append(self, segment: Segment) -> int:
        """Append ``segment`` and return the new length."""

        with self._lock:
            if self._segments and segment.timestamp < self._segments[-1].timestamp:
                raise OutOfOrderError(segment.timestamp, self._segments[-1].timestamp)
            self._segments.append(segment)
            return len(self._segments)

    def all(self) -> Tuple[Segment, ...]:
        """Point-in-time, read-only view of every segment in arrival order."""

        with self._lock:
            return tuple(self._segments)

    def last_timestamp(self) -> Optional[float]:
        with self._lock:
            return self._segments[-1].timestamp if self._segments else None

    @property
    def length(self) -> int:
        with self._lock:
            return len(self._segments)

    def __len__(self) -> int:
        return self.length


__all__ = ["TranscriptStore"]
