"""Single-slot-per-field extraction table with pluggable merge policies."""
from __future__ import annotations

from numbers import Real
from threading import RLock
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Protocol

from config.registry import HIGHEST_CONFIDENCE, LAST_WRITE_WINS, bind_policy, get_policy
from live_session.errors import InvalidConfidenceError
from live_session.models import Extraction


class MergePolicy(Protocol):  # Decides whether new evidence replaces the slot
    name: str

    def accept(self, current: Optional[Extraction], incoming: Extraction) -> bool: ...


class LastWriteWins:
    """Newest evidence always replaces the slot, even at lower confidence."""

    name = LAST_WRITE_WINS

    def accept(self, current: Optional[Extraction], incoming: Extraction) -> bool:
        return True


class HighestConfidence:
    """Keep the stored extraction unless the incoming one is at least as confident."""

    name = HIGHEST_CONFIDENCE

    def accept(self, current: Optional[Extraction], incoming: Extraction) -> bool:
        if current is None:
            return True
        return incoming.confidence >= current.confidence


bind_policy(LAST_WRITE_WINS, LastWriteWins)
bind_policy(HIGHEST_CONFIDENCE, HighestConfidence)


def validate_confidence(field: str, confidence: object) -> float:
    """Return ``confidence`` as a float or raise :class:`InvalidConfidenceError`."""

    if isinstance(confidence, bool) or not isinstance(confidence, Real):
        raise InvalidConfidenceError(field, confidence)
    value = float(confidence)
    if not 0.0 <= value <= 1.0:  # also rejects NaN
        raise InvalidConfidenceError(field, confidence)
    return value


class ExtractionAggregator:
    """Holds at most one live :class:`Extraction` per field key."""

    def __init__(self, policy: Optional[MergePolicy] = None, lock: Optional[RLock] = None) -> None:
        self.policy: MergePolicy = policy or LastWriteWins()
        self._lock = lock or RLock()
        self._slots: Dict[str, Extraction] = {}

    @classmethod
    def with_policy(cls, name: str, lock: Optional[RLock] = None) -> "ExtractionAggregator":
        return cls(policy=get_policy(name), lock=lock)

    def record(
        self,
        field: str,
        value: str,
        confidence: float,
        source_segment_id: Optional[str] = None,
    ) -> bool:
        """Merge new evidence for ``field``; returns True when the slot was replaced."""

        checked = validate_confidence(field, confidence)
        incoming = Extraction(
            field=field,
            value=value,
            confidence=checked,
            source_segment_id=source_segment_id,
        )
        with self._lock:
            if not self.policy.accept(self._slots.get(field), incoming):
                return False
            self._slots[field] = incoming
            return True

    def get(self, field: str) -> Optional[Extraction]:
        """Return the current extraction for ``field`` or ``None`` when absent."""

        with self._lock:
            return self._slots.get(field)

    def snapshot(self) -> Mapping[str, Extraction]:
        """Immutable point-in-time copy of the field -> extraction table."""

        with self._lock:
            return MappingProxyType(dict(self._slots))

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)


__all__ = [
    "ExtractionAggregator",
    "HighestConfidence",
    "LastWriteWins",
    "MergePolicy",
    "validate_confidence",
]
