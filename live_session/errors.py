"""Error taxonomy for the live coverage engine."""
from __future__ import annotations


class LiveSessionError(RuntimeError):  # Base class for engine errors
    pass


class OutOfOrderError(LiveSessionError):  # Segment timestamp went backwards
    def __init__(self, timestamp: float, last_timestamp: float) -> None:
        super().__init__(
            f"segment timestamp {timestamp} precedes last appended timestamp {last_timestamp}"
        )
        self.timestamp = timestamp
        self.last_timestamp = last_timestamp


class InvalidConfidenceError(LiveSessionError, ValueError):  # Confidence outside [0, 1]
    def __init__(self, field: str, confidence: object) -> None:
        super().__init__(f"confidence for '{field}' must be within [0, 1], got {confidence!r}")
        self.field = field
        self.confidence = confidence


class InvalidTransitionError(LiveSessionError):  # Lifecycle misuse
    def __init__(self, operation: str, state: str) -> None:
        super().__init__(f"cannot {operation} while session is {state}")
        self.operation = operation
        self.state = state


class AlreadyStartedError(InvalidTransitionError):  # start() outside idle
    def __init__(self, state: str) -> None:
        super().__init__("start", state)


class SessionNotLiveError(InvalidTransitionError):  # Mutation outside live
    pass


class SchedulerCancellationError(LiveSessionError):  # Timer could not be cancelled
    pass


__all__ = [
    "AlreadyStartedError",
    "InvalidConfidenceError",
    "InvalidTransitionError",
    "LiveSessionError",
    "OutOfOrderError",
    "SchedulerCancellationError",
    "SessionNotLiveError",
]
