# eggtimer/core/exceptions.py
from __future__ import annotations


class CoreError(Exception):
    """Base error for all eggtimer exceptions."""


# ---- Validation / construction errors ----
class InvalidSegmentDefinition(CoreError, ValueError):
    """Raised when a SegmentDefinition is constructed with invalid inputs."""


class InvalidSegment(CoreError):
    """Raised when a Segment / SegmentTable is constructed with invalid inputs."""


# ---- Lookup errors (also behave like KeyError for dict-like APIs) ----
class SegmentNotFound(CoreError, KeyError):
    """Raised when a requested segment name is not present."""


# ---- Runtime errors ----
class ClockExhausted(CoreError, RuntimeError):
    """Raised when a scripted clock is asked for more instants than it holds."""


class FeedClosed(CoreError):
    """Raised when an event feed is used after it has been closed."""


class ProcessError(CoreError):
    """Base error for failures of the monitored process."""


class ProcessStartError(ProcessError):
    """Raised when output pipes cannot be acquired or the process cannot start."""


class StreamReadError(ProcessError):
    """Raised when reading one of the process output streams fails."""

    def __init__(self, message: str, *, stream: str | None = None) -> None:
        super().__init__(message)
        self.stream = stream
