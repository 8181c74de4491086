# eggtimer/core/__init__.py
"""
Core domain objects for eggtimer.

This module defines the process-agnostic data model:
- Clock: source of instants (real or scripted)
- Event: timestamped line of process output
- SegmentDefinition / RegexpDef: recognizers for segment start/finish lines
- Segment / SegmentTable: observed start and finish of tagged activities
- Segmenter: folds events into a SegmentTable

The core layer is independent from processes and threads.
"""

from .clock import Clock, RealClock, ScriptedClock
from .event import Event
from .segment import Segment, SegmentTable, segment_name
from .definition import SegmentDefinition, RegexpDef
from .segmenter import Segmenter, MatchPolicy
from .summary import DurationStats, summarize
from .exceptions import (
    CoreError,
    InvalidSegmentDefinition,
    InvalidSegment,
    SegmentNotFound,
    ClockExhausted,
    FeedClosed,
    ProcessError,
    ProcessStartError,
    StreamReadError,
)


__all__ = [
    # clocks
    "Clock",
    "RealClock",
    "ScriptedClock",

    # domain objects
    "Event",
    "Segment",
    "SegmentTable",
    "segment_name",

    # recognition
    "SegmentDefinition",
    "RegexpDef",
    "Segmenter",
    "MatchPolicy",

    # statistics
    "DurationStats",
    "summarize",

    # exceptions
    "CoreError",
    "InvalidSegmentDefinition",
    "InvalidSegment",
    "SegmentNotFound",
    "ClockExhausted",
    "FeedClosed",
    "ProcessError",
    "ProcessStartError",
    "StreamReadError",
]
