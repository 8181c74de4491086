# eggtimer/core/segment.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import timedelta
from collections.abc import Iterator, Mapping

import numpy as np

from .exceptions import InvalidSegment, SegmentNotFound


def segment_name(type_name: str, tag: str) -> str:
    return f"{type_name}:{tag}"


@dataclass(frozen=True, slots=True)
class Segment:
    """
    Start and finish of one tagged activity, relative to the run start.

    A side that was never observed stays at timedelta(0); has_start and
    has_finish tell an unobserved side apart from one observed at 0s.
    Immutable: with_start / with_finish return new Segments.

    error is set on segments still missing a side when collection was
    aborted: their other side may have been lost with the rest of the run.
    """
    type_name: str
    tag: str
    start: timedelta = timedelta(0)
    finish: timedelta = timedelta(0)
    has_start: bool = False
    has_finish: bool = False
    error: BaseException | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.type_name, str) or not self.type_name:
            raise InvalidSegment("Segment.type_name must be a non-empty string.")
        if not isinstance(self.tag, str) or not self.tag:
            raise InvalidSegment("Segment.tag must be a non-empty string.")
        if not isinstance(self.start, timedelta) or not isinstance(self.finish, timedelta):
            raise InvalidSegment("Segment.start and Segment.finish must be timedelta values.")

    @property
    def name(self) -> str:
        return segment_name(self.type_name, self.tag)

    @property
    def is_complete(self) -> bool:
        return self.has_start and self.has_finish

    @property
    def duration(self) -> timedelta | None:
        """finish - start when both sides were observed, else None."""
        if not self.is_complete:
            return None
        return self.finish - self.start

    def with_start(self, when: timedelta) -> "Segment":
        return replace(self, start=when, has_start=True)

    def with_finish(self, when: timedelta) -> "Segment":
        return replace(self, finish=when, has_finish=True)

    def with_error(self, error: BaseException) -> "Segment":
        return replace(self, error=error)


@dataclass(frozen=True, slots=True)
class SegmentTable(Mapping):
    """
    Segments keyed by "<type>:<tag>", plus the error that ended collection.

    Design goals:
    - read-only Mapping: table["build:x"], len(), in, keys/items/values/get
    - key order carries no meaning; equality ignores it
    - error is None when the event feed closed normally
    """
    segments: Mapping[str, Segment] = field(default_factory=dict, repr=False)
    error: BaseException | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.segments, Mapping):
            raise InvalidSegment("SegmentTable.segments must be a mapping (e.g., dict).")

        normalized: dict[str, Segment] = {}
        for key, seg in self.segments.items():
            if not isinstance(seg, Segment):
                raise InvalidSegment("SegmentTable.segments values must be Segment instances.")
            if seg.name != key:
                raise InvalidSegment(
                    f"Segment name mismatch: key '{key}' but Segment.name is '{seg.name}'."
                )
            normalized[key] = seg

        object.__setattr__(self, "segments", normalized)

    # ---- Mapping API ----
    def __getitem__(self, name: str) -> Segment:
        try:
            return self.segments[name]
        except KeyError as e:
            raise SegmentNotFound(name) from e

    def __iter__(self) -> Iterator[str]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    # ---- error handling ----
    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error

    # ---- views ----
    def by_type(self, type_name: str) -> "SegmentTable":
        return SegmentTable(
            segments={k: s for k, s in self.segments.items() if s.type_name == type_name},
            error=self.error,
        )

    def complete(self) -> "SegmentTable":
        """Only the segments whose start and finish were both observed."""
        return SegmentTable(
            segments={k: s for k, s in self.segments.items() if s.is_complete},
            error=self.error,
        )

    def type_names(self) -> list[str]:
        return sorted({s.type_name for s in self.segments.values()})

    def durations(self) -> np.ndarray:
        """Durations in seconds of the complete segments, sorted by name."""
        names = sorted(k for k, s in self.segments.items() if s.is_complete)
        return np.array(
            [self.segments[n].duration.total_seconds() for n in names],
            dtype=float,
        )
