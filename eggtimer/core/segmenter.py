# eggtimer/core/segmenter.py
from __future__ import annotations

import enum
import logging
from typing import Iterable

from .definition import SegmentDefinition
from .event import Event
from .exceptions import InvalidSegmentDefinition
from .segment import Segment, SegmentTable, segment_name

logger = logging.getLogger(__name__)


class MatchPolicy(enum.Enum):
    """How a line matched by several definitions updates the table."""

    # every matching definition records its start/finish
    APPLY_ALL = "apply_all"
    # only the first matching definition, in registration order
    FIRST_MATCH = "first_match"


class Segmenter:
    """
    Folds a stream of Events into a SegmentTable.

    Each registered definition is asked, in registration order, whether an
    event's line starts or finishes a segment. A start wins over a finish of
    the same definition. Later observations overwrite earlier ones for the
    same "<type>:<tag>" key, whatever their timestamps.
    """

    def __init__(
        self,
        definitions: Iterable[SegmentDefinition] = (),
        *,
        policy: MatchPolicy = MatchPolicy.APPLY_ALL,
    ) -> None:
        if not isinstance(policy, MatchPolicy):
            raise ValueError(f"policy must be a MatchPolicy, got {policy!r}")
        self._definitions: list[SegmentDefinition] = []
        self._policy = policy
        for d in definitions:
            self.add_definition(d)

    @property
    def definitions(self) -> tuple[SegmentDefinition, ...]:
        return tuple(self._definitions)

    @property
    def policy(self) -> MatchPolicy:
        return self._policy

    def add_definition(self, definition: SegmentDefinition) -> None:
        if not isinstance(definition, SegmentDefinition):
            raise InvalidSegmentDefinition(
                f"add_definition() expects a SegmentDefinition, got {type(definition).__name__}."
            )
        self._definitions.append(definition)

    def collect(self, events: Iterable[Event]) -> SegmentTable:
        """
        Consume `events` and return the resulting table.

        Stops at the first event carrying an error; the returned table then
        holds the segments seen so far and `error` is set to that error, also
        on every segment still missing a side. No event after it is read.
        """
        segments: dict[str, Segment] = {}
        count = 0
        for event in events:
            if event.error is not None:
                logger.warning(
                    "Segment collection aborted after %d events: %s", count, event.error
                )
                for name, seg in list(segments.items()):
                    if not seg.is_complete:
                        segments[name] = seg.with_error(event.error)
                return SegmentTable(segments=segments, error=event.error)
            count += 1
            self._apply(segments, event)

        logger.debug("Collected %d segments from %d events", len(segments), count)
        return SegmentTable(segments=segments)

    def _apply(self, segments: dict[str, Segment], event: Event) -> None:
        for d in self._definitions:
            if tag := d.is_start(event.what):
                seg = _lookup(segments, d.type_name, tag)
                segments[seg.name] = seg.with_start(event.when)
            elif tag := d.is_finish(event.what):
                seg = _lookup(segments, d.type_name, tag)
                segments[seg.name] = seg.with_finish(event.when)
            else:
                continue
            if self._policy is MatchPolicy.FIRST_MATCH:
                return


def _lookup(segments: dict[str, Segment], type_name: str, tag: str) -> Segment:
    existing = segments.get(segment_name(type_name, tag))
    if existing is not None:
        return existing
    return Segment(type_name=type_name, tag=tag)
