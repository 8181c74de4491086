# eggtimer/io/timing.py
from __future__ import annotations

import logging
import threading
from typing import Iterable

from eggtimer.core import Clock, MatchPolicy, SegmentDefinition, Segmenter, SegmentTable
from eggtimer.io.feed import EventFeed
from eggtimer.io.process import ProcessHandle
from eggtimer.io.runner import Runner

logger = logging.getLogger(__name__)


def time_process(
    process: ProcessHandle,
    definitions: Iterable[SegmentDefinition],
    *,
    clock: Clock | None = None,
    policy: MatchPolicy = MatchPolicy.APPLY_ALL,
    feed_size: int = 1,
    encoding: str = "utf-8",
) -> SegmentTable:
    """Run `process` and return the segments found in its output.

    The Runner works in a background thread while segments are collected
    in the calling thread. Whatever ends collection, the rest of the feed is
    drained and the runner joined before returning. A runner failure that
    never reached the feed is set as the table error.
    """
    runner = Runner(clock, encoding=encoding)
    segmenter = Segmenter(definitions, policy=policy)
    feed = EventFeed(maxsize=feed_size)

    crashes: list[BaseException] = []

    def _run() -> None:
        try:
            runner.run(process, feed)
        except BaseException as e:
            crashes.append(e)

    thread = threading.Thread(target=_run, name="eggtimer-runner", daemon=True)
    thread.start()
    try:
        table = segmenter.collect(feed)
    finally:
        dropped = feed.drain()
        if dropped:
            logger.debug("Dropped %d events after collection stopped", dropped)
        thread.join()

    if crashes and table.error is None:
        # the runner died before any reader could report it
        table = SegmentTable(segments=table.segments, error=crashes[0])

    logger.info("Found %d segments (%d complete)", len(table), len(table.complete()))
    return table
