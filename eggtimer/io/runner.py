# eggtimer/io/runner.py
from __future__ import annotations

import codecs
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import BinaryIO

from eggtimer.core import (
    Clock,
    Event,
    ProcessError,
    ProcessStartError,
    RealClock,
    StreamReadError,
)
from eggtimer.io.feed import EventFeed
from eggtimer.io.process import ProcessHandle

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _ReaderOutcome:
    stream: str
    lines: int = 0
    error: StreamReadError | None = None
    crash: BaseException | None = None


def _strip_eol(raw: bytes) -> bytes:
    if raw.endswith(b"\n"):
        raw = raw[:-1]
    if raw.endswith(b"\r"):
        raw = raw[:-1]
    return raw


class Runner:
    """Runs a process and turns every line it prints into an Event.

    The run start instant is read from the clock before the process is
    touched; each Event carries the time elapsed since then, measured when
    its line was read. stdout and stderr are read by two threads feeding the
    same EventFeed, so lines of one stream keep their order but the two
    streams interleave as they are observed.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        *,
        encoding: str = "utf-8",
        errors: str = "replace",
    ) -> None:
        try:
            codecs.lookup(encoding)
            codecs.lookup_error(errors)
        except LookupError as e:
            raise ValueError(str(e)) from e
        self._clock: Clock = clock if clock is not None else RealClock()
        self._encoding = encoding
        self._errors = errors

    @property
    def clock(self) -> Clock:
        return self._clock

    def run(self, process: ProcessHandle, feed: EventFeed) -> BaseException | None:
        """
        Start `process` and relay its output to `feed` until both streams end.

        The feed is always closed when this returns. Failures are reported
        both as the return value and as an error Event on the feed:
        - pipes cannot be acquired / process cannot start: a single error
          Event, nothing else
        - a stream fails mid-read: its lines so far, then an error Event
        """
        try:
            start = self._clock.now()
            try:
                pipes = self._open(process)
            except ProcessStartError as e:
                logger.error("Run aborted: %s", e)
                feed.send(Event.failure(e))
                return e

            outcomes = [_ReaderOutcome(stream=name) for name, _ in pipes]
            threads = [
                threading.Thread(
                    target=self._relay,
                    args=(pipe, start, feed, outcome),
                    name=f"eggtimer-{outcome.stream}",
                    daemon=True,
                )
                for (_, pipe), outcome in zip(pipes, outcomes)
            ]
            for t in threads:
                t.start()
            for t in threads:
                t.join()
        finally:
            feed.close()

        for outcome in outcomes:
            if outcome.crash is not None:
                raise outcome.crash

        logger.info(
            "Run finished: %s",
            ", ".join(f"{o.stream}={o.lines} lines" for o in outcomes),
        )
        for outcome in outcomes:
            if outcome.error is not None:
                return outcome.error
        return None

    def _open(self, process: ProcessHandle) -> list[tuple[str, BinaryIO]]:
        acquired: list[tuple[str, BinaryIO]] = []
        try:
            acquired.append(("stdout", process.stdout_pipe()))
            acquired.append(("stderr", process.stderr_pipe()))
            process.start()
        except (ProcessError, OSError) as e:
            for _, pipe in acquired:
                pipe.close()
            if isinstance(e, ProcessStartError):
                raise
            raise ProcessStartError(f"could not set up process: {e}") from e
        logger.info("Run started")
        return acquired

    def _relay(
        self,
        pipe: BinaryIO,
        start: datetime,
        feed: EventFeed,
        outcome: _ReaderOutcome,
    ) -> None:
        last = timedelta(0)
        try:
            with pipe:
                for raw in pipe:
                    line = _strip_eol(raw).decode(self._encoding, self._errors)
                    last = self._clock.now() - start
                    feed.send(Event(when=last, what=line, stream=outcome.stream))
                    outcome.lines += 1
                    logger.debug("%s +%s %s", outcome.stream, last, line)
        except (OSError, ValueError) as e:
            err = StreamReadError(f"reading {outcome.stream} failed: {e}", stream=outcome.stream)
            err.__cause__ = e
            outcome.error = err
            logger.warning("%s reader stopped after %d lines: %s", outcome.stream, outcome.lines, e)
            feed.send(Event.failure(err, when=last, stream=outcome.stream))
        except BaseException as e:
            outcome.crash = e
            logger.error("%s reader crashed after %d lines: %r", outcome.stream, outcome.lines, e)
            feed.send(Event.failure(e, when=last, stream=outcome.stream))
