# eggtimer/core/event.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True, slots=True)
class Event:
    """
    A line seen on stdout or stderr of a monitored process.

    - when: time between the run start and the moment the line was read
    - what: the line text, without its trailing newline
    - error: set on the terminal event of a failed run; what is "" then
    - stream: "stdout" / "stderr" when known
    """
    when: timedelta
    what: str
    error: BaseException | None = None
    stream: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def failure(
        cls,
        error: BaseException,
        *,
        when: timedelta = timedelta(0),
        stream: str | None = None,
    ) -> "Event":
        return cls(when=when, what="", error=error, stream=stream)
