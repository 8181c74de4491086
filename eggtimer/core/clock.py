# eggtimer/core/clock.py
from __future__ import annotations

import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Iterable, Protocol, runtime_checkable

from .exceptions import ClockExhausted


@runtime_checkable
class Clock(Protocol):
    """Capability providing the current instant."""

    def now(self) -> datetime: ...


class RealClock:
    """
    Clock backed by the system clock.

    The wall-clock reading is taken once at construction; later readings
    advance it with time.monotonic(), so two calls never go backwards even
    if the system time is adjusted in between.
    """

    __slots__ = ("_base", "_origin")

    def __init__(self) -> None:
        self._base = datetime.now(timezone.utc)
        self._origin = time.monotonic()

    def now(self) -> datetime:
        return self._base + timedelta(seconds=time.monotonic() - self._origin)


class ScriptedClock:
    """
    Clock returning a predetermined sequence of instants.

    Asking for more instants than were scripted raises ClockExhausted, so a
    test that mis-predicts how often the clock is read fails immediately.
    """

    def __init__(self, instants: Iterable[datetime]) -> None:
        self._instants: list[datetime] = list(instants)
        self._index = 0
        self._lock = threading.Lock()

    @property
    def calls(self) -> int:
        return self._index

    @property
    def remaining(self) -> int:
        return len(self._instants) - self._index

    def now(self) -> datetime:
        with self._lock:
            if self._index >= len(self._instants):
                raise ClockExhausted(
                    f"ScriptedClock exhausted after {len(self._instants)} instants."
                )
            instant = self._instants[self._index]
            self._index += 1
            return instant
