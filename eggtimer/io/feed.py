# eggtimer/io/feed.py
from __future__ import annotations

import queue
import threading
from typing import Iterator

from eggtimer.core import Event, FeedClosed

_END = object()


class EventFeed:
    """Bounded channel carrying Events from a Runner to a consumer.

    ``send`` blocks while the feed holds ``maxsize`` undelivered events, so a
    consumer that stops reading throttles the producers instead of letting
    the backlog grow. The producer side calls ``close`` exactly once when it
    is done; iterating the feed then ends after the last event.

    Only one consumer may iterate a feed.
    """

    def __init__(self, maxsize: int = 1) -> None:
        if maxsize < 1:
            raise ValueError(f"EventFeed.maxsize must be >= 1, got {maxsize}")
        self._queue: queue.Queue[object] = queue.Queue(maxsize)
        self._lock = threading.Lock()
        self._closed = False
        self._exhausted = False

    @property
    def maxsize(self) -> int:
        return self._queue.maxsize

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, event: Event) -> None:
        if not isinstance(event, Event):
            raise TypeError(f"send() expects an Event, got {type(event).__name__}")
        with self._lock:
            if self._closed:
                raise FeedClosed("send() on a closed EventFeed")
        self._queue.put(event)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                raise FeedClosed("EventFeed already closed")
            self._closed = True
        self._queue.put(_END)

    def __iter__(self) -> Iterator[Event]:
        while not self._exhausted:
            item = self._queue.get()
            if item is _END:
                self._exhausted = True
                return
            yield item  # type: ignore[misc]

    def drain(self) -> int:
        """Discard events until the feed is closed; return how many were dropped."""
        return sum(1 for _ in self)
