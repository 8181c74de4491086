# test/fakes.py
"""In-memory ProcessHandle doubles used by the runner tests."""
from __future__ import annotations

import errno
import io

from eggtimer.core import ProcessError


class FailingStream:
    """Binary stream yielding `lines` and then failing with EIO."""

    def __init__(self, lines: list[bytes]) -> None:
        self.lines = lines
        self.closed = False

    def __enter__(self) -> "FailingStream":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self.closed = True

    def __iter__(self):
        yield from self.lines
        raise OSError(errno.EIO, "Input/output error")


class FakeProcess:
    """ProcessHandle over in-memory streams.

    fail_on names the step ("stdout_pipe", "stderr_pipe", "start") that
    raises instead of succeeding.
    """

    def __init__(self, stdout=b"", stderr=b"", *, fail_on: str | None = None) -> None:
        self.stdout = stdout if not isinstance(stdout, bytes) else io.BytesIO(stdout)
        self.stderr = stderr if not isinstance(stderr, bytes) else io.BytesIO(stderr)
        self.fail_on = fail_on
        self.calls: list[str] = []

    def stdout_pipe(self):
        self.calls.append("stdout_pipe")
        if self.fail_on == "stdout_pipe":
            raise ProcessError("stdout unavailable")
        return self.stdout

    def stderr_pipe(self):
        self.calls.append("stderr_pipe")
        if self.fail_on == "stderr_pipe":
            raise OSError(errno.EMFILE, "Too many open files")
        return self.stderr

    def start(self) -> None:
        self.calls.append("start")
        if self.fail_on == "start":
            raise OSError(errno.ENOEXEC, "Exec format error")
