# eggtimer/io/process.py
from __future__ import annotations

import logging
import os
import subprocess
from typing import BinaryIO, Mapping, Protocol, Sequence

from eggtimer.core import ProcessError, ProcessStartError

logger = logging.getLogger(__name__)


class ProcessHandle(Protocol):
    """An unstarted process whose output can be piped.

    The Runner only ever calls these three methods, in this order:
    stdout_pipe(), stderr_pipe(), start(). Each may fail.
    """

    def stdout_pipe(self) -> BinaryIO:
        ...

    def stderr_pipe(self) -> BinaryIO:
        ...

    def start(self) -> None:
        ...


class Command:
    """Concrete ProcessHandle built on subprocess.Popen.

    Each *_pipe() call creates an OS pipe: the read end is returned to the
    caller, the write end becomes the child's stdout/stderr at start(). A
    stream whose pipe was never requested is inherited from the parent.
    stdin is always the null device.
    """

    def __init__(
        self,
        args: Sequence[str],
        *,
        env: Mapping[str, str] | None = None,
        cwd: str | os.PathLike[str] | None = None,
    ) -> None:
        if isinstance(args, str) or not args:
            raise ValueError("Command.args must be a non-empty sequence of strings.")
        self.args = list(args)
        self.env = dict(env) if env is not None else None
        self.cwd = cwd
        self._popen: subprocess.Popen[bytes] | None = None
        self._readers: dict[str, BinaryIO] = {}
        self._writers: dict[str, int] = {}

    # ------------------------------------------------------------------
    # ProcessHandle protocol implementation
    # ------------------------------------------------------------------
    def stdout_pipe(self) -> BinaryIO:
        return self._pipe("stdout")

    def stderr_pipe(self) -> BinaryIO:
        return self._pipe("stderr")

    def start(self) -> None:
        if self._popen is not None:
            raise ProcessError("Command already started.")
        try:
            self._popen = subprocess.Popen(
                self.args,
                stdin=subprocess.DEVNULL,
                stdout=self._writers.get("stdout"),
                stderr=self._writers.get("stderr"),
                env=self.env,
                cwd=self.cwd,
                close_fds=True,
            )
        except (OSError, ValueError, subprocess.SubprocessError) as e:
            for reader in self._readers.values():
                reader.close()
            raise ProcessStartError(f"could not start {self.args[0]!r}: {e}") from e
        finally:
            # the child holds its own copies; EOF needs ours closed
            self.close()
        logger.debug("Started %r (pid %d)", self.args, self._popen.pid)

    # ------------------------------------------------------------------
    # Lifecycle helpers (not used by the Runner)
    # ------------------------------------------------------------------
    @property
    def started(self) -> bool:
        return self._popen is not None

    @property
    def pid(self) -> int | None:
        return None if self._popen is None else self._popen.pid

    @property
    def returncode(self) -> int | None:
        return None if self._popen is None else self._popen.returncode

    def close(self) -> None:
        """Close the write ends of pipes handed out but not yet given to a child.

        Readers already returned then see end-of-file. No-op after start().
        """
        while self._writers:
            _, fd = self._writers.popitem()
            os.close(fd)

    def wait(self, timeout: float | None = None) -> int:
        if self._popen is None:
            raise ProcessError("Command not started.")
        return self._popen.wait(timeout=timeout)

    def _pipe(self, stream: str) -> BinaryIO:
        if self._popen is not None:
            raise ProcessError(f"{stream}_pipe() after start().")
        if stream in self._readers:
            raise ProcessError(f"{stream} pipe already requested.")
        try:
            r, w = os.pipe()
        except OSError as e:
            self.close()
            raise ProcessError(f"could not create {stream} pipe: {e}") from e
        reader = os.fdopen(r, "rb")
        self._readers[stream] = reader
        self._writers[stream] = w
        return reader
