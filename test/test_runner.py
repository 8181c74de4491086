# test/test_runner.py
import shutil
import threading
from datetime import datetime, timedelta, timezone

import pytest

from eggtimer.core import (
    ClockExhausted,
    Event,
    ProcessStartError,
    RealClock,
    ScriptedClock,
    StreamReadError,
)
from eggtimer.io.feed import EventFeed
from eggtimer.io.process import Command
from eggtimer.io.runner import Runner

from fakes import FailingStream, FakeProcess


T0 = datetime(2018, 12, 1, 0, 0, 0, tzinfo=timezone.utc)

needs_posix_tools = pytest.mark.skipif(
    shutil.which("cat") is None or shutil.which("sh") is None,
    reason="requires cat and sh",
)


def _run(runner: Runner, process, maxsize: int = 1):
    """Run `process` in a thread, consuming the feed here. Returns (events, error)."""
    feed = EventFeed(maxsize=maxsize)
    result = {}

    def target():
        result["error"] = runner.run(process, feed)

    t = threading.Thread(target=target, daemon=True)
    t.start()
    events = list(feed)
    t.join(timeout=10)
    assert not t.is_alive()
    assert feed.closed
    return events, result["error"]


@needs_posix_tools
def test_run_timestamps_lines_with_scripted_clock(tmp_path):
    data = tmp_path / "data.txt"
    data.write_text("Line 1\nLine 2\nLine 3\n")
    clock = ScriptedClock([T0] + [T0 + timedelta(seconds=10 * i) for i in (1, 2, 3)])

    events, error = _run(Runner(clock), Command(["cat", str(data)]))

    assert error is None
    assert [(e.when, e.what) for e in events] == [
        (timedelta(seconds=10), "Line 1"),
        (timedelta(seconds=20), "Line 2"),
        (timedelta(seconds=30), "Line 3"),
    ]
    assert all(e.stream == "stdout" for e in events)
    assert clock.remaining == 0


@needs_posix_tools
def test_run_captures_both_streams_in_per_stream_order():
    script = (
        "for i in 1 2 3 4 5; do echo out$i; echo err$i >&2; done; printf tail"
    )
    events, error = _run(Runner(), Command(["sh", "-c", script]))

    assert error is None
    out = [e for e in events if e.stream == "stdout"]
    err = [e for e in events if e.stream == "stderr"]
    assert [e.what for e in out] == ["out1", "out2", "out3", "out4", "out5", "tail"]
    assert [e.what for e in err] == ["err1", "err2", "err3", "err4", "err5"]
    for stream in (out, err):
        assert all(b.when >= a.when for a, b in zip(stream, stream[1:]))
    assert all(e.when >= timedelta(0) for e in events)


def test_run_one_event_per_line_from_fake_streams():
    process = FakeProcess(stdout=b"o1\no2\no3\n", stderr=b"e1\ne2\n")
    events, error = _run(Runner(RealClock()), process, maxsize=2)

    assert error is None
    assert sorted(e.what for e in events) == ["e1", "e2", "o1", "o2", "o3"]
    assert process.calls == ["stdout_pipe", "stderr_pipe", "start"]
    assert process.stdout.closed and process.stderr.closed


def test_run_line_decoding():
    process = FakeProcess(stdout=b"one\r\ntwo\nbad \xff byte\nthree")
    events, _ = _run(Runner(), process)

    assert [e.what for e in events] == ["one", "two", "bad \ufffd byte", "three"]


def test_run_custom_encoding():
    process = FakeProcess(stdout="café\n".encode("latin-1"))
    events, _ = _run(Runner(encoding="latin-1"), process)
    assert [e.what for e in events] == ["café"]


def test_runner_rejects_unknown_encoding():
    with pytest.raises(ValueError):
        Runner(encoding="no-such-codec")
    with pytest.raises(ValueError):
        Runner(errors="no-such-handler")


def test_run_uses_real_clock_by_default():
    assert isinstance(Runner().clock, RealClock)


@pytest.mark.parametrize("fail_on", ["stdout_pipe", "stderr_pipe", "start"])
def test_run_setup_failure_sends_single_error_event(fail_on):
    process = FakeProcess(stdout=b"never\n", stderr=b"read\n", fail_on=fail_on)
    clock = ScriptedClock([T0])

    events, error = _run(Runner(clock), process)

    assert isinstance(error, ProcessStartError)
    assert len(events) == 1
    assert events[0].error is error
    assert events[0].what == ""
    assert events[0].when == timedelta(0)


def test_run_setup_failure_closes_acquired_pipes():
    process = FakeProcess(stdout=b"x\n", fail_on="stderr_pipe")
    _, error = _run(Runner(ScriptedClock([T0])), process)

    assert process.stdout.closed
    assert isinstance(error.__cause__, OSError)


def test_run_start_failure_wraps_os_error():
    process = FakeProcess(fail_on="start")
    _, error = _run(Runner(ScriptedClock([T0])), process)

    assert "Exec format error" in str(error)
    assert process.stdout.closed and process.stderr.closed


def test_run_read_failure_sends_error_after_delivered_lines():
    process = FakeProcess(stdout=FailingStream([b"a\n", b"b\n"]), stderr=b"")
    clock = ScriptedClock([T0, T0 + timedelta(seconds=1), T0 + timedelta(seconds=2)])

    events, error = _run(Runner(clock), process)

    assert isinstance(error, StreamReadError)
    assert error.stream == "stdout"
    assert isinstance(error.__cause__, OSError)
    assert [e.what for e in events[:2]] == ["a", "b"]
    last = events[-1]
    assert last.error is error
    assert last.stream == "stdout"
    assert last.when == timedelta(seconds=2)
    assert process.stdout.closed


def test_run_never_sends_after_close():
    process = FakeProcess(stdout=b"a\nb\n", stderr=b"c\n")
    feed = EventFeed(maxsize=10)
    Runner().run(process, feed)

    assert feed.closed
    events = list(feed)
    assert len(events) == 3
    assert all(isinstance(e, Event) for e in events)


def test_run_reader_crash_is_reported_on_feed_and_raised():
    process = FakeProcess(stdout=b"a\nb\n", stderr=b"")
    clock = ScriptedClock([T0, T0 + timedelta(seconds=1)])
    feed = EventFeed(maxsize=10)

    with pytest.raises(ClockExhausted):
        Runner(clock).run(process, feed)

    events = list(feed)
    assert [e.what for e in events[:1]] == ["a"]
    last = events[-1]
    assert isinstance(last.error, ClockExhausted)
    assert last.stream == "stdout"
    assert last.when == timedelta(seconds=1)
