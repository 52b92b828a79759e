#!/usr/bin/env python3
"""ABOUTME: Tick source tests - manual and threaded deferred callbacks.
ABOUTME: Checks ordering, cancellation and that failing callbacks are contained."""

import sys
import threading
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from music.tick_source import ManualTickSource, ThreadTickSource


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_manual_runs_due_callbacks_in_order():
    clock = FakeClock()
    ticks = ManualTickSource(clock)
    fired = []
    ticks.call_later(0.2, lambda: fired.append("late"))
    ticks.call_later(0.1, lambda: fired.append("early"))
    ticks.call_later(5.0, lambda: fired.append("never"))

    assert ticks.run_due() == 0
    clock.now = 0.3
    assert ticks.run_due() == 2
    assert fired == ["early", "late"]
    assert ticks.pending == 1


def test_manual_cancel():
    clock = FakeClock()
    ticks = ManualTickSource(clock)
    fired = []
    handle = ticks.call_later(0.1, lambda: fired.append(1))
    ticks.cancel(handle)
    ticks.cancel(handle)
    clock.now = 1.0
    ticks.run_due()
    assert fired == []


def test_manual_rearmed_callback_waits_for_next_run():
    clock = FakeClock()
    ticks = ManualTickSource(clock)
    fired = []

    def tick():
        fired.append(clock.now)
        ticks.call_later(0.0, tick)

    ticks.call_later(0.0, tick)
    assert ticks.run_due() == 1
    assert ticks.pending == 1


def test_manual_failing_callback_is_contained():
    clock = FakeClock()
    ticks = ManualTickSource(clock)
    fired = []

    def explode():
        raise RuntimeError("bad tick")

    ticks.call_later(0.0, explode)
    ticks.call_later(0.0, lambda: fired.append(1))
    assert ticks.run_due() == 2
    assert fired == [1]


def test_thread_source_fires_and_cancels():
    ticks = ThreadTickSource()
    try:
        done = threading.Event()
        cancelled = threading.Event()
        handle = ticks.call_later(0.05, cancelled.set)
        ticks.cancel(handle)
        ticks.call_later(0.1, done.set)
        assert done.wait(timeout=2.0)
        assert not cancelled.is_set()
    finally:
        ticks.shutdown()


def test_thread_source_survives_failing_callback():
    ticks = ThreadTickSource()
    try:
        done = threading.Event()

        def explode():
            raise RuntimeError("bad tick")

        ticks.call_later(0.0, explode)
        ticks.call_later(0.02, done.set)
        assert done.wait(timeout=2.0)
    finally:
        ticks.shutdown()


def test_thread_source_runs_callbacks_on_one_thread():
    ticks = ThreadTickSource()
    try:
        threads = set()
        done = threading.Event()
        for i in range(5):
            ticks.call_later(0.01 * i, lambda: threads.add(threading.get_ident()))
        ticks.call_later(0.1, done.set)
        assert done.wait(timeout=2.0)
        assert len(threads) == 1
        assert threading.get_ident() not in threads
    finally:
        ticks.shutdown()


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
