"""Deferred-callback facilities used to drive scheduler ticks and effect staggers."""
import heapq
import itertools
import threading
import time
from typing import Callable, Dict, List, Optional


class TickSource:
    """Interface: run a callback once after a delay."""

    def call_later(self, delay: float, callback: Callable[[], None]):  # pragma: no cover - interface
        raise NotImplementedError

    def cancel(self, handle) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def shutdown(self) -> None:
        pass


def _run_callback(callback: Callable[[], None]):
    try:
        callback()
    except Exception as e:
        print(f"[TickSource] callback {getattr(callback, '__name__', callback)!r} failed: {e}")


class ThreadTickSource(TickSource):
    """Single daemon thread sleeping until the next deadline.

    All callbacks run on the same worker thread, one at a time.
    """

    def __init__(self):
        self._cond = threading.Condition()
        self._heap: List[tuple] = []  # (due, seq, callback)
        self._cancelled: set = set()
        self._seq = itertools.count()
        self._thread: Optional[threading.Thread] = None
        self._running = False

    def call_later(self, delay: float, callback: Callable[[], None]) -> int:
        with self._cond:
            seq = next(self._seq)
            heapq.heappush(self._heap, (time.monotonic() + max(0.0, delay), seq, callback))
            if not self._running:
                self._running = True
                self._thread = threading.Thread(target=self._run, daemon=True)
                self._thread.start()
            self._cond.notify()
            return seq

    def cancel(self, handle) -> None:
        with self._cond:
            if any(entry[1] == handle for entry in self._heap):
                self._cancelled.add(handle)

    def _run(self):
        while True:
            with self._cond:
                if not self._running:
                    return
                if not self._heap:
                    self._cond.wait()
                    continue
                due, seq, callback = self._heap[0]
                now = time.monotonic()
                if due > now:
                    self._cond.wait(due - now)
                    continue
                heapq.heappop(self._heap)
                if seq in self._cancelled:
                    self._cancelled.discard(seq)
                    continue
            _run_callback(callback)

    def shutdown(self) -> None:
        with self._cond:
            self._running = False
            self._heap.clear()
            self._cancelled.clear()
            self._cond.notify_all()
        thread = self._thread
        if thread and thread is not threading.current_thread():
            thread.join(timeout=1.0)
        self._thread = None


class TextualTickSource(TickSource):
    """Runs callbacks on a Textual app's event loop via ``set_timer``."""

    def __init__(self, app):
        self.app = app

    def call_later(self, delay: float, callback: Callable[[], None]):
        return self.app.set_timer(max(0.0, delay), lambda: _run_callback(callback))

    def cancel(self, handle) -> None:
        # set_timer() returns a Timer object, so we call .stop() on it
        if handle is not None:
            handle.stop()


class ManualTickSource(TickSource):
    """Deterministic tick source driven by an external clock.

    Args:
        clock: Callable returning the current time in seconds
    """

    def __init__(self, clock: Callable[[], float]):
        self.clock = clock
        self._seq = itertools.count()
        self._callbacks: Dict[int, tuple] = {}  # seq -> (due, callback)

    @property
    def pending(self) -> int:
        return len(self._callbacks)

    def call_later(self, delay: float, callback: Callable[[], None]) -> int:
        seq = next(self._seq)
        self._callbacks[seq] = (self.clock() + max(0.0, delay), callback)
        return seq

    def cancel(self, handle) -> None:
        self._callbacks.pop(handle, None)

    def run_due(self) -> int:
        """Fire every callback due now. Callbacks armed while firing wait for the next call."""
        now = self.clock()
        due = sorted((entry[0], seq) for seq, entry in self._callbacks.items() if entry[0] <= now)
        fired = 0
        for _, seq in due:
            entry = self._callbacks.pop(seq, None)
            if entry is None:
                continue
            _run_callback(entry[1])
            fired += 1
        return fired

    def shutdown(self) -> None:
        self._callbacks.clear()
