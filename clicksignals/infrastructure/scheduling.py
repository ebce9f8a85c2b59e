# ==============================================================================
# Scheduler Implementations
# ==============================================================================
"""
Clock and timer implementations of the Scheduler interface.

- SystemScheduler: wall-clock time and threading.Timer callbacks, each run
  under the scheduler lock so it cannot interleave with engine handlers.
- VirtualScheduler: manually advanced time. Timers fire only from
  advance()/advance_to(), in due order, on the caller's thread. Used by the
  replay command and by tests.
"""

import heapq
import itertools
import logging
import threading
import time
from collections.abc import Callable

from clicksignals.base.scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


# ==============================================================================
# System Scheduler
# ==============================================================================


class _ThreadingTimerHandle(TimerHandle):
    def __init__(self):
        self.timer: threading.Timer | None = None
        self.cancelled = False

    def cancel(self) -> None:
        # A timer that already fired may be blocked on the lock; the flag
        # stops its callback once it gets in.
        self.cancelled = True
        if self.timer is not None:
            self.timer.cancel()


class SystemScheduler(Scheduler):
    """Wall-clock scheduler backed by daemon threading timers."""

    def now_ms(self) -> int:
        return int(time.time() * 1000)

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        handle = _ThreadingTimerHandle()

        def _run() -> None:
            with self.lock:
                if handle.cancelled:
                    return
                handle.cancelled = True
                try:
                    callback()
                except Exception:
                    logger.exception("Timer callback failed")

        handle.timer = threading.Timer(max(delay_ms, 0) / 1000.0, _run)
        handle.timer.daemon = True
        handle.timer.start()
        return handle


# ==============================================================================
# Virtual Scheduler
# ==============================================================================


class _VirtualTimer(TimerHandle):
    def __init__(self, due_ms: int, callback: Callable[[], None]):
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualScheduler(Scheduler):
    """
    Deterministic scheduler with manually advanced time.

    Args:
        start_ms: Initial clock value in milliseconds
    """

    def __init__(self, start_ms: int = 0):
        super().__init__()
        self._now = start_ms
        self._timers: list[tuple[int, int, _VirtualTimer]] = []
        self._sequence = itertools.count()

    def now_ms(self) -> int:
        return self._now

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        timer = _VirtualTimer(self._now + max(delay_ms, 0), callback)
        heapq.heappush(self._timers, (timer.due_ms, next(self._sequence), timer))
        return timer

    @property
    def pending(self) -> int:
        """Number of timers that are neither fired nor cancelled."""
        return sum(1 for _, _, timer in self._timers if not timer.cancelled)

    def advance(self, delta_ms: int) -> int:
        """Move time forward by delta_ms, firing due timers. Returns timers fired."""
        return self.advance_to(self._now + delta_ms)

    def advance_to(self, target_ms: int) -> int:
        """
        Move time forward to target_ms, firing due timers in order.

        The clock is set to each timer's due time before its callback runs.
        Moving backwards is ignored.

        Returns:
            Number of callbacks fired
        """
        fired = 0
        with self.lock:
            while self._timers and self._timers[0][0] <= target_ms:
                due_ms, _, timer = heapq.heappop(self._timers)
                if timer.cancelled:
                    continue
                self._now = max(self._now, due_ms)
                timer.cancelled = True
                timer.callback()
                fired += 1
            self._now = max(self._now, target_ms)
        return fired
