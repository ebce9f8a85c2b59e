# ==============================================================================
# Activity Monitor - Throttled Activity and Idle Detection
# ==============================================================================
"""
Activity bookkeeping for the current session.

Every interaction-class event (click, scroll, key press, pointer move)
resets the idle timer. Independently, a "session still active"
SessionUpdate is emitted on the first interaction and then at most once per
throttle window, so continuous pointer movement cannot flood the sink.
Throttling affects signal emission only, never idle detection.
"""

import logging
from collections.abc import Callable

from clicksignals.base.scheduler import Scheduler, TimerHandle
from clicksignals.core.session import SessionTracker
from clicksignals.utils.config import SessionSettings

logger = logging.getLogger(__name__)


class ActivityMonitor:
    """Throttles activity signals and runs the idle timer."""

    def __init__(
        self,
        tracker: SessionTracker,
        emit: Callable[[object], None],
        scheduler: Scheduler,
        settings: SessionSettings | None = None,
    ):
        self._tracker = tracker
        self._emit = emit
        self._scheduler = scheduler
        self.settings = settings or tracker.settings

        self._last_emitted: int | None = None
        self._idle_timer: TimerHandle | None = None

        tracker.on_session_start(self.start)

    def start(self) -> None:
        """Arm the idle timer for a freshly started session."""
        self.reset_idle_timer()

    def record_activity(self) -> bool:
        """
        Record an interaction-class event.

        Does nothing until a session exists.

        Returns:
            True if a SessionUpdate was emitted
        """
        if self._tracker.session is None:
            return False

        now = self._scheduler.now_ms()
        self.reset_idle_timer()
        if self._tracker.touch(now):
            logger.debug("Session %s active again", self._tracker.session_id)

        throttle_ms = self.settings.activity_throttle_ms
        if self._last_emitted is not None and now - self._last_emitted < throttle_ms:
            return False

        update = self._tracker.activity_update(now)
        if update is None:
            return False
        self._last_emitted = now
        self._emit(update)
        return True

    def reset_idle_timer(self) -> None:
        """Cancel the pending idle timeout and start a new one."""
        if self._idle_timer is not None:
            self._idle_timer.cancel()
        handle: TimerHandle | None = None

        def _fire() -> None:
            self._on_idle(handle)

        with self._scheduler.lock:
            handle = self._scheduler.call_later(self.settings.idle_timeout_ms, _fire)
            self._idle_timer = handle

    def cancel(self) -> None:
        """Cancel the idle timer."""
        if self._idle_timer is not None:
            self._idle_timer.cancel()
            self._idle_timer = None

    def _on_idle(self, handle: TimerHandle | None) -> None:
        # Superseded by a later reset
        if handle is None or self._idle_timer is not handle:
            return
        self._idle_timer = None
        self._tracker.mark_idle()
