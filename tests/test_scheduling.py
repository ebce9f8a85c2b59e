# ==============================================================================
# Tests for Schedulers
# ==============================================================================
"""
Unit tests for VirtualScheduler and SystemScheduler.
"""

import threading
import time

from clicksignals.core import SessionStatus, TelemetryEngine
from clicksignals.infrastructure import SystemScheduler, VirtualScheduler
from clicksignals.utils.config import SessionSettings, Settings


class TestVirtualScheduler:
    """Tests for the manually advanced scheduler."""

    def test_timers_fire_in_due_order(self):
        scheduler = VirtualScheduler()
        fired = []
        scheduler.call_later(300, lambda: fired.append(("b", scheduler.now_ms())))
        scheduler.call_later(100, lambda: fired.append(("a", scheduler.now_ms())))

        assert scheduler.advance(1000) == 2
        assert fired == [("a", 100), ("b", 300)]
        assert scheduler.now_ms() == 1000

    def test_timer_not_due_does_not_fire(self):
        scheduler = VirtualScheduler(start_ms=50)
        fired = []
        scheduler.call_later(100, lambda: fired.append(1))
        scheduler.advance_to(149)
        assert fired == []
        scheduler.advance_to(150)
        assert fired == [1]

    def test_cancelled_timer(self):
        scheduler = VirtualScheduler()
        fired = []
        handle = scheduler.call_later(10, lambda: fired.append(1))
        assert scheduler.pending == 1
        handle.cancel()
        assert scheduler.pending == 0
        assert scheduler.advance(100) == 0
        assert fired == []

    def test_callback_can_schedule_more(self):
        scheduler = VirtualScheduler()
        fired = []

        def first():
            fired.append("first")
            scheduler.call_later(50, lambda: fired.append("second"))

        scheduler.call_later(10, first)
        scheduler.advance(100)
        assert fired == ["first", "second"]

    def test_time_never_moves_backwards(self):
        scheduler = VirtualScheduler(start_ms=500)
        scheduler.advance_to(100)
        assert scheduler.now_ms() == 500


class TestSystemScheduler:
    """Tests for the wall-clock scheduler."""

    def test_timer_fires(self):
        scheduler = SystemScheduler()
        done = threading.Event()
        scheduler.call_later(10, done.set)
        assert done.wait(2.0)

    def test_cancel(self):
        scheduler = SystemScheduler()
        done = threading.Event()
        scheduler.call_later(200, done.set).cancel()
        assert not done.wait(0.4)

    def test_now_ms_is_epoch_millis(self):
        assert SystemScheduler().now_ms() > 1_600_000_000_000

    def test_cancel_after_fire_while_lock_held(self):
        scheduler = SystemScheduler()
        fired = []
        with scheduler.lock:
            handle = scheduler.call_later(10, lambda: fired.append(1))
            # The timer thread fires and blocks on the lock
            time.sleep(0.1)
            handle.cancel()
        time.sleep(0.05)
        assert fired == []

    def test_activity_while_idle_timer_waits_on_lock(self):
        scheduler = SystemScheduler()
        settings = Settings(session=SessionSettings(idle_timeout_ms=50))
        signals = []
        engine = TelemetryEngine(signals.append, scheduler, settings=settings)
        engine.record_page_view("/")

        with scheduler.lock:
            time.sleep(0.15)
            engine.record_activity()
        time.sleep(0.02)

        assert engine.session.status == SessionStatus.ACTIVE
        assert all(getattr(s, "is_active", True) for s in signals)
