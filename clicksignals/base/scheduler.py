# ==============================================================================
# Scheduler Abstract Base Class
# ==============================================================================
"""
Abstract clock and timer interface.

The engine never reads wall-clock time or starts timers directly. Every
time read and every deferred callback (idle timeout) goes through a
Scheduler, so detection logic runs the same way against real timers and
against a manually advanced virtual clock.

Implementations: SystemScheduler (threading timers), VirtualScheduler.
"""

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable


class TimerHandle(ABC):
    """A pending deferred callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Cancel the callback. Cancelling a fired or cancelled timer is a no-op."""
        ...


class Scheduler(ABC):
    """
    Clock and timer source for one engine instance.

    ``lock`` serializes engine handlers and timer callbacks: the engine holds
    it for the duration of every entry point, and implementations that fire
    timers on another thread hold it while running the callback.
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()

    @abstractmethod
    def now_ms(self) -> int:
        """Current time in milliseconds."""
        ...

    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """
        Run a callback once after a delay.

        Args:
            delay_ms: Delay in milliseconds
            callback: Zero-argument callable

        Returns:
            Handle that cancels the callback
        """
        ...
