# ==============================================================================
# Signal Dispatcher - Bounded Outbound Queue
# ==============================================================================
"""
Decouples detection from transport.

Detectors push signals with submit(), which never blocks: when the bounded
queue is full the newest signal is dropped and counted. A daemon thread
drains the queue in submission order and hands each signal to the sink.
Sink failures are logged and counted, never propagated, so telemetry can
fail open without affecting the host.

Usage (background thread):
    dispatcher = SignalDispatcher(sink)
    dispatcher.start()
    engine = TelemetryEngine(dispatcher.submit, scheduler, environment)
    ...
    dispatcher.stop()

Usage (synchronous, e.g. replay):
    dispatcher = SignalDispatcher(sink)
    engine = TelemetryEngine(dispatcher.submit, scheduler, environment)
    ...
    dispatcher.drain()
"""

import logging
import queue
import threading
from collections import Counter

from clicksignals.base.sink import SignalSink
from clicksignals.utils.config import DispatcherSettings

logger = logging.getLogger(__name__)


class SignalDispatcher:
    """Bounded signal queue drained to a sink."""

    def __init__(
        self,
        sink: SignalSink,
        settings: DispatcherSettings | None = None,
        log: logging.Logger | None = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            sink: Destination of every delivered signal
            settings: Queue size and thread timing (defaults from environment)
            log: Optional logger override. Defaults to this module's logger.
        """
        self._sink = sink
        self.settings = settings or DispatcherSettings()
        self._log = log or logger
        self._queue: queue.Queue = queue.Queue(maxsize=self.settings.max_queue_size)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._deliver_lock = threading.Lock()

        self.delivered = 0
        self.dropped = 0
        self.failed = 0
        self.delivered_by_type: Counter[str] = Counter()

    @property
    def sink(self) -> SignalSink:
        return self._sink

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def submit(self, signal) -> bool:
        """
        Enqueue a signal without blocking.

        Returns:
            False if the queue was full and the signal was dropped
        """
        try:
            self._queue.put_nowait(signal)
        except queue.Full:
            self.dropped += 1
            self._log.warning(
                "Signal queue full (%d), dropping %s",
                self.settings.max_queue_size,
                getattr(signal, "signal_type", type(signal).__name__),
            )
            return False
        return True

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the background delivery thread."""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="clicksignals-dispatcher", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Deliver what is already queued, then stop the background thread."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=self.settings.stop_timeout_seconds)
            if self._thread.is_alive():
                self._log.warning(
                    "Dispatcher did not stop within %.1fs (%d pending)",
                    self.settings.stop_timeout_seconds,
                    self.pending,
                )
            self._thread = None
        self.drain()
        self._flush_sink()

    def drain(self) -> int:
        """
        Deliver every queued signal on the calling thread.

        Returns:
            Number of signals taken off the queue
        """
        count = 0
        while True:
            try:
                signal = self._queue.get_nowait()
            except queue.Empty:
                return count
            self._deliver(signal)
            count += 1

    def _run(self) -> None:
        timeout = self.settings.poll_interval_seconds
        while not self._stop_event.is_set():
            try:
                signal = self._queue.get(timeout=timeout)
            except queue.Empty:
                continue
            self._deliver(signal)

    def _deliver(self, signal) -> None:
        with self._deliver_lock:
            try:
                self._sink.deliver(signal)
            except Exception as e:
                self.failed += 1
                self._log.warning(
                    "Sink delivery failed for %s: %s",
                    getattr(signal, "signal_type", type(signal).__name__),
                    e,
                )
                return
            self.delivered += 1
            self.delivered_by_type[getattr(signal, "signal_type", "unknown")] += 1

    def _flush_sink(self) -> None:
        try:
            self._sink.flush(self.settings.stop_timeout_seconds)
        except Exception as e:
            self._log.warning("Sink flush failed: %s", e)

    def summary(self) -> dict:
        """Delivery counters."""
        return {
            "delivered": self.delivered,
            "dropped": self.dropped,
            "failed": self.failed,
            "pending": self.pending,
            "by_type": dict(self.delivered_by_type),
        }
