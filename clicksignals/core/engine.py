# ==============================================================================
# Telemetry Engine
# ==============================================================================
"""
The single engine object a host adapter instantiates.

Owns the session tracker, the activity monitor, the frustration detector
and the performance monitor, and exposes the host-facing entry points.
Every entry point runs under the scheduler's lock, so handlers and timer
callbacks never interleave.

Usage::

    dispatcher = SignalDispatcher(LoggingSink())
    dispatcher.start()
    engine = TelemetryEngine(dispatcher.submit, SystemScheduler(), environment)
    engine.record_page_view("/", "Home")
    engine.observe_page_load(NavigationTiming(response_start=120))
    engine.handle_interaction(InteractionEvent(kind="click", timestamp=..., x=10, y=20))
"""

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from clicksignals.base.scheduler import Scheduler
from clicksignals.base.session_store import SessionStore
from clicksignals.core.activity import ActivityMonitor
from clicksignals.core.frustration import FrustrationDetector
from clicksignals.core.models import (
    Capabilities,
    EntryType,
    HostEnvironment,
    InteractionEvent,
    InteractionKind,
    NavigationTiming,
)
from clicksignals.core.performance import PerformanceMonitor
from clicksignals.core.session import SessionTracker
from clicksignals.core.signals import FeatureUse, FeatureUseDetail
from clicksignals.utils.config import Settings

if TYPE_CHECKING:
    from clicksignals.base.sink import Beacon

logger = logging.getLogger(__name__)


class TelemetryEngine:
    """
    Behavioral telemetry and signal detection for one tab/process.

    Signals are handed to ``emit`` in the order their triggering events were
    processed; the engine never waits on delivery.
    """

    def __init__(
        self,
        emit: Callable[[object], Any],
        scheduler: Scheduler,
        environment: HostEnvironment | None = None,
        store: SessionStore | None = None,
        capabilities: Capabilities | None = None,
        beacon: "Beacon | None" = None,
        settings: Settings | None = None,
        flush: Callable[[], Any] | None = None,
    ):
        """
        Initialize the engine.

        Args:
            emit: Callable receiving each signal (typically SignalDispatcher.submit)
            scheduler: Clock and timer source
            environment: User agent, referrer and current URL
            store: Short-lived storage for the session id
            capabilities: Performance observer support of the host
            beacon: Unload-time transport, if the host has one
            settings: Application settings (defaults from environment)
            flush: Delivers signals still queued behind ``emit`` (typically
                SignalDispatcher.drain); called before the unload beacon so
                the beacon cannot overtake them
        """
        settings = settings or Settings()
        self._scheduler = scheduler
        self._beacon = beacon
        self._flush = flush
        self.environment = environment or HostEnvironment()

        self.session = SessionTracker(
            emit, scheduler, self.environment, store=store, settings=settings.session
        )
        self.activity = ActivityMonitor(self.session, emit, scheduler, settings=settings.session)
        self.frustration = FrustrationDetector(
            self.session, emit, scheduler, settings=settings.frustration
        )
        self.performance = PerformanceMonitor(
            self.session,
            emit,
            scheduler,
            capabilities=capabilities,
            settings=settings.performance,
        )
        self._emit = emit

    @property
    def session_id(self) -> str | None:
        return self.session.session_id

    # ------------------------------------------------------------------
    # Session and pages
    # ------------------------------------------------------------------

    def ensure_session(self, user_id: str | None = None) -> str:
        with self._scheduler.lock:
            return self.session.ensure_session(user_id)

    def record_page_view(
        self,
        page: str,
        title: str = "",
        user_id: str | None = None,
        url: str | None = None,
    ) -> None:
        """
        Record an in-page navigation.

        Args:
            page: Path of the page being entered
            title: Page title
            user_id: Explicit user id, if known
            url: New current URL (for UTM extraction), if it changed
        """
        with self._scheduler.lock:
            if url is not None:
                self.environment.url = url
            self.session.record_page_view(page, title, user_id)
            self.activity.reset_idle_timer()

    def observe_page_load(self, navigation: NavigationTiming | None = None) -> set[EntryType]:
        """
        Set up per-page-load detection.

        Reports a reload once and starts the performance monitor.

        Returns:
            Performance entry types subscribed for this page load
        """
        with self._scheduler.lock:
            self.frustration.reset_page_load()
            try:
                self.frustration.check_reload(navigation)
            except Exception:
                logger.debug("Reload detection failed", exc_info=True)
            return self.performance.observe(navigation)

    def handle_unload(self) -> None:
        """Close the open page and deliver its dwell time best-effort."""
        with self._scheduler.lock:
            if self._beacon is not None and self._flush is not None:
                try:
                    self._flush()
                except Exception:
                    logger.debug("Flush before unload failed", exc_info=True)
            self.session.handle_unload(self._beacon)
            self.activity.cancel()

    # ------------------------------------------------------------------
    # Interactions
    # ------------------------------------------------------------------

    def record_activity(self) -> bool:
        with self._scheduler.lock:
            return self.activity.record_activity()

    def record_click(
        self,
        timestamp: int,
        x: float | None = None,
        y: float | None = None,
        target_selector: str | None = None,
    ) -> list:
        with self._scheduler.lock:
            return self.frustration.record_click(timestamp, x, y, target_selector)

    def handle_interaction(self, event: InteractionEvent) -> None:
        """Dispatch a host interaction event to the activity and click detectors."""
        with self._scheduler.lock:
            self.activity.record_activity()
            if event.kind == InteractionKind.CLICK:
                self.frustration.record_click(
                    event.timestamp, event.x, event.y, event.target_selector
                )

    # ------------------------------------------------------------------
    # Performance and features
    # ------------------------------------------------------------------

    def on_performance_entries(self, entry_type: EntryType | str, entries: Iterable[Any]) -> None:
        with self._scheduler.lock:
            self.performance.on_entries(entry_type, entries)

    def track_feature_use(self, feature: str, details: dict[str, Any] | None = None) -> None:
        """Emit a feature adoption event."""
        with self._scheduler.lock:
            self._emit(
                FeatureUse(
                    session_id=self.session.session_id_for_event(),
                    page=self.session.page,
                    timestamp=self._scheduler.now_ms(),
                    detail=FeatureUseDetail(feature=feature, details=details or {}),
                )
            )
