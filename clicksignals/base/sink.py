# ==============================================================================
# Signal Sink Abstract Classes
# ==============================================================================
"""
Base classes for the engine's outbound transport.

The sink is the external collaborator that persists or forwards signals.
The engine only calls the three emit methods and never waits on them for
control flow; delivery success is the sink's concern.

A Beacon is the fire-and-forget transport used at unload time. It must
never block, and reports with its return value whether the payload was
queued.
"""

from abc import ABC, abstractmethod
from typing import Any

from clicksignals.core.models import UtmParams
from clicksignals.core.signals import EventSignal, PageView, SessionUpdate


class SignalSink(ABC):
    """Base class for signal sinks."""

    @abstractmethod
    def emit_session_update(self, session_id: str, fields: dict[str, Any]) -> None:
        """
        Create or update a session.

        Args:
            session_id: Session identifier
            fields: camelCase session fields (lastActivity, isActive, ...)
        """
        ...

    @abstractmethod
    def emit_page_view(
        self,
        session_id: str,
        page: str,
        title: str,
        started_at: int,
        dwell_seconds: int | None,
        referrer: str,
        utm: UtmParams,
        user_id: str | None = None,
    ) -> None:
        """
        Record a page view.

        Args:
            session_id: Session identifier
            page: Page path
            title: Page title
            started_at: Time the page was opened (ms)
            dwell_seconds: Seconds spent on the page, None while still open
            referrer: Referrer URL
            utm: UTM parameters captured at visit start
            user_id: Explicit user id, if known
        """
        ...

    @abstractmethod
    def emit_event(
        self,
        session_id: str,
        event_type: str,
        event_data: dict[str, Any],
        timestamp: int,
        page: str,
    ) -> None:
        """
        Record a user event.

        Args:
            session_id: Session identifier
            event_type: frustration_signal, perf_issue or feature_use
            event_data: Event payload including its subtype/type field
            timestamp: Event time (ms)
            page: Page path
        """
        ...

    def deliver(self, signal) -> None:
        """Route a signal to the matching emit method."""
        if isinstance(signal, SessionUpdate):
            self.emit_session_update(signal.session_id, signal.fields())
        elif isinstance(signal, PageView):
            self.emit_page_view(
                signal.session_id,
                signal.page,
                signal.title,
                signal.started_at,
                signal.dwell_seconds,
                signal.referrer,
                signal.utm,
                user_id=signal.user_id,
            )
        elif isinstance(signal, EventSignal):
            self.emit_event(
                signal.session_id,
                signal.event_type.value,
                signal.event_data(),
                signal.timestamp,
                signal.page,
            )
        else:
            raise TypeError(f"Unsupported signal type: {type(signal).__name__}")

    def flush(self, timeout: float = 5.0) -> None:
        """Wait for buffered deliveries. No-op for unbuffered sinks."""

    def close(self) -> None:
        """Release sink resources."""


class Beacon(ABC):
    """Non-blocking fire-and-forget transport for unload-time delivery."""

    @abstractmethod
    def send(self, kind: str, payload: dict[str, Any]) -> bool:
        """
        Queue a payload for delivery without waiting.

        Args:
            kind: Tracking API kind (session, pageview, event)
            payload: camelCase payload

        Returns:
            True if the payload was accepted for delivery
        """
        ...
