# ==============================================================================
# Recording Sink
# ==============================================================================
"""
In-memory sink that keeps every emission, in order.

Used by tests and by the replay command's ``--sink memory`` mode, which
prints what was recorded instead of forwarding it anywhere.
"""

import threading
from typing import Any

from clicksignals.base.sink import Beacon, SignalSink
from clicksignals.core.envelope import (
    envelope,
    event_payload,
    page_view_payload,
    session_payload,
)
from clicksignals.core.models import UtmParams


class RecordingSink(SignalSink, Beacon):
    """Sink and beacon that record envelopes in memory."""

    def __init__(self, beacon_accepts: bool = True):
        """
        Args:
            beacon_accepts: Return value of send(); False simulates a host
                whose beacon refuses the payload
        """
        self._lock = threading.Lock()
        self.beacon_accepts = beacon_accepts
        self.session_updates: list[dict[str, Any]] = []
        self.page_views: list[dict[str, Any]] = []
        self.events: list[dict[str, Any]] = []
        self.beacons: list[dict[str, Any]] = []
        self.envelopes: list[dict[str, Any]] = []

    def _record(self, target: list, kind: str, payload: dict[str, Any]) -> None:
        with self._lock:
            target.append(payload)
            self.envelopes.append(envelope(kind, payload))

    def emit_session_update(self, session_id: str, fields: dict[str, Any]) -> None:
        self._record(self.session_updates, "session", session_payload(session_id, fields))

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
        payload = page_view_payload(
            session_id, page, title, started_at, dwell_seconds, referrer, utm, user_id
        )
        self._record(self.page_views, "pageview", payload)

    def emit_event(
        self,
        session_id: str,
        event_type: str,
        event_data: dict[str, Any],
        timestamp: int,
        page: str,
    ) -> None:
        payload = event_payload(session_id, event_type, event_data, timestamp, page)
        self._record(self.events, "event", payload)

    def send(self, kind: str, payload: dict[str, Any]) -> bool:
        if not self.beacon_accepts:
            return False
        with self._lock:
            self.beacons.append(envelope(kind, payload))
        return True

    def events_of_type(self, event_type: str) -> list[dict[str, Any]]:
        return [event for event in self.events if event["eventType"] == event_type]

    def clear(self) -> None:
        with self._lock:
            for recorded in (
                self.session_updates,
                self.page_views,
                self.events,
                self.beacons,
                self.envelopes,
            ):
                recorded.clear()
