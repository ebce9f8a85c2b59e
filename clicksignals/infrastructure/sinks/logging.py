# ==============================================================================
# Logging Sink
# ==============================================================================
"""
Sink that writes every signal to the log as a tracking API envelope.

Useful for local runs and replays where no transport is configured.
"""

import json
import logging
from typing import Any

from clicksignals.base.sink import Beacon, SignalSink
from clicksignals.core.envelope import (
    event_payload,
    page_view_payload,
    session_payload,
)
from clicksignals.core.models import UtmParams

logger = logging.getLogger(__name__)


class LoggingSink(SignalSink, Beacon):
    """Logs each emission at a fixed level."""

    def __init__(self, log: logging.Logger | None = None, level: int = logging.INFO):
        self._log = log or logger
        self._level = level

    def _write(self, kind: str, payload: dict[str, Any]) -> None:
        self._log.log(self._level, "%s %s", kind, json.dumps(payload, default=str))

    def emit_session_update(self, session_id: str, fields: dict[str, Any]) -> None:
        self._write("session", session_payload(session_id, fields))

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
        self._write(
            "pageview",
            page_view_payload(
                session_id, page, title, started_at, dwell_seconds, referrer, utm, user_id
            ),
        )

    def emit_event(
        self,
        session_id: str,
        event_type: str,
        event_data: dict[str, Any],
        timestamp: int,
        page: str,
    ) -> None:
        self._write("event", event_payload(session_id, event_type, event_data, timestamp, page))

    def send(self, kind: str, payload: dict[str, Any]) -> bool:
        self._write(kind, payload)
        return True
