# ==============================================================================
# Tracking API Envelope
# ==============================================================================
"""
Payload builders for the tracking API's wire format.

Every message is an envelope ``{"kind": ..., "payload": {...}}`` where kind
is "session", "pageview" or "event" and payload keys are camelCase.
"""

from typing import Any

from clicksignals.core.models import UtmParams


def envelope(kind: str, payload: dict[str, Any]) -> dict[str, Any]:
    return {"kind": kind, "payload": payload}


def session_payload(session_id: str, fields: dict[str, Any]) -> dict[str, Any]:
    return {"sessionId": session_id, **fields}


def page_view_payload(
    session_id: str,
    page: str,
    title: str,
    started_at: int,
    dwell_seconds: int | None,
    referrer: str,
    utm: UtmParams,
    user_id: str | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "sessionId": session_id,
        "page": page,
        "title": title,
        "timestamp": started_at,
        "referrer": referrer,
    }
    if user_id is not None:
        payload["userId"] = user_id
    if dwell_seconds is not None:
        payload["timeOnPage"] = dwell_seconds
    payload.update(utm.model_dump(by_alias=True, exclude_none=True))
    return payload


def event_payload(
    session_id: str,
    event_type: str,
    event_data: dict[str, Any],
    timestamp: int,
    page: str,
) -> dict[str, Any]:
    return {
        "sessionId": session_id,
        "eventType": event_type,
        "eventData": event_data,
        "timestamp": timestamp,
        "page": page,
    }
