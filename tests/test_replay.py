# ==============================================================================
# Tests for the Replay Host Adapter
# ==============================================================================
"""
Tests that a JSON-lines recording drives the full engine end to end.

Tests cover:
- Record parsing, comments and blank lines, error line numbers
- Session attribution from the load record
- Frustration, performance and feature events in emission order
- Idle timeouts firing between records
- Unload delivered through the sink's beacon
"""

import json

import pytest

from clicksignals.infrastructure import RecordingSink
from clicksignals.replay import (
    InteractionRecord,
    LoadRecord,
    Replayer,
    ReplayError,
    load_records,
    parse_records,
)

RECORDING = [
    {
        "kind": "load",
        "timestamp": 0,
        "url": "https://shop.example/?utm_source=newsletter",
        "referrer": "https://www.bing.com/search?q=rain+jacket",
        "userAgent": (
            "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
            "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
        ),
        "title": "Home",
        "navigation": {"responseStart": 900, "type": "navigate"},
        "supportedEntryTypes": ["longtask", "layout-shift"],
    },
    {"kind": "click", "timestamp": 1000, "x": 40, "y": 60, "tag": "button", "elementId": "add"},
    {"kind": "click", "timestamp": 1200, "x": 42, "y": 61, "tag": "button", "elementId": "add"},
    {"kind": "click", "timestamp": 1400, "x": 41, "y": 59, "tag": "button", "elementId": "add"},
    {"kind": "navigate", "timestamp": 5000, "page": "/cart", "title": "Cart"},
    {"kind": "performance", "timestamp": 5500, "entryType": "longtask", "entries": [{"duration": 1800}]},
    {"kind": "performance", "timestamp": 5600, "entryType": "largest-contentful-paint", "entries": [{"startTime": 9000}]},
    {"kind": "feature", "timestamp": 6000, "feature": "coupon", "details": {"code": "SPRING"}},
    {"kind": "unload", "timestamp": 8000},
]


@pytest.fixture()
def recording_lines():
    return [json.dumps(record) for record in RECORDING]


@pytest.fixture()
def replayed(recording_lines, settings):
    sink = RecordingSink()
    replayer = Replayer(sink, settings=settings)
    replayer.run(parse_records(recording_lines))
    return replayer, sink


class TestParsing:
    """Tests for recording parsing."""

    def test_record_types(self, recording_lines):
        records = list(parse_records(recording_lines))
        assert isinstance(records[0], LoadRecord)
        assert isinstance(records[1], InteractionRecord)
        assert records[1].selector() == "button#add"
        assert records[0].navigation.response_start == 900

    def test_comments_and_blank_lines_skipped(self):
        lines = ["# recorded 2024-05-01", "", '{"kind": "unload"}']
        assert len(list(parse_records(lines))) == 1

    def test_invalid_line_reports_line_number(self):
        lines = ['{"kind": "unload"}', '{"kind": "teleport"}']
        with pytest.raises(ReplayError) as exc_info:
            list(parse_records(lines))
        assert exc_info.value.line_number == 2

    def test_load_records_from_file(self, tmp_path, recording_lines):
        path = tmp_path / "session.jsonl"
        path.write_text("\n".join(recording_lines))
        assert len(load_records(path)) == len(RECORDING)


class TestReplay:
    """End-to-end replays."""

    def test_session_attribution(self, replayed):
        _, sink = replayed
        created = sink.session_updates[0]
        assert created["pageViews"] == 0
        assert created["referrerSource"] == "Bing"
        assert created["referrerTerm"] == "rain jacket"
        assert created["device"] == {"type": "mobile", "browser": "Safari", "os": "iOS"}

    def test_event_sequence(self, replayed):
        _, sink = replayed
        events = [
            (e["eventType"], e["eventData"].get("subtype") or e["eventData"].get("type"))
            for e in sink.events
        ]
        assert events == [
            ("perf_issue", "TTFB"),
            ("frustration_signal", "rage_click"),
            ("perf_issue", "LONG_TASKS"),
            ("feature_use", None),
        ]
        assert sink.events[-1]["eventData"] == {"feature": "coupon", "code": "SPRING"}
        assert sink.events[1]["page"] == "/"
        assert sink.events[2]["page"] == "/cart"

    def test_page_views_and_unload_beacon(self, replayed):
        _, sink = replayed
        assert [(p["page"], p.get("timeOnPage")) for p in sink.page_views] == [
            ("/", None),
            ("/", 5),
            ("/cart", None),
        ]
        assert sink.page_views[0]["utmSource"] == "newsletter"
        assert len(sink.beacons) == 1
        assert sink.beacons[0]["payload"]["page"] == "/cart"
        assert sink.beacons[0]["payload"]["timeOnPage"] == 3

    def test_summary(self, replayed):
        replayer, sink = replayed
        summary = replayer.finish()
        assert summary["records"] == len(RECORDING)
        assert summary["dropped"] == 0
        assert summary["failed"] == 0
        assert summary["session_id"].startswith("session_")
        assert summary["delivered"] == len(sink.envelopes)

    def test_idle_fires_between_records(self, settings):
        sink = RecordingSink()
        replayer = Replayer(sink, settings=settings)
        idle_at = settings.session.idle_timeout_ms
        replayer.run(
            parse_records(
                [
                    '{"kind": "load", "timestamp": 0, "url": "https://shop.example/"}',
                    json.dumps({"kind": "scroll", "timestamp": idle_at + 60_000}),
                ]
            )
        )
        states = [u["isActive"] for u in sink.session_updates]
        assert states == [True, True, False, True]
        assert sink.session_updates[2]["lastActivity"] == idle_at
