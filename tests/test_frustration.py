# ==============================================================================
# Tests for Frustration Detection
# ==============================================================================
"""
Unit tests for the FrustrationDetector.

Tests cover:
- Rage clicks (same target, within the radius, within the window)
- Rapid clicks (any target, within the buffer window)
- Per-subtype cooldowns
- Page reload reported once per page load
- Click target fingerprints
"""

import pytest

from conftest import of_type

from clicksignals.core import FrustrationSignal, InteractionEvent, InteractionKind, NavigationTiming
from clicksignals.core.frustration import describe_target


def subtypes(signals):
    return [s.subtype for s in of_type(signals, FrustrationSignal)]


def click_many(engine, times, x=100, y=100, target="button#buy"):
    for t in times:
        engine.record_click(t, x, y, target)


# ==============================================================================
# Rage Clicks
# ==============================================================================


class TestRageClick:
    """Tests for rage-click detection."""

    def test_two_clicks_are_not_rage(self, engine, signals):
        click_many(engine, [0, 200])
        assert subtypes(signals) == []

    def test_third_click_triggers_rage(self, engine, signals):
        click_many(engine, [0, 200, 400])
        rage = of_type(signals, FrustrationSignal)
        assert len(rage) == 1
        assert rage[0].subtype == "rage_click"
        assert rage[0].detail.selector == "button#buy"
        assert rage[0].detail.count == 3
        assert rage[0].timestamp == 400

    def test_cooldown_suppresses_following_clicks(self, engine, signals):
        click_many(engine, [0, 200, 400, 700])
        assert subtypes(signals) == ["rage_click"]

    def test_rage_again_after_cooldown(self, engine, signals):
        click_many(engine, [0, 100, 200])
        click_many(engine, [6000, 6100, 6200])
        assert subtypes(signals) == ["rage_click", "rage_click"]

    def test_different_targets_are_not_rage(self, engine, signals):
        for t, target in [(0, "a"), (100, "b"), (200, "c")]:
            engine.record_click(t, 10, 10, target)
        assert subtypes(signals) == []

    def test_distant_clicks_are_not_rage(self, engine, signals):
        for t, x in [(0, 0), (100, 100), (200, 200)]:
            engine.record_click(t, x, 0, "div.grid")
        assert subtypes(signals) == []

    def test_clicks_outside_window_are_not_rage(self, engine, signals):
        click_many(engine, [0, 600, 1200])
        assert subtypes(signals) == []

    def test_missing_position_and_target(self, engine, signals):
        for t in (0, 100, 200):
            engine.record_click(t)
        rage = of_type(signals, FrustrationSignal)[0]
        assert rage.detail.selector == "unknown"

    def test_event_data(self, engine, signals):
        engine.record_page_view("/product/7")
        click_many(engine, [0, 100, 200])
        rage = of_type(signals, FrustrationSignal)[0]
        assert rage.event_type.value == "frustration_signal"
        assert rage.event_data() == {
            "subtype": "rage_click",
            "selector": "button#buy",
            "count": 3,
            "page": "/product/7",
        }


# ==============================================================================
# Rapid Clicks
# ==============================================================================


class TestRapidClicks:
    """Tests for rapid-click detection."""

    def test_five_clicks_anywhere(self, engine, signals):
        for i, t in enumerate([0, 300, 600, 900, 1200]):
            engine.record_click(t, i * 200, 0, f"li#item-{i}")
        rapid = of_type(signals, FrustrationSignal)
        assert [s.subtype for s in rapid] == ["rapid_clicks"]
        assert rapid[0].detail.count == 5
        assert rapid[0].event_data() == {"subtype": "rapid_clicks", "count": 5, "page": "/"}

    def test_old_clicks_are_purged(self, engine, signals):
        for i, t in enumerate([0, 600, 1200, 1800, 2400]):
            engine.record_click(t, i * 200, 0, f"li#item-{i}")
        assert subtypes(signals) == []
        assert len(engine.frustration.buffered_clicks) == 4

    def test_rage_and_rapid_from_one_burst(self, engine, signals):
        click_many(engine, [0, 100, 200, 300, 400, 500])
        assert subtypes(signals) == ["rage_click", "rapid_clicks"]

    def test_rapid_cooldown(self, engine, signals):
        click_many(engine, [0, 100, 200, 300, 400, 500, 600, 700])
        assert subtypes(signals).count("rapid_clicks") == 1

    def test_interaction_clicks_feed_detector(self, engine, signals):
        for t in (0, 100, 200):
            engine.handle_interaction(
                InteractionEvent(kind=InteractionKind.CLICK, timestamp=t, x=5, y=5)
            )
        assert subtypes(signals) == ["rage_click"]

    def test_non_click_interactions_are_ignored(self, engine, signals):
        for t in range(0, 1000, 100):
            engine.handle_interaction(InteractionEvent(kind=InteractionKind.SCROLL, timestamp=t))
        assert subtypes(signals) == []
        assert engine.frustration.buffered_clicks == []


# ==============================================================================
# Page Reload
# ==============================================================================


class TestReload:
    """Tests for page reload reporting."""

    def test_reload_reported_once(self, engine, signals):
        navigation = NavigationTiming(type="reload")
        engine.observe_page_load(navigation)
        assert engine.frustration.check_reload(navigation) is None
        assert subtypes(signals) == ["page_reload"]
        assert of_type(signals, FrustrationSignal)[0].event_data() == {
            "subtype": "page_reload",
            "page": "/",
        }

    @pytest.mark.parametrize("nav_type", ["navigate", "back_forward"])
    def test_other_navigation_types(self, engine, signals, nav_type):
        engine.observe_page_load(NavigationTiming(type=nav_type))
        assert subtypes(signals) == []

    def test_missing_navigation_timing(self, engine, signals):
        engine.observe_page_load(None)
        assert subtypes(signals) == []

    def test_each_page_load_can_report(self, engine, signals):
        engine.observe_page_load(NavigationTiming(type="reload"))
        engine.observe_page_load(NavigationTiming(type="reload"))
        assert subtypes(signals) == ["page_reload", "page_reload"]


# ==============================================================================
# Target Fingerprint
# ==============================================================================


class TestDescribeTarget:
    """Tests for describe_target."""

    @pytest.mark.parametrize(
        "tag, element_id, class_name, expected",
        [
            ("BUTTON", "buy", "btn primary large", "button#buy.btn.primary"),
            ("a", None, "nav-link", "a.nav-link"),
            ("div", "main", None, "div#main"),
            ("span", None, "   ", "span"),
            (None, "x", "y", "unknown"),
            ("", None, None, "unknown"),
        ],
    )
    def test_fingerprint(self, tag, element_id, class_name, expected):
        assert describe_target(tag, element_id, class_name) == expected
