# ==============================================================================
# Tests for Performance Monitoring
# ==============================================================================
"""
Unit tests for the PerformanceMonitor.

Tests cover:
- TTFB from navigation timing
- LCP reported once per page load, from the latest entry of a batch
- CLS accumulation excluding shifts with recent input
- Long tasks (single severe task, or many slow tasks across batches)
- Unsupported capabilities and malformed batches
"""

import pytest

from conftest import of_type

from clicksignals.core import (
    Capabilities,
    EntryType,
    NavigationTiming,
    PerformanceIssue,
    PerformanceMetric,
)

LCP = "largest-contentful-paint"
CLS = "layout-shift"
LONGTASK = "longtask"


def issues(signals):
    return [(s.metric.value, s.magnitude) for s in of_type(signals, PerformanceIssue)]


@pytest.fixture()
def observed(engine):
    """Engine with a page load in progress and every observer supported."""
    engine.record_page_view("/")
    engine.observe_page_load(NavigationTiming(response_start=100))
    return engine


class TestTTFB:
    """Tests for time to first byte."""

    def test_slow_ttfb_reported(self, engine, signals):
        engine.observe_page_load(NavigationTiming(response_start=750.4))
        assert issues(signals) == [("TTFB", 750)]

    def test_threshold_is_exclusive(self, engine, signals):
        engine.observe_page_load(NavigationTiming(response_start=600))
        assert issues(signals) == []

    def test_missing_timing(self, engine, signals):
        engine.observe_page_load(NavigationTiming())
        engine.observe_page_load(None)
        assert issues(signals) == []


class TestLCP:
    """Tests for largest contentful paint."""

    def test_reported_once(self, observed, signals):
        observed.on_performance_entries(LCP, [{"startTime": 3000}])
        observed.on_performance_entries(LCP, [{"startTime": 4000}])
        assert issues(signals) == [("LCP", 3000)]
        assert observed.performance.reported(PerformanceMetric.LCP)

    def test_latest_entry_of_batch(self, observed, signals):
        observed.on_performance_entries(LCP, [{"startTime": 5000}, {"startTime": 1000}])
        assert issues(signals) == []

    def test_render_time_preferred(self, observed, signals):
        observed.on_performance_entries(
            LCP, [{"renderTime": 2600, "loadTime": 2000, "startTime": 100}]
        )
        assert issues(signals) == [("LCP", 2600)]

    def test_later_batch_can_cross_threshold(self, observed, signals):
        observed.on_performance_entries(LCP, [{"startTime": 1200}])
        observed.on_performance_entries(LCP, [{"startTime": 2700}])
        assert issues(signals) == [("LCP", 2700)]

    def test_new_page_load_resets_latch(self, observed, signals):
        observed.on_performance_entries(LCP, [{"startTime": 3000}])
        observed.observe_page_load(NavigationTiming(response_start=100))
        observed.on_performance_entries(LCP, [{"startTime": 3500}])
        assert issues(signals) == [("LCP", 3000), ("LCP", 3500)]


class TestCLS:
    """Tests for cumulative layout shift."""

    def test_accumulates_across_batches(self, observed, signals):
        observed.on_performance_entries(
            CLS, [{"value": 0.1}, {"value": 0.2, "hadRecentInput": True}]
        )
        assert issues(signals) == []
        observed.on_performance_entries(CLS, [{"value": 0.2}])
        assert issues(signals) == [("CLS", 0.3)]

    def test_reported_once(self, observed, signals):
        observed.on_performance_entries(CLS, [{"value": 0.3}])
        observed.on_performance_entries(CLS, [{"value": 0.3}])
        assert len(issues(signals)) == 1

    def test_event_data(self, observed, signals):
        observed.on_performance_entries(CLS, [{"value": 0.4}])
        issue = of_type(signals, PerformanceIssue)[0]
        assert issue.event_type.value == "perf_issue"
        assert issue.event_data() == {"type": "CLS", "value": 0.4, "page": "/"}


class TestLongTasks:
    """Tests for long task detection."""

    def test_single_severe_task(self, observed, signals):
        observed.on_performance_entries(LONGTASK, [{"duration": 1200, "startTime": 10}])
        assert issues(signals) == [("LONG_TASKS", 1)]

    def test_many_slow_tasks(self, observed, signals):
        observed.on_performance_entries(LONGTASK, [{"duration": 250}] * 5)
        assert issues(signals) == [("LONG_TASKS", 5)]

    def test_slow_tasks_accumulate_across_batches(self, observed, signals):
        observed.on_performance_entries(LONGTASK, [{"duration": 250}] * 3)
        assert issues(signals) == []
        observed.on_performance_entries(LONGTASK, [{"duration": 300}, {"duration": 150}])
        assert issues(signals) == []
        observed.on_performance_entries(LONGTASK, [{"duration": 210}])
        assert issues(signals) == [("LONG_TASKS", 6)]

    def test_reported_once(self, observed, signals):
        observed.on_performance_entries(LONGTASK, [{"duration": 1500}])
        observed.on_performance_entries(LONGTASK, [{"duration": 1500}])
        assert len(issues(signals)) == 1


class TestCapabilities:
    """Tests for unsupported observers and bad input."""

    def test_unsupported_observer_not_subscribed(self, make_engine, signals):
        engine = make_engine(capabilities=Capabilities(lcp=False))
        subscribed = engine.observe_page_load(NavigationTiming())
        assert EntryType.LARGEST_CONTENTFUL_PAINT not in subscribed
        assert EntryType.LAYOUT_SHIFT in subscribed

        engine.on_performance_entries(LCP, [{"startTime": 9000}])
        engine.on_performance_entries(CLS, [{"value": 0.5}])
        assert issues(signals) == [("CLS", 0.5)]

    def test_from_supported_entry_types(self):
        capabilities = Capabilities.from_supported_entry_types(["longtask", "paint"])
        assert capabilities.longtask is True
        assert capabilities.lcp is False
        assert capabilities.cls is False
        assert Capabilities.from_supported_entry_types(None) == Capabilities(
            lcp=False, cls=False, longtask=False
        )

    def test_entries_before_observe_are_ignored(self, engine, signals):
        engine.on_performance_entries(LONGTASK, [{"duration": 5000}])
        assert issues(signals) == []

    def test_unknown_entry_type_ignored(self, observed, signals):
        observed.on_performance_entries("paint", [{"startTime": 1}])
        assert issues(signals) == []

    def test_malformed_batch_does_not_affect_other_metrics(self, observed, signals):
        observed.on_performance_entries(CLS, [{"value": "not-a-number"}])
        observed.on_performance_entries(LONGTASK, [{"duration": 2000}])
        observed.on_performance_entries(CLS, [{"value": 0.3}])
        assert issues(signals) == [("LONG_TASKS", 1), ("CLS", 0.3)]
