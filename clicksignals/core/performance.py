# ==============================================================================
# Performance Monitor - One-Shot Performance Degradation Signals
# ==============================================================================
"""
Threshold checks over browser performance entries, once per page load.

observe() is called once per page load. It evaluates time to first byte
synchronously from the navigation timing record and subscribes to the
observer entry types the host supports. The host then delivers observer
batches through on_entries().

Each metric has its own latch:
- TTFB       > 600 ms
- LCP        > 2500 ms (latest entry of a batch; later batches ignored once reported)
- CLS        running total of shifts without recent input > 0.25
- LONG_TASKS any task > 1000 ms, or 5+ tasks > 200 ms

An unsupported entry type is never subscribed, and a handler failing on a
malformed batch is logged and skipped without affecting other metrics.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Any

from pydantic import ValidationError

from clicksignals.base.scheduler import Scheduler
from clicksignals.core.models import (
    Capabilities,
    EntryType,
    LargestContentfulPaint,
    LayoutShift,
    LongTask,
    NavigationTiming,
)
from clicksignals.core.session import SessionTracker
from clicksignals.core.signals import (
    LongTasksDetail,
    MetricDetail,
    PerformanceIssue,
    PerformanceMetric,
)
from clicksignals.utils.config import PerformanceSettings

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """Per-page-load performance threshold latches."""

    def __init__(
        self,
        tracker: SessionTracker,
        emit: Callable[[object], None],
        scheduler: Scheduler,
        capabilities: Capabilities | None = None,
        settings: PerformanceSettings | None = None,
    ):
        """
        Initialize the performance monitor.

        Args:
            tracker: Session tracker providing session id and page
            emit: Callable receiving produced signals
            scheduler: Clock source for signal timestamps
            capabilities: Observer entry types the host supports
            settings: Thresholds (defaults from environment)
        """
        self._tracker = tracker
        self._emit = emit
        self._scheduler = scheduler
        self.capabilities = capabilities or Capabilities()
        self.settings = settings or PerformanceSettings()

        self._handlers: dict[EntryType, Callable[[list[Any]], None]] = {
            EntryType.LARGEST_CONTENTFUL_PAINT: self._handle_lcp,
            EntryType.LAYOUT_SHIFT: self._handle_layout_shift,
            EntryType.LONG_TASK: self._handle_long_tasks,
        }
        self._subscribed: set[EntryType] = set()
        self._reset_latches()

    @property
    def subscribed(self) -> set[EntryType]:
        return set(self._subscribed)

    def reported(self, metric: PerformanceMetric) -> bool:
        """Whether a metric already fired during this page load."""
        return metric in self._reported

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def observe(self, navigation: NavigationTiming | None = None) -> set[EntryType]:
        """
        Start monitoring a new page load.

        Resets every latch, checks TTFB, and subscribes to the supported
        observer entry types.

        Args:
            navigation: Navigation timing record, if the host has one

        Returns:
            The entry types now subscribed
        """
        self._reset_latches()
        try:
            self._check_ttfb(navigation)
        except Exception:
            logger.debug("TTFB check failed", exc_info=True)

        self._subscribed = {
            entry_type for entry_type in EntryType if self.capabilities.supports(entry_type)
        }
        skipped = set(EntryType) - self._subscribed
        if skipped:
            logger.debug(
                "Observers not supported, skipping: %s",
                ", ".join(sorted(e.value for e in skipped)),
            )
        return self.subscribed

    def on_entries(self, entry_type: EntryType | str, entries: Iterable[Any]) -> None:
        """
        Deliver an observer batch.

        Entries may be model instances or dicts with the same fields.
        Batches for unsubscribed entry types are ignored.
        """
        try:
            entry_type = EntryType(entry_type)
        except ValueError:
            logger.debug("Ignoring unknown entry type %s", entry_type)
            return
        if entry_type not in self._subscribed:
            logger.debug("Ignoring %s entries: not subscribed", entry_type.value)
            return
        try:
            self._handlers[entry_type](list(entries))
        except (ValidationError, TypeError, ValueError):
            logger.debug("Malformed %s entries skipped", entry_type.value, exc_info=True)

    # ------------------------------------------------------------------
    # Metric handlers
    # ------------------------------------------------------------------

    def _check_ttfb(self, navigation: NavigationTiming | None) -> None:
        if navigation is None or navigation.response_start is None:
            return
        if PerformanceMetric.TTFB in self._reported:
            return
        ttfb = navigation.response_start
        if ttfb > self.settings.ttfb_threshold_ms:
            self._report(MetricDetail(type="TTFB", value=round(ttfb)))

    def _handle_lcp(self, entries: list[Any]) -> None:
        if not entries or PerformanceMetric.LCP in self._reported:
            return
        latest = LargestContentfulPaint.model_validate(entries[-1])
        lcp = latest.value
        if lcp and lcp > self.settings.lcp_threshold_ms:
            self._report(MetricDetail(type="LCP", value=round(lcp)))

    def _handle_layout_shift(self, entries: list[Any]) -> None:
        for entry in entries:
            shift = LayoutShift.model_validate(entry)
            if not shift.had_recent_input:
                self._cls_total += shift.value
        exceeded = self._cls_total > self.settings.cls_threshold
        if exceeded and PerformanceMetric.CLS not in self._reported:
            self._report(MetricDetail(type="CLS", value=round(self._cls_total, 3)))

    def _handle_long_tasks(self, entries: list[Any]) -> None:
        tasks = [LongTask.model_validate(entry) for entry in entries]
        self._long_task_count += len(tasks)
        severe = any(task.duration > self.settings.long_task_severe_ms for task in tasks)
        self._slow_task_count += sum(
            1 for task in tasks if task.duration > self.settings.long_task_slow_ms
        )
        many = self._slow_task_count >= self.settings.long_task_slow_count
        if (severe or many) and PerformanceMetric.LONG_TASKS not in self._reported:
            self._report(LongTasksDetail(count=self._long_task_count))

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _reset_latches(self) -> None:
        self._reported: set[PerformanceMetric] = set()
        self._cls_total = 0.0
        self._long_task_count = 0
        self._slow_task_count = 0

    def _report(self, detail: MetricDetail | LongTasksDetail) -> None:
        metric = PerformanceMetric(detail.type)
        self._reported.add(metric)
        logger.debug("Performance issue %s: %s", metric.value, detail)
        self._emit(
            PerformanceIssue(
                session_id=self._tracker.session_id_for_event(),
                page=self._tracker.page,
                timestamp=self._scheduler.now_ms(),
                detail=detail,
            )
        )
