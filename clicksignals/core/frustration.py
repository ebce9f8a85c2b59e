# ==============================================================================
# Frustration Detector - Rage Clicks, Rapid Clicks and Reloads
# ==============================================================================
"""
Click-pattern frustration detection over a rolling time window.

Every click is appended to a buffer whose horizon is the longest detection
window; older samples are purged on each new click. Two independent tests
then run on the buffer:

- Rage click: >= 3 clicks within 1s on the same target selector and within
  50px of the current click.
- Rapid clicks: >= 5 clicks anywhere within 2s.

Each test has its own cooldown, so a subtype is never emitted twice within
5 seconds. A page reload, read from the navigation timing type at page
load, is reported separately as a one-shot signal.
"""

import logging
import math
from collections import deque
from collections.abc import Callable

from clicksignals.base.scheduler import Scheduler
from clicksignals.core.models import ClickSample, NavigationTiming
from clicksignals.core.session import SessionTracker
from clicksignals.core.signals import (
    FrustrationSignal,
    PageReloadDetail,
    RageClickDetail,
    RapidClicksDetail,
)
from clicksignals.utils.config import FrustrationSettings

logger = logging.getLogger(__name__)

UNKNOWN_TARGET = "unknown"


def describe_target(
    tag_name: str | None,
    element_id: str | None = None,
    class_name: str | None = None,
) -> str:
    """
    Structural fingerprint of a click target.

    Tag name, then ``#id`` if present, then up to two class tokens, e.g.
    ``button#buy.btn.primary``. Used only for equality within the rage-click
    window.

    Returns:
        The fingerprint, or "unknown" when there is no resolvable target
    """
    if not tag_name:
        return UNKNOWN_TARGET
    selector = tag_name.lower()
    if element_id:
        selector += f"#{element_id}"
    classes = str(class_name).split() if class_name else []
    if classes:
        selector += "." + ".".join(classes[:2])
    return selector


class FrustrationDetector:
    """Rolling click buffer with cooldown-gated pattern tests."""

    def __init__(
        self,
        tracker: SessionTracker,
        emit: Callable[[object], None],
        scheduler: Scheduler,
        settings: FrustrationSettings | None = None,
    ):
        self._tracker = tracker
        self._emit = emit
        self._scheduler = scheduler
        self.settings = settings or FrustrationSettings()

        self._clicks: deque[ClickSample] = deque()
        self._rage_cooldown_until: int | None = None
        self._rapid_cooldown_until: int | None = None
        self._reload_reported = False

    @property
    def buffered_clicks(self) -> list[ClickSample]:
        return list(self._clicks)

    def record_click(
        self,
        timestamp: int,
        x: float | None = None,
        y: float | None = None,
        target_selector: str | None = None,
    ) -> list[FrustrationSignal]:
        """
        Add a click and run both pattern tests.

        Args:
            timestamp: Click time (ms)
            x: Horizontal position (px); missing positions count as 0
            y: Vertical position (px)
            target_selector: Fingerprint from describe_target()

        Returns:
            Signals emitted for this click (zero, one or both subtypes)
        """
        sample = ClickSample(
            timestamp=timestamp,
            x=x or 0.0,
            y=y or 0.0,
            target=target_selector or UNKNOWN_TARGET,
        )
        horizon = self.settings.buffer_window_ms
        while self._clicks and timestamp - self._clicks[0].timestamp > horizon:
            self._clicks.popleft()
        self._clicks.append(sample)

        emitted = []
        rage = self._check_rage_click(sample)
        if rage is not None:
            emitted.append(rage)
        rapid = self._check_rapid_clicks(sample)
        if rapid is not None:
            emitted.append(rapid)
        for signal in emitted:
            self._emit(signal)
        return emitted

    def check_reload(self, navigation: NavigationTiming | None) -> FrustrationSignal | None:
        """Report a page reload once, from the navigation timing type."""
        if self._reload_reported or navigation is None or navigation.type != "reload":
            return None
        self._reload_reported = True
        signal = self._signal(PageReloadDetail(), self._tracker.session_id_for_event())
        self._emit(signal)
        return signal

    def reset_page_load(self) -> None:
        """Re-arm the reload latch for a new page load."""
        self._reload_reported = False

    # ------------------------------------------------------------------
    # Pattern tests
    # ------------------------------------------------------------------

    def _check_rage_click(self, current: ClickSample) -> FrustrationSignal | None:
        now = current.timestamp
        window = self.settings.rage_window_ms
        radius = self.settings.rage_radius_px
        clustered = [
            c
            for c in self._clicks
            if now - c.timestamp <= window
            and c.target == current.target
            and math.hypot(c.x - current.x, c.y - current.y) <= radius
        ]
        if len(clustered) < self.settings.rage_min_clicks:
            return None
        if self._rage_cooldown_until is not None and now <= self._rage_cooldown_until:
            return None
        self._rage_cooldown_until = now + self.settings.cooldown_ms
        logger.debug("Rage click on %s (%d clicks)", current.target, len(clustered))
        return self._signal(
            RageClickDetail(selector=current.target, count=len(clustered)),
            self._tracker.session_id_for_event(),
            now,
        )

    def _check_rapid_clicks(self, current: ClickSample) -> FrustrationSignal | None:
        now = current.timestamp
        count = len(self._clicks)
        if count < self.settings.rapid_min_clicks:
            return None
        if self._rapid_cooldown_until is not None and now <= self._rapid_cooldown_until:
            return None
        self._rapid_cooldown_until = now + self.settings.cooldown_ms
        logger.debug("Rapid click burst (%d clicks)", count)
        return self._signal(
            RapidClicksDetail(count=count),
            self._tracker.session_id_for_event(),
            now,
        )

    def _signal(self, detail, session_id: str, timestamp: int | None = None) -> FrustrationSignal:
        if timestamp is None:
            timestamp = self._scheduler.now_ms()
        return FrustrationSignal(
            session_id=session_id,
            page=self._tracker.page,
            timestamp=timestamp,
            detail=detail,
        )
