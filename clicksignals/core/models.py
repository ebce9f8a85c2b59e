# ==============================================================================
# Click Signals Domain Models
# ==============================================================================
"""
Pydantic models for the telemetry engine's inputs and state.

These models are used for:
- Describing the host environment (user agent, referrer, current URL)
- Session and page visit state owned by the session tracker
- Interaction and performance inputs delivered by the host adapter

This module is part of the core domain layer and has no external dependencies
beyond Pydantic.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys for the tracking API."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ==============================================================================
# Environment and Classification
# ==============================================================================


class HostEnvironment(BaseModel):
    """
    Environment strings supplied by the host adapter.

    Attributes:
        user_agent: Browser user-agent string
        referrer: Referrer URL of the landing page (empty when direct)
        url: Current page URL, used for UTM parameter extraction
    """

    user_agent: str = Field(default="", description="User-agent string")
    referrer: str = Field(default="", description="Referrer URL")
    url: str = Field(default="", description="Current URL")


class DeviceInfo(CamelModel):
    """Device, browser and OS classification of a user agent."""

    type: Literal["mobile", "tablet", "desktop"] = "desktop"
    browser: str = "Unknown"
    os: str = "Unknown"


class UtmParams(CamelModel):
    """UTM campaign parameters captured from the current URL."""

    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None
    utm_term: str | None = None


class ReferrerAttribution(BaseModel):
    """Traffic source derived from a referrer URL."""

    source: str = Field(..., description="Search engine, platform, hostname, Direct or Unknown")
    search_term: str | None = Field(default=None, description="Search term, if recognized")


# ==============================================================================
# Session State
# ==============================================================================


class SessionStatus(str, Enum):
    """Session state machine states."""

    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    IDLE = "idle"


class Session(BaseModel):
    """
    The single current session of an engine instance.

    Attributes:
        session_id: Opaque identifier, generated once per tab/process
        user_id: Explicit user id, when the host knows one
        started_at: Session start (ms)
        last_activity: Last qualifying interaction (ms)
        pages: Visited pages in order (append-only)
        referrer: Raw referrer URL
        referrer_source: Traffic source classification
        referrer_term: Search term from the referrer or utm_term
        user_agent: Raw user-agent string
        device: Device/browser/OS classification
        is_active: False once the idle timeout fired
    """

    session_id: str
    user_id: str | None = None
    started_at: int
    last_activity: int
    pages: list[str] = Field(default_factory=list)
    referrer: str = ""
    referrer_source: str = "Direct"
    referrer_term: str | None = None
    user_agent: str = ""
    device: DeviceInfo = Field(default_factory=DeviceInfo)
    is_active: bool = True

    @property
    def status(self) -> SessionStatus:
        return SessionStatus.ACTIVE if self.is_active else SessionStatus.IDLE


class PageVisit(BaseModel):
    """
    One visit to a page within a session.

    Dwell time stays None until the visit is closed by a navigation or an
    unload.
    """

    session_id: str
    page: str
    title: str = ""
    started_at: int
    referrer: str = ""
    utm: UtmParams = Field(default_factory=UtmParams)
    dwell_seconds: int | None = None

    def close(self, now: int) -> int:
        """Finalize dwell time as whole seconds, rounded half up."""
        elapsed = max(0, now - self.started_at)
        self.dwell_seconds = int(elapsed / 1000 + 0.5)
        return self.dwell_seconds


# ==============================================================================
# Interaction Inputs
# ==============================================================================


class InteractionKind(str, Enum):
    """Interaction event kinds that count as user activity."""

    CLICK = "click"
    SCROLL = "scroll"
    KEYPRESS = "keypress"
    POINTERMOVE = "pointermove"


class InteractionEvent(BaseModel):
    """An interaction event delivered by the host adapter."""

    kind: InteractionKind
    timestamp: int = Field(..., description="Event time in milliseconds")
    x: float | None = None
    y: float | None = None
    target_selector: str | None = None


class ClickSample(BaseModel):
    """A click retained in the frustration detector's rolling buffer."""

    timestamp: int
    x: float = 0.0
    y: float = 0.0
    target: str = "unknown"


# ==============================================================================
# Performance Inputs
# ==============================================================================


class EntryType(str, Enum):
    """Performance observer entry types."""

    LARGEST_CONTENTFUL_PAINT = "largest-contentful-paint"
    LAYOUT_SHIFT = "layout-shift"
    LONG_TASK = "longtask"


class NavigationTiming(CamelModel):
    """Navigation timing record of the current page load."""

    response_start: float | None = Field(default=None, description="Time to first byte (ms)")
    type: Literal["navigate", "reload", "back_forward", "prerender"] = "navigate"


class LargestContentfulPaint(CamelModel):
    """A largest-contentful-paint report."""

    start_time: float = 0.0
    render_time: float = 0.0
    load_time: float = 0.0

    @property
    def value(self) -> float:
        return self.render_time or self.load_time or self.start_time


class LayoutShift(CamelModel):
    """A layout-shift report."""

    value: float = 0.0
    had_recent_input: bool = False


class LongTask(CamelModel):
    """A long-task report."""

    duration: float = 0.0
    start_time: float = 0.0


class Capabilities(BaseModel):
    """
    Observation primitives the host environment supports.

    A metric whose capability is False is never subscribed.
    """

    lcp: bool = True
    cls: bool = True
    longtask: bool = True

    @classmethod
    def from_supported_entry_types(cls, entry_types: list[str] | None) -> "Capabilities":
        """Build capabilities from a host's list of supported entry type names."""
        supported = set(entry_types or [])
        return cls(
            lcp=EntryType.LARGEST_CONTENTFUL_PAINT.value in supported,
            cls=EntryType.LAYOUT_SHIFT.value in supported,
            longtask=EntryType.LONG_TASK.value in supported,
        )

    def supports(self, entry_type: EntryType) -> bool:
        if entry_type == EntryType.LARGEST_CONTENTFUL_PAINT:
            return self.lcp
        if entry_type == EntryType.LAYOUT_SHIFT:
            return self.cls
        return self.longtask
