# ==============================================================================
# Signals - Engine Output
# ==============================================================================
"""
Closed tagged-variant signal types produced by the engine.

Every signal carries a session id, a page path and a timestamp. Event
signals (frustration, performance, feature use) carry a detail variant,
discriminated by ``subtype`` for frustration and ``type`` for performance,
whose fields match the ``eventData`` the tracking API expects.

Signal variants:
    SessionUpdate      -> sink.emit_session_update
    PageView           -> sink.emit_page_view
    FrustrationSignal  -> sink.emit_event("frustration_signal", ...)
    PerformanceIssue   -> sink.emit_event("perf_issue", ...)
    FeatureUse         -> sink.emit_event("feature_use", ...)
"""

from abc import abstractmethod
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from clicksignals.core.envelope import page_view_payload
from clicksignals.core.models import CamelModel, DeviceInfo, UtmParams


class EventType(str, Enum):
    """Event types accepted by the sink's emit_event."""

    FRUSTRATION_SIGNAL = "frustration_signal"
    PERF_ISSUE = "perf_issue"
    FEATURE_USE = "feature_use"


class PerformanceMetric(str, Enum):
    """Performance metrics reported once per page load."""

    TTFB = "TTFB"
    LCP = "LCP"
    CLS = "CLS"
    LONG_TASKS = "LONG_TASKS"


# ==============================================================================
# Signal Details
# ==============================================================================


class RageClickDetail(BaseModel):
    subtype: Literal["rage_click"] = "rage_click"
    selector: str
    count: int


class RapidClicksDetail(BaseModel):
    subtype: Literal["rapid_clicks"] = "rapid_clicks"
    count: int


class PageReloadDetail(BaseModel):
    subtype: Literal["page_reload"] = "page_reload"


class MetricDetail(BaseModel):
    """A threshold crossing of a timing or layout metric."""

    type: Literal["TTFB", "LCP", "CLS"]
    value: float


class LongTasksDetail(BaseModel):
    type: Literal["LONG_TASKS"] = "LONG_TASKS"
    count: int


class FeatureUseDetail(BaseModel):
    feature: str
    details: dict[str, Any] = Field(default_factory=dict)


FrustrationDetail = Annotated[
    Union[RageClickDetail, RapidClicksDetail, PageReloadDetail],
    Field(discriminator="subtype"),
]

PerformanceDetail = Annotated[
    Union[MetricDetail, LongTasksDetail],
    Field(discriminator="type"),
]


# ==============================================================================
# Signals
# ==============================================================================


class BaseSignal(BaseModel):
    """Fields shared by every signal."""

    session_id: str
    page: str
    timestamp: int = Field(..., description="Emission time in milliseconds")


class SessionUpdate(BaseSignal):
    """
    Session creation or update.

    Identity fields (referrer, user agent, device) are only set on creation
    and on activity ticks; navigation updates leave them None.
    """

    signal_type: Literal["session_update"] = "session_update"
    is_active: bool = True
    user_id: str | None = None
    started_at: int | None = None
    page_views: int | None = None
    pages: list[str] | None = None
    referrer: str | None = None
    referrer_source: str | None = None
    referrer_term: str | None = None
    user_agent: str | None = None
    device: DeviceInfo | None = None

    def fields(self) -> dict[str, Any]:
        """Session fields for the sink, camelCase, unset values omitted."""
        fields = _SessionFields(
            start_time=self.started_at,
            last_activity=self.timestamp,
            is_active=self.is_active,
            user_id=self.user_id,
            page_views=self.page_views,
            pages=self.pages,
            referrer=self.referrer,
            referrer_source=self.referrer_source,
            referrer_term=self.referrer_term,
            user_agent=self.user_agent,
            device=self.device,
        )
        return fields.model_dump(by_alias=True, exclude_none=True)


class _SessionFields(CamelModel):
    start_time: int | None = None
    last_activity: int
    is_active: bool
    user_id: str | None = None
    page_views: int | None = None
    pages: list[str] | None = None
    referrer: str | None = None
    referrer_source: str | None = None
    referrer_term: str | None = None
    user_agent: str | None = None
    device: DeviceInfo | None = None


class PageView(BaseSignal):
    """
    A page view.

    ``dwell_seconds`` is None for the immediate zero-duration view emitted
    when a page opens, and set once the page is closed.
    """

    signal_type: Literal["page_view"] = "page_view"
    title: str = ""
    started_at: int
    dwell_seconds: int | None = None
    referrer: str = ""
    utm: UtmParams = Field(default_factory=UtmParams)
    user_id: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Page view payload in the tracking API's camelCase shape."""
        return page_view_payload(
            self.session_id,
            self.page,
            self.title,
            self.started_at,
            self.dwell_seconds,
            self.referrer,
            self.utm,
            self.user_id,
        )


class EventSignal(BaseSignal):
    """Base for signals delivered through emit_event."""

    event_type: EventType

    @abstractmethod
    def event_data(self) -> dict[str, Any]:
        """The eventData object passed to emit_event."""


class FrustrationSignal(EventSignal):
    signal_type: Literal["frustration"] = "frustration"
    event_type: Literal[EventType.FRUSTRATION_SIGNAL] = EventType.FRUSTRATION_SIGNAL
    detail: FrustrationDetail

    @property
    def subtype(self) -> str:
        return self.detail.subtype

    def event_data(self) -> dict[str, Any]:
        return {**self.detail.model_dump(), "page": self.page}


class PerformanceIssue(EventSignal):
    signal_type: Literal["performance"] = "performance"
    event_type: Literal[EventType.PERF_ISSUE] = EventType.PERF_ISSUE
    detail: PerformanceDetail

    @property
    def metric(self) -> PerformanceMetric:
        return PerformanceMetric(self.detail.type)

    @property
    def magnitude(self) -> float:
        if isinstance(self.detail, LongTasksDetail):
            return self.detail.count
        return self.detail.value

    def event_data(self) -> dict[str, Any]:
        return {**self.detail.model_dump(), "page": self.page}


class FeatureUse(EventSignal):
    signal_type: Literal["feature_use"] = "feature_use"
    event_type: Literal[EventType.FEATURE_USE] = EventType.FEATURE_USE
    detail: FeatureUseDetail

    def event_data(self) -> dict[str, Any]:
        return {"feature": self.detail.feature, **self.detail.details}


Signal = Annotated[
    Union[SessionUpdate, PageView, FrustrationSignal, PerformanceIssue, FeatureUse],
    Field(discriminator="signal_type"),
]

signal_adapter: TypeAdapter[Signal] = TypeAdapter(Signal)
