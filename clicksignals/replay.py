# ==============================================================================
# Replay Host Adapter
# ==============================================================================
"""
Drives the engine from a JSON-lines recording of host events.

Each line is one record, discriminated by ``kind``:

    {"kind": "load", "timestamp": 0, "url": "https://shop.example/?utm_source=mail",
     "referrer": "https://www.google.com/search?q=shoes", "userAgent": "...",
     "title": "Home", "navigation": {"responseStart": 120, "type": "navigate"},
     "supportedEntryTypes": ["largest-contentful-paint", "layout-shift", "longtask"]}
    {"kind": "navigate", "timestamp": 5000, "page": "/cart", "title": "Cart"}
    {"kind": "click", "timestamp": 6000, "x": 10, "y": 20, "tag": "button", "elementId": "buy"}
    {"kind": "scroll", "timestamp": 7000}
    {"kind": "performance", "timestamp": 8000, "entryType": "longtask",
     "entries": [{"duration": 1200, "startTime": 50}]}
    {"kind": "feature", "timestamp": 9000, "feature": "search", "details": {"q": "x"}}
    {"kind": "unload", "timestamp": 12000}

Time is virtual: before a record is applied the scheduler advances to its
timestamp, so idle timeouts fire in order between records. Blank lines and
lines starting with ``#`` are skipped.
"""

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter, ValidationError

from clicksignals.base.session_store import SessionStore
from clicksignals.base.sink import Beacon, SignalSink
from clicksignals.core.classifiers import page_path
from clicksignals.core.engine import TelemetryEngine
from clicksignals.core.frustration import describe_target
from clicksignals.core.models import (
    Capabilities,
    CamelModel,
    HostEnvironment,
    InteractionEvent,
    InteractionKind,
    NavigationTiming,
)
from clicksignals.infrastructure.dispatcher import SignalDispatcher
from clicksignals.infrastructure.scheduling import VirtualScheduler
from clicksignals.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)


class ReplayError(Exception):
    """A recording line could not be parsed."""

    def __init__(self, line_number: int, message: str):
        super().__init__(f"line {line_number}: {message}")
        self.line_number = line_number


# ==============================================================================
# Records
# ==============================================================================


class _Record(CamelModel):
    timestamp: int | None = Field(default=None, description="Virtual time (ms)")


class LoadRecord(_Record):
    kind: Literal["load"]
    url: str = ""
    referrer: str = ""
    user_agent: str = ""
    title: str = ""
    user_id: str | None = None
    navigation: NavigationTiming | None = None
    supported_entry_types: list[str] | None = None


class NavigateRecord(_Record):
    kind: Literal["navigate"]
    page: str | None = None
    title: str = ""
    url: str | None = None
    user_id: str | None = None


class InteractionRecord(_Record):
    kind: Literal["click", "scroll", "keypress", "pointermove"]
    x: float | None = None
    y: float | None = None
    target: str | None = None
    tag: str | None = None
    element_id: str | None = None
    class_name: str | None = None

    def selector(self) -> str:
        if self.target:
            return self.target
        return describe_target(self.tag, self.element_id, self.class_name)


class PerformanceRecord(_Record):
    kind: Literal["performance"]
    entry_type: str
    entries: list[dict[str, Any]] = Field(default_factory=list)


class FeatureRecord(_Record):
    kind: Literal["feature"]
    feature: str
    details: dict[str, Any] = Field(default_factory=dict)


class UnloadRecord(_Record):
    kind: Literal["unload"]


ReplayRecord = Annotated[
    Union[
        LoadRecord,
        NavigateRecord,
        InteractionRecord,
        PerformanceRecord,
        FeatureRecord,
        UnloadRecord,
    ],
    Field(discriminator="kind"),
]

record_adapter: TypeAdapter[ReplayRecord] = TypeAdapter(ReplayRecord)


def parse_records(lines: Iterable[str]) -> Iterator[ReplayRecord]:
    """
    Parse recording lines.

    Raises:
        ReplayError: On the first line that is not a valid record
    """
    for line_number, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            yield record_adapter.validate_json(line)
        except ValidationError as e:
            raise ReplayError(line_number, str(e)) from e


def load_records(path: Path) -> list[ReplayRecord]:
    with open(path, encoding="utf-8") as f:
        return list(parse_records(f))


# ==============================================================================
# Replayer
# ==============================================================================


class Replayer:
    """
    Engine, virtual scheduler and synchronous dispatcher for one replay.

    The dispatcher is drained after every record, so the sink sees signals
    in emission order and the bounded queue never fills during a replay.
    """

    def __init__(
        self,
        sink: SignalSink,
        store: SessionStore | None = None,
        settings: Settings | None = None,
        start_ms: int = 0,
    ):
        self.settings = settings or get_settings()
        self.sink = sink
        self.scheduler = VirtualScheduler(start_ms)
        self.dispatcher = SignalDispatcher(sink, settings=self.settings.dispatcher)
        self.engine = TelemetryEngine(
            self.dispatcher.submit,
            self.scheduler,
            environment=HostEnvironment(),
            store=store,
            beacon=sink if isinstance(sink, Beacon) else None,
            settings=self.settings,
            flush=self.dispatcher.drain,
        )
        self.records_applied = 0

    def run(self, records: Iterable[ReplayRecord]) -> int:
        """Apply records in order. Returns the number applied."""
        for record in records:
            self.apply(record)
        return self.records_applied

    def apply(self, record: ReplayRecord) -> None:
        if record.timestamp is not None:
            self.scheduler.advance_to(record.timestamp)

        match record:
            case LoadRecord():
                self._load(record)
            case NavigateRecord():
                page = record.page or page_path(record.url)
                self.engine.record_page_view(page, record.title, record.user_id, url=record.url)
            case InteractionRecord():
                self.engine.handle_interaction(
                    InteractionEvent(
                        kind=InteractionKind(record.kind),
                        timestamp=self.scheduler.now_ms(),
                        x=record.x,
                        y=record.y,
                        target_selector=record.selector(),
                    )
                )
            case PerformanceRecord():
                self.engine.on_performance_entries(record.entry_type, record.entries)
            case FeatureRecord():
                self.engine.track_feature_use(record.feature, record.details)
            case UnloadRecord():
                self.engine.handle_unload()

        self.records_applied += 1
        self.dispatcher.drain()

    def _load(self, record: LoadRecord) -> None:
        environment = self.engine.environment
        environment.url = record.url
        environment.referrer = record.referrer
        environment.user_agent = record.user_agent
        if record.supported_entry_types is not None:
            self.engine.performance.capabilities = Capabilities.from_supported_entry_types(
                record.supported_entry_types
            )
        self.engine.record_page_view(page_path(record.url), record.title, record.user_id)
        self.engine.observe_page_load(record.navigation)

    def finish(self) -> dict:
        """Drain, flush the sink and return the dispatcher summary."""
        self.dispatcher.drain()
        try:
            self.sink.flush()
        except Exception as e:
            logger.warning("Sink flush failed: %s", e)
        summary = self.dispatcher.summary()
        summary["records"] = self.records_applied
        summary["session_id"] = self.engine.session_id
        return summary
