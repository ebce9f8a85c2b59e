# ==============================================================================
# Core Domain Logic
# ==============================================================================
"""
Detection logic with no transport dependencies.

This module contains:
- Domain models and the closed Signal union
- Classifiers for user agents and traffic sources
- Session tracking, activity, frustration and performance detectors
- TelemetryEngine, which wires them together

Models and signals are imported first: the detectors depend on the base
package, which in turn depends on them.
"""

from clicksignals.core.models import (
    Capabilities,
    ClickSample,
    DeviceInfo,
    EntryType,
    HostEnvironment,
    InteractionEvent,
    InteractionKind,
    NavigationTiming,
    PageVisit,
    Session,
    SessionStatus,
    UtmParams,
)
from clicksignals.core.signals import (
    EventType,
    FeatureUse,
    FrustrationSignal,
    PageView,
    PerformanceIssue,
    PerformanceMetric,
    SessionUpdate,
    Signal,
)
from clicksignals.core.engine import TelemetryEngine

__all__ = [
    "Capabilities",
    "ClickSample",
    "DeviceInfo",
    "EntryType",
    "EventType",
    "FeatureUse",
    "FrustrationSignal",
    "HostEnvironment",
    "InteractionEvent",
    "InteractionKind",
    "NavigationTiming",
    "PageView",
    "PageVisit",
    "PerformanceIssue",
    "PerformanceMetric",
    "Session",
    "SessionStatus",
    "SessionUpdate",
    "Signal",
    "TelemetryEngine",
    "UtmParams",
]
