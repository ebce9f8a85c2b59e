# ==============================================================================
# Base Abstract Classes
# ==============================================================================
"""
Abstract base classes for the ports-and-adapters architecture.

The core engine depends only on these: where signals go (SignalSink,
Beacon), where the session id is kept (SessionStore) and where time comes
from (Scheduler).
"""

from clicksignals.base.scheduler import Scheduler, TimerHandle
from clicksignals.base.session_store import SessionStore
from clicksignals.base.sink import Beacon, SignalSink

__all__ = [
    "Beacon",
    "Scheduler",
    "SessionStore",
    "SignalSink",
    "TimerHandle",
]
