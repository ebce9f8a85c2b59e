"""
Infrastructure adapters: schedulers, the signal dispatcher, sinks and
session stores.

Kafka and Valkey adapters are imported from their own modules so their
client libraries load only when selected.
"""

from clicksignals.infrastructure.dispatcher import SignalDispatcher
from clicksignals.infrastructure.scheduling import SystemScheduler, VirtualScheduler
from clicksignals.infrastructure.session_store import MemorySessionStore
from clicksignals.infrastructure.sinks import LoggingSink, RecordingSink

__all__ = [
    "LoggingSink",
    "MemorySessionStore",
    "RecordingSink",
    "SignalDispatcher",
    "SystemScheduler",
    "VirtualScheduler",
]
