"""Signal sink implementations."""

from clicksignals.infrastructure.sinks.logging import LoggingSink
from clicksignals.infrastructure.sinks.memory import RecordingSink

__all__ = ["LoggingSink", "RecordingSink"]
