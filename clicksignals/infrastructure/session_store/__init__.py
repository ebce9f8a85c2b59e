"""Session id store implementations."""

from clicksignals.infrastructure.session_store.memory import MemorySessionStore

__all__ = ["MemorySessionStore"]
