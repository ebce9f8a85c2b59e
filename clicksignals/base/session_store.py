# ==============================================================================
# Session Store Abstract Base Class
# ==============================================================================
"""
Abstract interface for short-lived session id storage.

The session id is persisted so that it survives in-page navigation within
one tab, but expires with the tab. This is transient storage, not a
repository: the engine never deletes sessions and never reads anything but
the id back.

Implementations: in-memory, Valkey.
"""

from abc import ABC, abstractmethod


class SessionStore(ABC):
    """Key-value storage for the current session id."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """
        Get the stored session id.

        Args:
            key: Storage key

        Returns:
            Session id, or None if absent or expired
        """
        ...

    @abstractmethod
    def set(self, key: str, session_id: str, ttl_seconds: int | None = None) -> None:
        """
        Store the session id with optional TTL.

        Args:
            key: Storage key
            session_id: Session id to store
            ttl_seconds: Optional time-to-live in seconds
        """
        ...

    def close(self) -> None:
        """Release store resources."""
