# ==============================================================================
# Valkey Session Store
# ==============================================================================
"""
Valkey/Redis implementation of the SessionStore interface.

The session id is kept as a plain string under the configured storage key,
written with SETEX so it expires with the tab's lifetime. Several processes
pointed at the same key share one session, which is how a replay can
resume a session started by an earlier run.
"""

import logging

import redis
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from redis.retry import Retry

from clicksignals.base.session_store import SessionStore
from clicksignals.utils.config import get_settings
from clicksignals.utils.retry import VALKEY_RETRIES

logger = logging.getLogger(__name__)


class ValkeySessionStore(SessionStore):
    """
    Valkey/Redis SessionStore.

    Configured with:
    - 10 second socket timeouts for fast failure detection
    - Automatic retries with exponential backoff for transient failures
    - Health check interval to keep connections alive
    """

    def __init__(
        self,
        url: str | None = None,
        client: redis.Redis | None = None,
        socket_timeout: int = 10,
        retries: int | None = None,
    ):
        """
        Initialize the store.

        Args:
            url: Valkey/Redis connection URL. If None, uses settings.
            client: Existing client to use instead of connecting (tests)
            socket_timeout: Socket timeout in seconds (default: 10)
            retries: Retries for transient failures (default: VALKEY_RETRIES)
        """
        if client is not None:
            self._client = client
            return

        if url is None:
            url = get_settings().valkey.url

        retry_count = retries if retries is not None else VALKEY_RETRIES
        self._client = redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            retry=Retry(ExponentialBackoff(cap=32, base=1), retries=retry_count),
            retry_on_error=[RedisTimeoutError, RedisConnectionError],
            health_check_interval=30,
        )

    @property
    def client(self) -> redis.Redis:
        return self._client

    def get(self, key: str) -> str | None:
        value = self._client.get(key)
        if isinstance(value, bytes):
            value = value.decode()
        return value or None

    def set(self, key: str, session_id: str, ttl_seconds: int | None = None) -> None:
        if ttl_seconds is not None:
            self._client.setex(key, ttl_seconds, session_id)
        else:
            self._client.set(key, session_id)

    def ping(self) -> bool:
        """True if Valkey responds to ping."""
        try:
            return bool(self._client.ping())
        except redis.RedisError as e:
            logger.debug("Valkey ping failed: %s", e)
            return False

    def close(self) -> None:
        self._client.close()
