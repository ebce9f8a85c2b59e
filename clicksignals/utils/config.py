# ==============================================================================
# Application Configuration
# ==============================================================================
"""
Configuration management using pydantic-settings.

All configuration is loaded from environment variables, with support for
.env files via python-dotenv. Every detector accepts its own settings
object, so tests can build engines with tuned thresholds without touching
the environment.
"""

from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file before any settings are instantiated
load_dotenv()


class SessionSettings(BaseSettings):
    """Session lifecycle and activity settings."""

    model_config = SettingsConfigDict(env_prefix="SESSION_")

    idle_timeout_ms: int = Field(
        default=5 * 60 * 1000,
        description="Silence after which the session is flagged inactive",
    )
    activity_throttle_ms: int = Field(
        default=30_000,
        description="Minimum interval between activity SessionUpdate signals",
    )
    storage_key: str = Field(
        default="clicksignals_session_id",
        description="Key under which the session id is persisted",
    )
    storage_ttl_seconds: int = Field(
        default=1800, description="TTL of the persisted session id in seconds"
    )


class FrustrationSettings(BaseSettings):
    """Rage-click and rapid-click detection settings."""

    model_config = SettingsConfigDict(env_prefix="FRUSTRATION_")

    buffer_window_ms: int = Field(
        default=2000, description="Click buffer horizon (rapid-click window)"
    )
    rage_window_ms: int = Field(default=1000, description="Rage-click window")
    rage_radius_px: float = Field(
        default=50.0, description="Max distance between clicks of one rage cluster"
    )
    rage_min_clicks: int = Field(default=3, description="Clicks needed for a rage click")
    rapid_min_clicks: int = Field(default=5, description="Clicks needed for a rapid burst")
    cooldown_ms: int = Field(
        default=5000, description="Cooldown between two signals of the same subtype"
    )


class PerformanceSettings(BaseSettings):
    """Performance degradation thresholds."""

    model_config = SettingsConfigDict(env_prefix="PERFORMANCE_")

    ttfb_threshold_ms: float = Field(default=600.0, description="Time to first byte threshold")
    lcp_threshold_ms: float = Field(
        default=2500.0, description="Largest contentful paint threshold"
    )
    cls_threshold: float = Field(default=0.25, description="Cumulative layout shift threshold")
    long_task_severe_ms: float = Field(
        default=1000.0, description="A single task longer than this is reported"
    )
    long_task_slow_ms: float = Field(
        default=200.0, description="Tasks longer than this count towards the slow total"
    )
    long_task_slow_count: int = Field(
        default=5, description="Number of slow tasks that triggers a report"
    )


class DispatcherSettings(BaseSettings):
    """Outbound signal queue and sink selection."""

    model_config = SettingsConfigDict(env_prefix="DISPATCHER_")

    sink: Literal["log", "memory", "kafka"] = Field(
        default="log", description="Sink implementation (log, memory, kafka)"
    )
    store: Literal["memory", "valkey"] = Field(
        default="memory", description="Session id store (memory, valkey)"
    )
    max_queue_size: int = Field(default=1000, description="Bounded outbound queue size")
    poll_interval_seconds: float = Field(
        default=0.25, description="Dispatcher thread queue poll interval"
    )
    stop_timeout_seconds: float = Field(
        default=5.0, description="Max time to wait for the dispatcher thread on stop"
    )


class KafkaSettings(BaseSettings):
    """Kafka connection settings for the Kafka sink."""

    model_config = SettingsConfigDict(env_prefix="KAFKA_")

    bootstrap_servers: str = Field(
        default="localhost:9092", description="Kafka bootstrap servers"
    )
    security_protocol: str = Field(
        default="PLAINTEXT", description="Security protocol (PLAINTEXT or SSL)"
    )

    # SSL settings for mTLS authentication
    ssl_ca_file: Optional[str] = Field(default=None, description="Path to CA certificate file")
    ssl_cert_file: Optional[str] = Field(
        default=None, description="Path to client certificate file"
    )
    ssl_key_file: Optional[str] = Field(default=None, description="Path to client private key file")

    signals_topic: str = Field(default="clicksignals", description="Signals topic name")


class ValkeySettings(BaseSettings):
    """Valkey (Redis-compatible) connection settings for the session id store."""

    model_config = SettingsConfigDict(env_prefix="VALKEY_")

    host: str = Field(default="localhost", description="Valkey host")
    port: int = Field(default=6379, description="Valkey port")
    password: Optional[str] = Field(default=None, description="Valkey password")
    db: int = Field(default=0, description="Valkey database number")
    ssl: bool = Field(default=False, description="Use SSL/TLS connection")

    @property
    def url(self) -> str:
        """Build Valkey connection URL."""
        scheme = "rediss" if self.ssl else "redis"
        if self.password:
            return f"{scheme}://:{self.password}@{self.host}:{self.port}/{self.db}"
        return f"{scheme}://{self.host}:{self.port}/{self.db}"


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    # Nested settings
    session: SessionSettings = Field(default_factory=SessionSettings)
    frustration: FrustrationSettings = Field(default_factory=FrustrationSettings)
    performance: PerformanceSettings = Field(default_factory=PerformanceSettings)
    dispatcher: DispatcherSettings = Field(default_factory=DispatcherSettings)
    kafka: KafkaSettings = Field(default_factory=KafkaSettings)
    valkey: ValkeySettings = Field(default_factory=ValkeySettings)

    # General settings
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once and cached for subsequent calls.
    """
    return Settings()
