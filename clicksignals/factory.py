# ==============================================================================
# Adapter Factory
# ==============================================================================
"""
Factory functions for the configured sink and session store.

Selection comes from DISPATCHER_SINK (log, memory, kafka) and
DISPATCHER_STORE (memory, valkey), or from explicit names passed by the
CLI. Kafka and Valkey adapters are imported lazily.
"""

from clicksignals.base.session_store import SessionStore
from clicksignals.base.sink import SignalSink
from clicksignals.utils.config import Settings, get_settings


def get_sink(name: str | None = None, settings: Settings | None = None) -> SignalSink:
    """
    Get a sink instance.

    Args:
        name: "log", "memory" or "kafka" (default: DISPATCHER_SINK)
        settings: Settings to build from (default: get_settings())

    Returns:
        SignalSink: The sink instance

    Raises:
        ValueError: If an unknown sink is specified
    """
    settings = settings or get_settings()
    impl = name or settings.dispatcher.sink

    match impl:
        case "log":
            from clicksignals.infrastructure.sinks import LoggingSink

            return LoggingSink()
        case "memory":
            from clicksignals.infrastructure.sinks import RecordingSink

            return RecordingSink()
        case "kafka":
            from clicksignals.infrastructure.sinks.kafka import KafkaSink

            return KafkaSink(settings.kafka)
        case _:
            raise ValueError(f"Unknown sink: '{impl}'.\nValid options are: log, memory, kafka")


def get_session_store(name: str | None = None, settings: Settings | None = None) -> SessionStore:
    """
    Get a session store instance.

    Args:
        name: "memory" or "valkey" (default: DISPATCHER_STORE)
        settings: Settings to build from (default: get_settings())

    Raises:
        ValueError: If an unknown store is specified
    """
    settings = settings or get_settings()
    impl = name or settings.dispatcher.store

    match impl:
        case "memory":
            from clicksignals.infrastructure.session_store import MemorySessionStore

            return MemorySessionStore()
        case "valkey":
            from clicksignals.infrastructure.session_store.valkey import ValkeySessionStore

            return ValkeySessionStore(settings.valkey.url)
        case _:
            raise ValueError(f"Unknown session store: '{impl}'.\nValid options are: memory, valkey")
