# ==============================================================================
# Kafka Sink - confluent-kafka Producer
# ==============================================================================
"""
Sink that publishes tracking API envelopes to a Kafka topic.

Each message value is the JSON envelope ``{"kind": ..., "payload": {...}}``
keyed by session id, so all signals of one session land on the same
partition in emission order.

produce() only enqueues into librdkafka's local buffer. A full buffer
(BufferError) is retried briefly; anything else is left to the dispatcher,
which logs and counts the failure. The beacon path never retries and never
blocks: it reports False when the payload could not be queued.
"""

import json
import logging
from pathlib import Path
from typing import Any

from confluent_kafka import KafkaException, Producer

from clicksignals.base.sink import Beacon, SignalSink
from clicksignals.core.envelope import (
    envelope,
    event_payload,
    page_view_payload,
    session_payload,
)
from clicksignals.core.models import UtmParams
from clicksignals.utils.config import KafkaSettings
from clicksignals.utils.retry import retry_light

logger = logging.getLogger(__name__)


def build_producer_config(settings: KafkaSettings) -> dict:
    """
    Build confluent-kafka producer configuration from settings.

    confluent-kafka uses dot-notation keys ('bootstrap.servers').

    Args:
        settings: KafkaSettings instance

    Returns:
        Dict with confluent-kafka producer configuration
    """
    config = {
        "bootstrap.servers": settings.bootstrap_servers,
        # Signals are small and sparse; keep latency low
        "linger.ms": 5,
        "queue.buffering.max.messages": 10000,
        "acks": "all",
        "retries": 5,
        "retry.backoff.ms": 100,
        "compression.type": "lz4",
    }

    if settings.security_protocol == "SSL":
        config["security.protocol"] = "SSL"
        locations = {
            "ssl.ca.location": settings.ssl_ca_file,
            "ssl.certificate.location": settings.ssl_cert_file,
            "ssl.key.location": settings.ssl_key_file,
        }
        for key, filename in locations.items():
            if filename and Path(filename).exists():
                config[key] = str(Path(filename))
            elif filename:
                logger.warning("SSL file not found, ignoring %s: %s", key, filename)
    else:
        config["security.protocol"] = "PLAINTEXT"

    return config


class KafkaSink(SignalSink, Beacon):
    """Publishes signals to Kafka as JSON envelopes."""

    def __init__(self, settings: KafkaSettings | None = None, producer: Any = None):
        """
        Initialize the Kafka sink.

        Args:
            settings: Kafka settings (defaults from environment)
            producer: Pre-built producer exposing produce/poll/flush. Created
                from settings when omitted.
        """
        self.settings = settings or KafkaSettings()
        self._topic = self.settings.signals_topic
        self._producer = producer or Producer(build_producer_config(self.settings))
        self.delivery_errors = 0

    @property
    def topic(self) -> str:
        return self._topic

    def _on_delivery(self, err, msg) -> None:
        if err is not None:
            self.delivery_errors += 1
            if self.delivery_errors <= 10:
                logger.error("Signal delivery failed: %s", err)

    def _encode(self, kind: str, payload: dict[str, Any]) -> tuple[str, str]:
        return str(payload.get("sessionId", "")), json.dumps(envelope(kind, payload))

    def _produce_once(self, key: str, value: str) -> None:
        self._producer.produce(self._topic, key=key, value=value, callback=self._on_delivery)
        # Serve delivery callbacks without blocking
        self._producer.poll(0)

    @retry_light((BufferError,), logger)
    def _produce(self, kind: str, payload: dict[str, Any]) -> None:
        key, value = self._encode(kind, payload)
        self._produce_once(key, value)

    # ------------------------------------------------------------------
    # SignalSink
    # ------------------------------------------------------------------

    def emit_session_update(self, session_id: str, fields: dict[str, Any]) -> None:
        self._produce("session", session_payload(session_id, fields))

    def emit_page_view(
        self,
        session_id: str,
        page: str,
        title: str,
        started_at: int,
        dwell_seconds: int | None,
        referrer: str,
        utm: UtmParams,
        user_id: str | None = None,
    ) -> None:
        self._produce(
            "pageview",
            page_view_payload(
                session_id, page, title, started_at, dwell_seconds, referrer, utm, user_id
            ),
        )

    def emit_event(
        self,
        session_id: str,
        event_type: str,
        event_data: dict[str, Any],
        timestamp: int,
        page: str,
    ) -> None:
        self._produce("event", event_payload(session_id, event_type, event_data, timestamp, page))

    def flush(self, timeout: float = 5.0) -> None:
        remaining = self._producer.flush(timeout)
        if remaining:
            logger.warning("%d signals still queued after %.1fs flush", remaining, timeout)
        if self.delivery_errors:
            logger.warning("Total signal delivery errors: %d", self.delivery_errors)

    def close(self) -> None:
        self.flush()

    # ------------------------------------------------------------------
    # Beacon
    # ------------------------------------------------------------------

    def send(self, kind: str, payload: dict[str, Any]) -> bool:
        key, value = self._encode(kind, payload)
        try:
            self._produce_once(key, value)
        except (BufferError, KafkaException) as e:
            logger.debug("Beacon send refused: %s", e)
            return False
        return True
