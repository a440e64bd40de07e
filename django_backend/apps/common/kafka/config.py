import json
import logging
from typing import Any, Dict

from django.conf import settings
from kafka import KafkaProducer

logger = logging.getLogger(__name__)


USER_ACTIVITIES_TOPIC = "user-activities"
TASK_EVENTS_TOPIC = "task-events"
WORKFLOW_EVENTS_TOPIC = "workflow-events"


def _encode_value(value) -> bytes:
    return json.dumps(value, default=str).encode("utf-8")


def _encode_key(key):
    return key.encode("utf-8") if key else None


def producer_options() -> Dict[str, Any]:
    """KafkaProducer keyword arguments built from the ``KAFKA_*`` settings."""
    servers = getattr(settings, "KAFKA_BOOTSTRAP_SERVERS", "localhost:9092")
    if isinstance(servers, str):
        servers = [s.strip() for s in servers.split(",") if s.strip()]
    return {
        "bootstrap_servers": servers,
        "client_id": getattr(settings, "KAFKA_CLIENT_ID", "task-tracker"),
        "value_serializer": _encode_value,
        "key_serializer": _encode_key,
        "acks": getattr(settings, "KAFKA_PRODUCER_ACKS", "all"),
        "retries": getattr(settings, "KAFKA_PRODUCER_RETRIES", 3),
        "retry_backoff_ms": getattr(settings, "KAFKA_RETRY_BACKOFF_MS", 300),
        "request_timeout_ms": getattr(settings, "KAFKA_REQUEST_TIMEOUT_MS", 30000),
    }


class KafkaConnection:
    """Lazily built, process-wide producer. ``None`` while Kafka is disabled or unreachable."""

    _producer = None

    @classmethod
    def get_producer(cls):
        if cls._producer is None and getattr(settings, "KAFKA_ENABLED", True):
            options = producer_options()
            try:
                cls._producer = KafkaProducer(**options)
            except Exception as e:
                logger.error(f"Failed to initialize Kafka producer for {options['bootstrap_servers']}: {e}")
            else:
                logger.info(f"Kafka producer connected to {', '.join(options['bootstrap_servers'])}")
        return cls._producer

    @classmethod
    def close_producer(cls):
        producer, cls._producer = cls._producer, None
        if producer is not None:
            producer.close()
