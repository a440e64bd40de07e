"""
Domain event publishing.

Services schedule events with ``transaction.on_commit`` and hand them to
``publish_event``; which transport carries them is chosen by
``EVENT_PUBLISHER_TYPE`` (``kafka``, ``memory`` or a dotted class path).
"""
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)

PUBLISHER_CLASSES = {
    "kafka": "apps.common.events.kafka_publisher.KafkaEventPublisher",
    "memory": "apps.common.events.memory_publisher.MemoryEventPublisher",
}


class EventPayload:
    """One event as it goes on the wire. ``event_id`` lets consumers drop redeliveries."""

    def __init__(self, event_type: str, user_id: Optional[int], timestamp: datetime = None,
                 data: Dict[str, Any] = None, metadata: Dict[str, Any] = None):
        self.event_id = str(uuid.uuid4())
        self.event_type = event_type
        self.user_id = user_id
        self.timestamp = timestamp or datetime.now(timezone.utc)
        self.data = data or {}
        self.metadata = {"source": getattr(settings, "EVENT_SOURCE", "task-tracker"), **(metadata or {})}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'event_id': self.event_id,
            'event_type': self.event_type,
            'user_id': self.user_id,
            'timestamp': self.timestamp.isoformat(),
            'data': self.data,
            'metadata': self.metadata,
        }


class EventPublisher(ABC):
    @abstractmethod
    def publish(self, topic: str, event: EventPayload, key: str = None) -> bool:
        """Send ``event`` to ``topic``; True when the transport accepted it."""

    @abstractmethod
    def close(self):
        """Release the transport connection."""


class EventPublisherFactory:
    """Holds the process-wide publisher built from ``EVENT_PUBLISHER_TYPE``."""

    _publisher = None

    @classmethod
    def get_publisher(cls) -> EventPublisher:
        if cls._publisher is None:
            publisher_type = getattr(settings, 'EVENT_PUBLISHER_TYPE', 'kafka')
            path = PUBLISHER_CLASSES.get(publisher_type, publisher_type)
            try:
                publisher_class = import_string(path)
            except ImportError as e:
                raise ValueError(f"Unknown event publisher type: {publisher_type}") from e
            cls._publisher = publisher_class()
            logger.info(f"Event publisher: {publisher_class.__name__}")
        return cls._publisher

    @classmethod
    def reset_publisher(cls):
        """Drop the current publisher so the next call rebuilds it from settings."""
        publisher, cls._publisher = cls._publisher, None
        if publisher is not None:
            publisher.close()


def publish_event(topic: str, event_type: str, user_id: Optional[int], data: Dict[str, Any],
                  key: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None) -> bool:
    """
    Publish one domain event through the configured publisher.

    Never raises: the change it reports has already been committed.
    """
    try:
        payload = EventPayload(event_type=event_type, user_id=user_id, data=data, metadata=metadata)
        success = EventPublisherFactory.get_publisher().publish(topic=topic, event=payload, key=key)
    except Exception:
        logger.exception(f"Error publishing event {event_type}")
        return False

    if success:
        logger.info(f"Event published successfully: {event_type}")
    else:
        logger.error(f"Failed to publish event: {event_type}")
    return success
