import logging
from apps.common.kafka.config import KafkaConnection
from .base import EventPublisher, EventPayload

logger = logging.getLogger(__name__)


class KafkaEventPublisher(EventPublisher):
    """Kafka implementation of EventPublisher"""

    def publish(self, topic: str, event: EventPayload, key: str = None) -> bool:
        """
        Publish an event to Kafka topic

        Args:
            topic: Kafka topic name
            event: Event payload
            key: Partition key (optional)

        Returns:
            bool: True if published successfully
        """
        producer = KafkaConnection.get_producer()
        if producer is None:
            logger.error(f"No Kafka producer available, dropping {event.event_type} for topic {topic}")
            return False

        try:
            producer.send(topic=topic, value=event.to_dict(), key=key)
            producer.flush()

            logger.info(f"Event published to topic {topic}: {event.event_type}")
            return True

        except Exception as e:
            logger.error(f"Failed to publish event to topic {topic}: {str(e)}")
            return False

    def close(self):
        """Close Kafka producer connection"""
        try:
            KafkaConnection.close_producer()
        except Exception as e:
            logger.error(f"Error closing Kafka connection: {str(e)}")
