from unittest.mock import patch

from django.test import TestCase, override_settings

from apps.common.events import EventPublisherFactory
from apps.common.events.base import EventPayload, publish_event
from apps.common.events.memory_publisher import MemoryEventPublisher
from apps.common.kafka.config import TASK_EVENTS_TOPIC, KafkaConnection


class EventPublishingTest(TestCase):
    """Test cases for the event publishing abstraction"""

    def setUp(self):
        EventPublisherFactory.reset_publisher()
        self.publisher = EventPublisherFactory.get_publisher()

    def tearDown(self):
        EventPublisherFactory.reset_publisher()

    def test_test_settings_use_memory_publisher(self):
        """Test the memory publisher is configured for tests"""
        self.assertIsInstance(self.publisher, MemoryEventPublisher)

    def test_payload_serialisation(self):
        """Test the payload dict shape"""
        payload = EventPayload("task_created", 1, data={"task_id": 5})
        data = payload.to_dict()

        self.assertEqual(data["event_type"], "task_created")
        self.assertEqual(data["user_id"], 1)
        self.assertEqual(data["data"], {"task_id": 5})
        self.assertIn("timestamp", data)

    def test_publish_event_stores_keyed_event(self):
        """Test publish_event hands the event to the configured publisher"""
        self.assertTrue(publish_event(TASK_EVENTS_TOPIC, "task_created", 1, {"task_id": 5}, key="5"))

        events = self.publisher.get_events(TASK_EVENTS_TOPIC)
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0]["key"], "5")

    def test_publish_event_never_raises(self):
        """Test a failing publisher is reported as False"""
        with patch.object(MemoryEventPublisher, "publish", side_effect=RuntimeError("broker down")):
            self.assertFalse(publish_event(TASK_EVENTS_TOPIC, "task_created", 1, {}))

    def test_clear_events(self):
        """Test clearing stored events"""
        publish_event(TASK_EVENTS_TOPIC, "task_created", 1, {})
        self.publisher.clear_events()
        self.assertEqual(self.publisher.get_events(TASK_EVENTS_TOPIC), [])

    def test_payload_carries_id_and_source(self):
        """Test each payload gets its own id and the configured source"""
        with override_settings(EVENT_SOURCE="tracker-test"):
            first = EventPayload("task_created", 1, metadata={"request_id": "abc"}).to_dict()
        second = EventPayload("task_created", 1).to_dict()

        self.assertNotEqual(first["event_id"], second["event_id"])
        self.assertEqual(first["metadata"], {"source": "tracker-test", "request_id": "abc"})

    @override_settings(EVENT_PUBLISHER_TYPE="apps.common.events.memory_publisher.MemoryEventPublisher")
    def test_publisher_from_dotted_path(self):
        """Test a publisher class can be named by its import path"""
        EventPublisherFactory.reset_publisher()
        self.assertIsInstance(EventPublisherFactory.get_publisher(), MemoryEventPublisher)

    @override_settings(EVENT_PUBLISHER_TYPE="carrier-pigeon")
    def test_unknown_publisher_type(self):
        """Test an unknown publisher type is a configuration error"""
        EventPublisherFactory.reset_publisher()
        with self.assertRaises(ValueError):
            EventPublisherFactory.get_publisher()


class KafkaConnectionTest(TestCase):
    """Test cases for the Kafka producer connection"""

    def tearDown(self):
        KafkaConnection._producer = None

    @override_settings(
        KAFKA_ENABLED=True,
        KAFKA_BOOTSTRAP_SERVERS="kafka-1:9092, kafka-2:9092",
        KAFKA_PRODUCER_ACKS=1,
        KAFKA_PRODUCER_RETRIES=7,
        KAFKA_RETRY_BACKOFF_MS=50,
        KAFKA_REQUEST_TIMEOUT_MS=1000,
    )
    def test_producer_built_from_settings(self):
        """Test the producer options come from settings"""
        with patch("apps.common.kafka.config.KafkaProducer") as producer_class:
            producer = KafkaConnection.get_producer()

        self.assertIs(producer, producer_class.return_value)
        options = producer_class.call_args.kwargs
        self.assertEqual(options["bootstrap_servers"], ["kafka-1:9092", "kafka-2:9092"])
        self.assertEqual(options["acks"], 1)
        self.assertEqual(options["retries"], 7)
        self.assertEqual(options["retry_backoff_ms"], 50)
        self.assertEqual(options["request_timeout_ms"], 1000)
        self.assertEqual(options["key_serializer"]("5"), b"5")

    @override_settings(KAFKA_ENABLED=False)
    def test_disabled_kafka_builds_no_producer(self):
        """Test no producer is created while Kafka is disabled"""
        with patch("apps.common.kafka.config.KafkaProducer") as producer_class:
            self.assertIsNone(KafkaConnection.get_producer())
        producer_class.assert_not_called()

    @override_settings(KAFKA_ENABLED=True)
    def test_unreachable_broker(self):
        """Test a failing connection leaves no producer behind"""
        with patch("apps.common.kafka.config.KafkaProducer", side_effect=RuntimeError("no brokers")):
            self.assertIsNone(KafkaConnection.get_producer())

    @override_settings(KAFKA_ENABLED=True)
    def test_close_producer(self):
        """Test closing drops the cached producer"""
        with patch("apps.common.kafka.config.KafkaProducer") as producer_class:
            KafkaConnection.get_producer()
            KafkaConnection.close_producer()

        producer_class.return_value.close.assert_called_once_with()
        self.assertIsNone(KafkaConnection._producer)
