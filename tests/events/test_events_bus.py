"""Unit tests for EventBus implementation."""

import threading
import unittest

from mmdvm_monitor.events.bus import EventBus
from mmdvm_monitor.events.models import EventKind


class TestEventBusBasics(unittest.TestCase):
    """Test basic EventBus functionality."""

    def setUp(self) -> None:
        """Set up test fixtures."""
        self.bus = EventBus()

    def test_subscribe_returns_id(self) -> None:
        """Test that subscribe returns a unique subscription ID."""
        sub_id = self.bus.subscribe("host_running", lambda payload: None)

        self.assertIsInstance(sub_id, str)
        self.assertGreater(len(sub_id), 0)

    def test_subscribe_multiple_handlers(self) -> None:
        """Test subscribing multiple handlers to the same event type."""
        sub_id1 = self.bus.subscribe("host_running", lambda payload: None)
        sub_id2 = self.bus.subscribe("host_running", lambda payload: None)

        self.assertNotEqual(sub_id1, sub_id2)
        self.assertEqual(self.bus.get_subscriber_count("host_running"), 2)

    def test_unsubscribe_existing(self) -> None:
        """Test unsubscribing an existing subscription."""
        sub_id = self.bus.subscribe("host_running", lambda payload: None)

        self.assertTrue(self.bus.unsubscribe(sub_id))
        self.assertEqual(self.bus.get_subscriber_count("host_running"), 0)

    def test_unsubscribe_nonexistent(self) -> None:
        """Test unsubscribing a non-existent subscription."""
        self.assertFalse(self.bus.unsubscribe("nonexistent-id"))

    def test_total_subscriber_count(self) -> None:
        """Test counting across event types."""
        self.bus.subscribe("host_running", lambda payload: None)
        self.bus.subscribe("error", lambda payload: None)

        self.assertEqual(self.bus.get_subscriber_count(), 2)


class TestEventBusPublishing(unittest.TestCase):
    """Test payload delivery."""

    def setUp(self) -> None:
        """Set up test fixtures."""
        self.bus = EventBus()

    def test_publish_delivers_payload(self) -> None:
        """Test handlers receive the published payload."""
        received = []
        self.bus.subscribe("error", received.append)

        self.bus.publish("error", "boom")

        self.assertEqual(received, ["boom"])

    def test_publish_only_to_matching_type(self) -> None:
        """Test handlers for other types are not called."""
        received = []
        self.bus.subscribe("host_running", received.append)

        self.bus.publish("host_starting", "payload")

        self.assertEqual(received, [])

    def test_publish_without_subscribers(self) -> None:
        """Test publishing with no subscribers is harmless."""
        self.bus.publish("nobody_listens", object())

    def test_delivery_in_subscription_order(self) -> None:
        """Test handlers run in the order they subscribed."""
        order = []
        self.bus.subscribe("log_line", lambda payload: order.append("first"))
        self.bus.subscribe("log_line", lambda payload: order.append("second"))

        self.bus.publish("log_line", None)

        self.assertEqual(order, ["first", "second"])

    def test_event_kind_and_string_are_the_same_topic(self) -> None:
        """Test EventKind members and their values address the same subscribers."""
        received = []
        self.bus.subscribe(EventKind.HOST_RUNNING, received.append)

        self.bus.publish("host_running", 1)
        self.bus.publish(EventKind.HOST_RUNNING, 2)

        self.assertEqual(received, [1, 2])
        self.assertEqual(self.bus.get_subscriber_count("host_running"), 1)

    def test_handler_exception_does_not_stop_others(self) -> None:
        """Test a failing handler is isolated."""
        received = []

        def failing(payload: object) -> None:
            raise RuntimeError("handler failed")

        self.bus.subscribe("log_line", failing)
        self.bus.subscribe("log_line", received.append)

        with self.assertLogs("mmdvm_monitor.events.bus", level="ERROR"):
            self.bus.publish("log_line", "payload")

        self.assertEqual(received, ["payload"])

    def test_unsubscribe_during_publish(self) -> None:
        """Test a handler may unsubscribe itself while being called."""
        calls = []
        sub_ids = {}

        def once(payload: object) -> None:
            calls.append(payload)
            self.bus.unsubscribe(sub_ids["once"])

        sub_ids["once"] = self.bus.subscribe("log_line", once)

        self.bus.publish("log_line", 1)
        self.bus.publish("log_line", 2)

        self.assertEqual(calls, [1])


class TestEventBusThreadSafety(unittest.TestCase):
    """Test concurrent use."""

    def test_concurrent_subscribe(self) -> None:
        """Test subscriptions from many threads are all registered."""
        bus = EventBus()

        def subscribe_many() -> None:
            for _ in range(50):
                bus.subscribe("log_line", lambda payload: None)

        threads = [threading.Thread(target=subscribe_many) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(bus.get_subscriber_count("log_line"), 400)


if __name__ == "__main__":
    unittest.main()
