"""Thread-safe event bus implementation for pub/sub messaging."""

import logging
import threading
import uuid
from enum import Enum
from typing import Any

from mmdvm_monitor.events.models import EventHandler

logger = logging.getLogger(__name__)


def _topic(event_type: Any) -> str:
    """Normalise an EventKind member or plain string to its topic name."""
    return event_type.value if isinstance(event_type, Enum) else str(event_type)


class EventBus:
    """
    Thread-safe event bus with pub/sub pattern.

    Components publish payloads under an event type (a classified line kind,
    "log_line", "unhandled_log_line", "error" or "config_update") and
    subscribers registered for that type receive the payload.

    Thread Safety:
        - All public methods are thread-safe
        - Subscribers can be added/removed during event publishing
        - Payloads are delivered in subscription order (per type)

    Example:
        bus = EventBus()

        def handler(event: LogEvent) -> None:
            print(f"Received: {event.kind}")

        sub_id = bus.subscribe("host_running", handler)
        bus.publish("host_running", event)
        bus.unsubscribe(sub_id)
    """

    def __init__(self) -> None:
        """Initialize the event bus with empty subscriber registry."""
        # Map of event_type -> list of (subscription_id, handler) tuples
        self._subscribers: dict[str, list[tuple[str, EventHandler]]] = {}
        self._lock = threading.Lock()
        logger.debug("EventBus initialized")

    def subscribe(self, event_type: str, handler: EventHandler) -> str:
        """
        Subscribe to events of a specific type.

        Args:
            event_type: Type of events to receive (e.g., "dmr_net_logged_in")
            handler: Callable that processes the payload

        Returns:
            Subscription ID for unsubscribing
        """
        event_type = _topic(event_type)
        subscription_id = str(uuid.uuid4())

        with self._lock:
            self._subscribers.setdefault(event_type, []).append((subscription_id, handler))
            total = len(self._subscribers[event_type])

        logger.debug(
            "Subscribed to event type",
            extra={
                "event_type": event_type,
                "subscription_id": subscription_id,
                "total_subscribers": total,
            },
        )

        return subscription_id

    def unsubscribe(self, subscription_id: str) -> bool:
        """
        Remove a subscription.

        Args:
            subscription_id: ID returned from subscribe()

        Returns:
            True if unsubscribed, False if ID not found
        """
        with self._lock:
            for event_type, subscribers in self._subscribers.items():
                for i, (sub_id, _) in enumerate(subscribers):
                    if sub_id == subscription_id:
                        subscribers.pop(i)
                        logger.debug(
                            "Unsubscribed from event type",
                            extra={
                                "event_type": event_type,
                                "subscription_id": subscription_id,
                            },
                        )
                        return True

        logger.warning(
            "Subscription ID not found",
            extra={"subscription_id": subscription_id},
        )
        return False

    def publish(self, event_type: str, payload: Any) -> None:
        """
        Publish a payload to all subscribers synchronously.

        Handlers are called in subscription order on the publishing thread.
        If a handler raises an exception, it is logged but does not prevent
        other handlers from executing.

        Args:
            event_type: Type the payload is published under
            payload: Object handed to each handler
        """
        event_type = _topic(event_type)

        # Snapshot so handlers may (un)subscribe while we iterate
        with self._lock:
            subscribers = list(self._subscribers.get(event_type, ()))

        if not subscribers:
            return

        for subscription_id, handler in subscribers:
            try:
                handler(payload)
            except Exception as e:
                logger.error(
                    "Handler raised exception",
                    extra={
                        "event_type": event_type,
                        "subscription_id": subscription_id,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    },
                )

    def get_subscriber_count(self, event_type: str | None = None) -> int:
        """
        Get the number of subscribers.

        Args:
            event_type: Optional event type to count. If None, returns
                       total count across all event types.

        Returns:
            Number of subscribers
        """
        with self._lock:
            if event_type is not None:
                event_type = _topic(event_type)
                return len(self._subscribers.get(event_type, []))
            return sum(len(subs) for subs in self._subscribers.values())
