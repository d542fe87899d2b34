"""Message transport interface.

The service only needs fire-and-forget publishing to a named queue; broker
connections, acknowledgements and redelivery belong to the transport.
"""

import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Any, Dict, List, Tuple

from sos_matching.logging import get_logger

logger = get_logger(__name__, component="event_bus")


class EventBus(ABC):
    """A transport that can publish a JSON message to a named queue."""

    @abstractmethod
    def publish(self, queue: str, message: Dict[str, Any]) -> None:
        """Hand a message to the transport.

        Raises:
            EventPublishError: If the message could not be handed off
        """


class InMemoryEventBus(EventBus):
    """Thread-safe bus that records messages per queue.

    Nothing drains it, so it is meant for tests and one-shot runs.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._queues: Dict[str, List[Dict[str, Any]]] = defaultdict(list)

    def publish(self, queue: str, message: Dict[str, Any]) -> None:
        with self._lock:
            self._queues[queue].append(message)
        logger.debug(
            f"Queued {message.get('event')} on {queue}",
            extra={"event": "event_bus.message.queued", "queue": queue},
        )

    def messages(self, queue: str) -> List[Dict[str, Any]]:
        """Copy of the messages published to queue, oldest first."""
        with self._lock:
            return list(self._queues.get(queue, ()))

    def all_messages(self) -> List[Tuple[str, Dict[str, Any]]]:
        with self._lock:
            return [(queue, msg) for queue, msgs in self._queues.items() for msg in msgs]

    def clear(self) -> None:
        with self._lock:
            self._queues.clear()


class LoggingEventBus(EventBus):
    """Bus for running without a broker: logs each message and keeps nothing."""

    def publish(self, queue: str, message: Dict[str, Any]) -> None:
        logger.info(
            f"No broker configured; dropped {message.get('event')} for {queue}",
            extra={
                "event": "event_bus.message.discarded",
                "queue": queue,
                "event_name": message.get("event"),
                "payload": message.get("data"),
            },
        )
