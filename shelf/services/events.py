"""Event hub and album change notifier.

The hub fans published topics out to subscribers (the websocket channel, log
listeners, tests). Album services only see the narrow ``Notifier`` interface,
which never raises: delivery problems are logged and dropped.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)

Subscriber = Callable[[str, dict], None]


class EntityEvent(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass(frozen=True)
class ActorContext:
    """Who performed a request, passed along with published events."""

    user_id: str
    role: str
    client: str = ""


class EventHub:
    """Thread-safe topic fan-out to registered subscribers."""

    def __init__(self):
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> None:
        with self._lock:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def publish(self, topic: str, data: dict) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        logger.debug("event: %s (%d subscribers)", topic, len(subscribers))
        for callback in subscribers:
            try:
                callback(topic, data)
            except Exception as e:
                logger.warning("event: subscriber failed on %s: %s", topic, e)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)


hub = EventHub()


class Notifier(Protocol):
    def publish(self, kind: EntityEvent, uid: str, context: ActorContext | None, entity: Any = None) -> None: ...

    def success(self, message: str) -> None: ...

    def client_config(self, data: dict) -> None: ...


class HubNotifier:
    """Notifier publishing to an EventHub; never lets a failure escape."""

    def __init__(self, event_hub: EventHub):
        self._hub = event_hub

    def publish(self, kind: EntityEvent, uid: str, context: ActorContext | None, entity: Any = None) -> None:
        data = {
            "entities": [entity if entity is not None else {"uid": uid}],
            "uid": uid,
            "actor": context.user_id if context else "",
        }
        self._send(f"albums.{kind.value}", data)

    def success(self, message: str) -> None:
        self._send("notify.success", {"message": message})

    def client_config(self, data: dict) -> None:
        self._send("config.updated", {"count": data})

    def _send(self, topic: str, data: dict) -> None:
        try:
            self._hub.publish(topic, data)
        except Exception as e:
            logger.error("event: failed publishing %s: %s", topic, e)
