"""In-process publish/subscribe hub for live updates.

Every `subscribe` returns a `Subscription` handle owned by the caller.
Handles are context managers and `close()` is idempotent, so a consumer
can guarantee release on every exit path:

    with hub.subscribe(f'messages/{room_id}', on_message):
        ...

Topics used by the chat services:
- messages/<room_id>        new or updated messages in a room
- user_chat_rooms/<user>    inbox summary changes for a user
- typing/<user>             typing flag changes of a user
"""
import logging
import threading
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Callback = Callable[[str, Any], None]


def messages_topic(room_id: str) -> str:
    return f'messages/{room_id}'


def user_chat_rooms_topic(user_key: str) -> str:
    return f'user_chat_rooms/{user_key}'


def typing_topic(user_key: str) -> str:
    return f'typing/{user_key}'


class Subscription:
    """Handle for one registered callback."""

    def __init__(self, hub: 'SubscriptionHub', topic: str, callback: Callback):
        self.hub = hub
        self.topic = topic
        self.callback = callback
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self):
        if self._closed:
            return
        self._closed = True
        self.hub._remove(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class SubscriptionGroup:
    """Owns several subscriptions and releases them together."""

    def __init__(self):
        self._subscriptions: List[Subscription] = []
        self._lock = threading.Lock()

    def add(self, subscription: Subscription) -> Subscription:
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def close(self):
        with self._lock:
            subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.close()

    def __len__(self):
        return len(self._subscriptions)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class SubscriptionHub:
    """Topic -> callbacks registry with synchronous delivery."""

    def __init__(self):
        self._topics: Dict[str, List[Subscription]] = {}
        self._lock = threading.RLock()

    def subscribe(self, topic: str, callback: Callback) -> Subscription:
        subscription = Subscription(self, topic, callback)
        with self._lock:
            self._topics.setdefault(topic, []).append(subscription)
        logger.debug(f"Subscribed to {topic}")
        return subscription

    def _remove(self, subscription: Subscription):
        with self._lock:
            subscribers = self._topics.get(subscription.topic)
            if not subscribers:
                return
            if subscription in subscribers:
                subscribers.remove(subscription)
            if not subscribers:
                del self._topics[subscription.topic]
        logger.debug(f"Unsubscribed from {subscription.topic}")

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._topics.get(topic, []))

    def publish(self, topic: str, payload: Any) -> int:
        """Deliver `payload` to current subscribers of `topic`.

        A failing callback is logged and skipped; it never reaches the
        publisher or the other subscribers. Returns the number delivered.
        """
        with self._lock:
            subscribers = list(self._topics.get(topic, []))
        delivered = 0
        for subscription in subscribers:
            if subscription.closed:
                continue
            try:
                subscription.callback(topic, payload)
                delivered += 1
            except Exception:
                logger.exception(f"Subscriber callback failed for {topic}")
        return delivered


_hub = None


def get_subscription_hub() -> SubscriptionHub:
    """Process-wide hub shared by services and the websocket bridge."""
    global _hub
    if _hub is None:
        _hub = SubscriptionHub()
    return _hub


def reset_subscription_hub():
    global _hub
    _hub = None
