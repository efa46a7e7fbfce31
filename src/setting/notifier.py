"""Push setting change events to connected clients."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List

from loguru import logger

from ..services.redis_cache import RedisCache

AUTHENTICATED = "authenticated"
PUBLIC = "public"

Listener = Callable[[dict], None]


def config_update_event(name: str, value: Any) -> dict:
    return {"event": "config_update", "data": {"name": name, "value": value}}


def subscription_payload(name: str, value: Any) -> dict:
    return {"setting": {"key": name, "value": value}}


class BroadcastNotifier(ABC):
    """Fan-out of events to an audience, plus per-setting subscriptions."""

    @abstractmethod
    def broadcast(self, message: dict, audience: str) -> None:
        """Send ``message`` to every live session of ``audience``."""

    @abstractmethod
    def trigger_subscription(self, name: str, value: Any) -> None:
        """Notify subscribers watching the setting ``name``."""


class RedisBroadcastNotifier(BroadcastNotifier):
    """Publishes events on Redis channels consumed by the websocket workers."""

    def __init__(
        self,
        cache: RedisCache,
        channel_prefix: str = "sessions",
        subscription_channel: str = "config_updates",
    ):
        self._cache = cache
        self.channel_prefix = channel_prefix
        self.subscription_channel = subscription_channel

    def broadcast(self, message: dict, audience: str) -> None:
        channel = f"{self.channel_prefix}:{audience}"
        receivers = self._cache.publish(channel, message)
        logger.debug("Broadcast {} on {} to {} receivers", message.get("event"), channel, receivers)

    def trigger_subscription(self, name: str, value: Any) -> None:
        self._cache.publish(f"{self.subscription_channel}:{name}", subscription_payload(name, value))


class LocalBroadcastNotifier(BroadcastNotifier):
    """In-process listeners, for single-process deployments and tests."""

    def __init__(self):
        self.listeners: Dict[str, List[Listener]] = {}
        self.subscriptions: Dict[str, List[Listener]] = {}

    def subscribe(self, audience: str, listener: Listener) -> None:
        self.listeners.setdefault(audience, []).append(listener)

    def unsubscribe(self, audience: str, listener: Listener) -> None:
        if audience in self.listeners:
            self.listeners[audience].remove(listener)
            if not self.listeners[audience]:
                del self.listeners[audience]

    def subscribe_setting(self, name: str, listener: Listener) -> None:
        self.subscriptions.setdefault(name, []).append(listener)

    def broadcast(self, message: dict, audience: str) -> None:
        # Iterate over a copy; a failing listener is dropped
        for listener in self.listeners.get(audience, [])[:]:
            try:
                listener(message)
            except Exception as e:
                logger.warning("Dropping {} listener after failure: {}", audience, e)
                self.unsubscribe(audience, listener)

    def trigger_subscription(self, name: str, value: Any) -> None:
        payload = subscription_payload(name, value)
        for listener in self.subscriptions.get(name, [])[:]:
            try:
                listener(payload)
            except Exception as e:
                logger.warning("Dropping subscription listener for {} after failure: {}", name, e)
                self.subscriptions[name].remove(listener)
