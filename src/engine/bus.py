import inspect
from contextvars import ContextVar
from typing import Awaitable, Callable, Dict, List, Optional, Union

from utils.logger import get_logger

_logger = get_logger(__name__)

CART_CHANGED = "cart-changed"
FAVORITES_CHANGED = "favorites-changed"
CATALOG_CHANGED = "catalog-changed"

MAX_PUBLISH_DEPTH = 16

# nesting depth of the publish running in the current task
_depth: ContextVar[int] = ContextVar("publish_depth", default=0)

Handler = Callable[[str], Union[None, Awaitable[None]]]


class Subscription:
    """
    Handle returned by ChangeBus.subscribe.
    Cancel it when the subscribing object is disposed.
    """

    def __init__(self, bus: "ChangeBus", topic: str, handler: Handler):
        self.bus = bus
        self.topic = topic
        self.handler = handler
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self.bus.unsubscribe(self)


class ChangeBus:
    """
    Process-wide publish/subscribe channel for cart, favorite and catalog changes.

    One instance is built by the composition root and handed to every consumer.
    publish() returns once every handler registered on the topic has run, in
    registration order. A handler may publish again; the nested publish is
    delivered inline before the outer delivery continues.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Subscription]] = {}

    def subscribe(self, topic: str, handler: Handler) -> Subscription:
        subscription = Subscription(self, topic, handler)
        self._subscribers.setdefault(topic, []).append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.active = False
        subscribers = self._subscribers.get(subscription.topic, [])
        if subscription in subscribers:
            subscribers.remove(subscription)

    def subscriber_count(self, topic: Optional[str] = None) -> int:
        if topic is not None:
            return len(self._subscribers.get(topic, []))
        return sum(len(subs) for subs in self._subscribers.values())

    async def publish(self, topic: str) -> None:
        depth = _depth.get()
        if depth >= MAX_PUBLISH_DEPTH:
            raise RuntimeError(f"publish of '{topic}' nested too deep")

        # later (un)subscriptions don't affect this delivery,
        # except that a cancelled subscription is skipped
        subscribers = list(self._subscribers.get(topic, []))
        _logger.debug(f"publish {topic} -> {len(subscribers)} subscriber(s)")

        token = _depth.set(depth + 1)
        try:
            for subscription in subscribers:
                if not subscription.active:
                    continue
                result = subscription.handler(topic)
                if inspect.isawaitable(result):
                    await result
        finally:
            _depth.reset(token)
