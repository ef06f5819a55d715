"""
PriorityEventBus - Type-based Event System

Provides decoupled publish/subscribe communication between controllers.
Subscribers register for an event class; publishing an event reaches the
subscribers of its class and of every base class or ABC it derives from,
ordered by priority.
"""
import itertools
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
from loguru import logger


def rethrow(error: Exception) -> None:
    """Default error handler: re-raise to the publisher."""
    raise error


@dataclass(frozen=True)
class Subscription:
    """A registered callback. Lower priority values are called first."""
    event_type: type
    callback: Callable[[Any], None]
    priority: int
    sequence: int = field(compare=False)


class PriorityEventBus:
    """
    Priority-aware, type-based event bus.

    Usage:
        # Subscribe
        event_bus.subscribe(CartChanged, refresh_total, priority=0)
        event_bus.subscribe(CartChanged, save_cart)

        # Publish (refresh_total runs before save_cart)
        event_bus.publish(CartChanged(items=3))

    Dispatch is synchronous on the publishing thread. If a subscriber raises,
    the remaining subscribers are skipped and the error is handed to
    ``on_error``; the failing subscriber stays registered.
    """

    def __init__(self, default_priority: int = 1):
        self._lock = threading.RLock()
        self._subscribers: Dict[type, List[Subscription]] = {}
        self._sequence = itertools.count()
        self.default_priority = default_priority

    def subscribe(
        self,
        event_type: type,
        callback: Callable[[Any], None],
        priority: Optional[int] = None,
    ) -> Subscription:
        """
        Subscribe to an event type.

        Args:
            event_type: Event class (base classes and ABCs are allowed)
            callback: Called with the event instance
            priority: Lower values are called first; ties keep registration order

        Returns:
            The Subscription, usable with unsubscribe()
        """
        if not isinstance(event_type, type):
            raise TypeError(f"event_type must be a class, got {event_type!r}")
        if priority is None:
            priority = self.default_priority

        with self._lock:
            subscription = Subscription(
                event_type=event_type,
                callback=callback,
                priority=priority,
                sequence=next(self._sequence),
            )
            self._subscribers.setdefault(event_type, []).append(subscription)

        logger.debug(
            f"Subscribed to {event_type.__name__} (priority {priority}): "
            f"{getattr(callback, '__qualname__', callback)}"
        )
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """
        Remove a subscription. Unknown subscriptions are ignored.

        Args:
            subscription: Value returned by subscribe()
        """
        with self._lock:
            subscribers = self._subscribers.get(subscription.event_type)
            if not subscribers:
                return
            self._subscribers[subscription.event_type] = [
                s for s in subscribers if s.sequence != subscription.sequence
            ]
            if not self._subscribers[subscription.event_type]:
                del self._subscribers[subscription.event_type]

    def lookup(self, event_type: type) -> List[Subscription]:
        """
        All subscriptions that receive events of ``event_type``, in call order.

        Args:
            event_type: Concrete class of a published event

        Returns:
            Subscriptions sorted by (priority, registration order)
        """
        with self._lock:
            matched = []
            for klass in self._type_hierarchy(event_type):
                matched.extend(self._subscribers.get(klass, ()))
        return sorted(matched, key=lambda s: (s.priority, s.sequence))

    def publish(self, event: Any, on_error: Callable[[Exception], None] = rethrow) -> None:
        """
        Publish an event to all subscribers.

        Args:
            event: Event instance
            on_error: Receives the first subscriber exception; dispatch
                stops at that subscriber. Defaults to re-raising.
        """
        subscriptions = self.lookup(type(event))
        try:
            for subscription in subscriptions:
                subscription.callback(event)
        except Exception as e:
            logger.error(f"Error in subscriber for {type(event).__name__}: {e}")
            on_error(e)

    def clear(self) -> None:
        """Remove every subscription."""
        with self._lock:
            self._subscribers.clear()

    def _type_hierarchy(self, event_type: type) -> List[type]:
        """
        The event class, its bases, and every registered ABC it is a virtual subclass of.
        """
        hierarchy = list(event_type.__mro__)
        for registered in self._subscribers:
            if registered not in hierarchy and issubclass(event_type, registered):
                hierarchy.append(registered)
        return hierarchy
