"""
Event System - In-process Pub/Sub Messaging.

Provides:
- Signal: Simple observer pattern for sync notifications (e.g., config changes)
- PriorityEventBus: Type-based pub/sub between controllers, ordered by priority
- RuntimeEvent and subclasses: Events published by the runtime itself

Usage:
    from foundation.core.events import PriorityEventBus

    bus = PriorityEventBus()
    bus.subscribe(CartChanged, on_cart_changed, priority=0)
    bus.publish(CartChanged(items=3))
"""
from .observer import Signal
from .bus import PriorityEventBus, Subscription, rethrow
from .runtime_events import RuntimeEvent, ComponentConstructed, ViewShown, NestedViewAttached


__all__ = [
    "Signal",
    "PriorityEventBus",
    "Subscription",
    "rethrow",
    "RuntimeEvent",
    "ComponentConstructed",
    "ViewShown",
    "NestedViewAttached",
]
