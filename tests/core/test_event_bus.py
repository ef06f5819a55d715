"""
PriorityEventBus - Unit Tests

Covers:
- Priority ordering independent of subscription order
- Dispatch to subscribers of base classes and ABCs
- Error routing to the caller-supplied handler
- Unsubscribe and clear
"""
import abc
import pytest
from unittest.mock import MagicMock

from foundation.core.events import PriorityEventBus, rethrow


class BaseEvent:
    pass


class CartChanged(BaseEvent):
    def __init__(self, items=0):
        self.items = items


class Auditable(abc.ABC):
    pass


class Checkout:
    pass


Auditable.register(Checkout)


class TestEventBusOrdering:
    """Subscribers are called in priority order."""

    def test_lower_priority_called_first(self, event_bus):
        """Test priority wins over subscription order."""
        calls = []
        event_bus.subscribe(CartChanged, lambda e: calls.append("late"), priority=5)
        event_bus.subscribe(CartChanged, lambda e: calls.append("early"), priority=0)
        event_bus.subscribe(CartChanged, lambda e: calls.append("middle"), priority=2)

        event_bus.publish(CartChanged())

        assert calls == ["early", "middle", "late"]

    def test_equal_priority_keeps_registration_order(self, event_bus):
        calls = []
        for name in ("a", "b", "c"):
            event_bus.subscribe(CartChanged, lambda e, name=name: calls.append(name), priority=1)

        event_bus.publish(CartChanged())

        assert calls == ["a", "b", "c"]

    def test_default_priority_used(self):
        bus = PriorityEventBus(default_priority=3)
        subscription = bus.subscribe(CartChanged, MagicMock())
        assert subscription.priority == 3

    def test_ancestor_subscribers_merged_by_priority(self, event_bus):
        """Test base-class subscribers interleave with exact-type subscribers by priority."""
        calls = []
        event_bus.subscribe(CartChanged, lambda e: calls.append("exact"), priority=2)
        event_bus.subscribe(BaseEvent, lambda e: calls.append("base"), priority=1)
        event_bus.subscribe(object, lambda e: calls.append("object"), priority=3)

        event_bus.publish(CartChanged())

        assert calls == ["base", "exact", "object"]

    def test_base_event_does_not_reach_subclass_subscribers(self, event_bus):
        handler = MagicMock()
        event_bus.subscribe(CartChanged, handler)

        event_bus.publish(BaseEvent())

        handler.assert_not_called()

    def test_abc_subscribers_receive_registered_types(self, event_bus):
        handler = MagicMock()
        event_bus.subscribe(Auditable, handler)

        event = Checkout()
        event_bus.publish(event)

        handler.assert_called_once_with(event)

    def test_no_subscribers_is_a_noop(self, event_bus):
        event_bus.publish(CartChanged())
        assert event_bus.lookup(CartChanged) == []


class TestEventBusErrors:
    """Subscriber exceptions go to the error handler."""

    def test_default_handler_rethrows(self, event_bus):
        event_bus.subscribe(CartChanged, MagicMock(side_effect=ValueError("boom")))

        with pytest.raises(ValueError, match="boom"):
            event_bus.publish(CartChanged())

    def test_rethrow_raises_given_error(self):
        error = KeyError("x")
        with pytest.raises(KeyError):
            rethrow(error)

    def test_error_stops_dispatch_and_reaches_handler(self, event_bus):
        """Test later subscribers are skipped after a failure."""
        error = RuntimeError("subscriber failed")
        later = MagicMock()
        event_bus.subscribe(CartChanged, MagicMock(side_effect=error), priority=0)
        event_bus.subscribe(CartChanged, later, priority=1)
        on_error = MagicMock()

        event_bus.publish(CartChanged(), on_error=on_error)

        on_error.assert_called_once_with(error)
        later.assert_not_called()

    def test_failing_subscriber_stays_registered(self, event_bus):
        failing = MagicMock(side_effect=RuntimeError("again"))
        event_bus.subscribe(CartChanged, failing)
        on_error = MagicMock()

        event_bus.publish(CartChanged(), on_error=on_error)
        event_bus.publish(CartChanged(), on_error=on_error)

        assert failing.call_count == 2
        assert on_error.call_count == 2


class TestEventBusSubscriptions:
    """Subscription management."""

    def test_unsubscribe(self, event_bus):
        kept = MagicMock()
        removed = MagicMock()
        event_bus.subscribe(CartChanged, kept)
        subscription = event_bus.subscribe(CartChanged, removed)

        event_bus.unsubscribe(subscription)
        event_bus.publish(CartChanged())

        kept.assert_called_once()
        removed.assert_not_called()

    def test_unsubscribe_twice_is_ignored(self, event_bus):
        subscription = event_bus.subscribe(CartChanged, MagicMock())
        event_bus.unsubscribe(subscription)
        event_bus.unsubscribe(subscription)
        assert event_bus.lookup(CartChanged) == []

    def test_same_callback_subscribed_twice_is_called_twice(self, event_bus):
        handler = MagicMock()
        event_bus.subscribe(CartChanged, handler)
        event_bus.subscribe(CartChanged, handler)

        event_bus.publish(CartChanged())

        assert handler.call_count == 2

    def test_subscribe_requires_class(self, event_bus):
        with pytest.raises(TypeError):
            event_bus.subscribe("cart.changed", MagicMock())

    def test_clear(self, event_bus):
        handler = MagicMock()
        event_bus.subscribe(CartChanged, handler)

        event_bus.clear()
        event_bus.publish(CartChanged())

        handler.assert_not_called()
