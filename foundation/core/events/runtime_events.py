"""
Runtime Event Types.

Events the runtime itself publishes on the PriorityEventBus. All of them
derive from RuntimeEvent, so subscribing to RuntimeEvent observes every one.

Usage:
    from foundation.core.events import ViewShown

    event_bus.subscribe(ViewShown, lambda e: print(e.view_id))
"""
from dataclasses import dataclass
from typing import Any, Optional


class RuntimeEvent:
    """Base class for events published by the runtime."""
    pass


@dataclass
class ComponentConstructed(RuntimeEvent):
    """A bean finished construction and all post-construction hooks."""
    bean_id: str
    instance: Any


@dataclass
class ViewShown(RuntimeEvent):
    """An intercepted action displayed a view."""
    view_id: str
    in_new_window: bool
    source: Optional[Any] = None


@dataclass
class NestedViewAttached(RuntimeEvent):
    """An intercepted action attached a view below an anchor of another view."""
    view_id: str
    parent_view_id: Optional[str]
    anchor: str
