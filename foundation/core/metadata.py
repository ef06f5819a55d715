"""
Component Metadata Model.

Descriptors extracted from the markers that the decorators in
``foundation.core.decorators`` attach to controller classes and methods.

The runtime never inspects decorator internals directly; it asks this module
for a ComponentDescriptor (class level) or for the action, subscriber,
post-construct and injection points of a type.
"""
import inspect
import weakref
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Union, get_type_hints

from loguru import logger

# Attribute names used by the markers
CONTROLLER_ATTR = "__foundation_controller__"
ACTION_ATTR = "_navigation_directive"
SUBSCRIBE_ATTR = "_subscribed_event"
POST_CONSTRUCT_ATTR = "_post_construct"
ON_ACTION_ATTR = "_control_action"
VALUE_CHANGED_ATTR = "_control_value_change"

# Name of the back-reference slot installed by enhancement
VIEW_SLOT = "_view"


class Region:
    """Named regions of border-style anchors."""
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"

    ALL = (TOP, BOTTOM, LEFT, RIGHT, CENTER)


@dataclass(frozen=True)
class NestedViewSpec:
    """
    Where to attach another view inside a view's content tree.

    Args:
        view_id: Id of the view whose content is attached
        anchor: Object name of the node to attach under
        index: Position among the anchor's children (-1 appends)
        column: Column for grid anchors (-1 when unused)
        row: Row for grid anchors (-1 when unused)
        region: One of ``Region.ALL`` for border-style anchors
    """
    view_id: str
    anchor: str
    index: int = -1
    column: int = -1
    row: int = -1
    region: Optional[str] = None

    def __post_init__(self):
        if not self.view_id:
            raise ValueError("NestedViewSpec requires a view_id")
        if not self.anchor:
            raise ValueError(f"NestedViewSpec for '{self.view_id}' requires an anchor")
        if self.region is not None and self.region not in Region.ALL:
            raise ValueError(f"Unknown region '{self.region}', expected one of {Region.ALL}")


@dataclass(frozen=True)
class ShowView:
    """Display a single view, in the invoker's window or in a new one."""
    view_id: str
    in_new_window: bool = False


@dataclass(frozen=True)
class AttachNestedViews:
    """Graft one or more views into the invoker's own view."""
    specs: Tuple[NestedViewSpec, ...]


NavigationDirective = Union[ShowView, AttachNestedViews]


@dataclass(frozen=True)
class ControlAction:
    """Run a method when the named control is activated."""
    control_id: str


@dataclass(frozen=True)
class ValueChangeBinding:
    """
    Run a method when the value of the named control changes.

    Args:
        control_id: Object name of the control in the controller's view
        timeout_ms: Quiet period before delivery, 0 delivers every change
        listener_active: Name of a boolean controller attribute; changes are
            dropped while it is false
        order: Wiring order among bindings of the same control
    """
    control_id: str
    timeout_ms: int = 0
    listener_active: Optional[str] = None
    order: int = 1


@dataclass(frozen=True)
class ActionSpec:
    """An interceptable method and the navigation it triggers on success."""
    method_name: str
    directive: NavigationDirective


@dataclass(frozen=True)
class ControllerMarker:
    """Raw values given to ``@controller``."""
    view_id: str
    view_resource: str = ""
    id: Optional[str] = None
    singleton: bool = True
    lazy: bool = True
    title: str = ""
    width: int = 200
    height: int = 100
    nested_views: Tuple[NestedViewSpec, ...] = ()


@dataclass(frozen=True)
class ComponentDescriptor:
    """Everything the container needs to know about a controller type."""
    id: str
    component_type: type
    singleton: bool
    lazy: bool
    view_id: str
    view_resource: str
    title: str = ""
    width: int = 200
    height: int = 100
    nested_views: Tuple[NestedViewSpec, ...] = ()
    actions: Tuple[ActionSpec, ...] = ()

    def action(self, method_name: str) -> Optional[ActionSpec]:
        for spec in self.actions:
            if spec.method_name == method_name:
                return spec
        return None


class Inject:
    """
    Class-level placeholder resolved by the container after construction.

    Created via ``foundation.core.decorators.inject``.
    """

    def __init__(self, bean_id: Optional[str] = None, bean_type: Optional[type] = None):
        self.bean_id = bean_id
        self.bean_type = bean_type
        self.name: str = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __repr__(self):
        return f"Inject(name={self.name!r}, bean_id={self.bean_id!r})"


@dataclass
class InjectionPoint:
    attribute: str
    bean_id: str
    bean_type: Optional[type]


# Every class that has been marked as a controller
_marked_types: "weakref.WeakSet[type]" = weakref.WeakSet()
_marked_listeners: List[Callable[[type], None]] = []


def mark_controller(cls: type, marker: ControllerMarker) -> type:
    """Attach a controller marker to ``cls`` and announce it to listeners."""
    setattr(cls, CONTROLLER_ATTR, marker)
    _marked_types.add(cls)
    for listener in list(_marked_listeners):
        listener(cls)
    return cls


def marked_types() -> List[type]:
    return list(_marked_types)


def add_marked_listener(listener: Callable[[type], None]) -> None:
    if listener not in _marked_listeners:
        _marked_listeners.append(listener)


def remove_marked_listener(listener: Callable[[type], None]) -> None:
    if listener in _marked_listeners:
        _marked_listeners.remove(listener)


def find_marker(cls: type) -> Optional[ControllerMarker]:
    """Return the controller marker of ``cls`` or of its nearest marked base."""
    return getattr(cls, CONTROLLER_ATTR, None) if isinstance(cls, type) else None


def is_controller(cls: Any) -> bool:
    return find_marker(cls) is not None


def derive_bean_id(cls: type) -> str:
    """
    Bean id of a controller type.

    The explicit ``id`` given to ``@controller`` wins, otherwise the class
    name with a lower-cased first letter is used.
    """
    marker = find_marker(cls)
    if marker is not None and marker.id:
        return marker.id
    name = cls.__name__
    return name[:1].lower() + name[1:]


def _iter_functions(cls: type):
    """Yield (name, function) for every function reachable through the MRO, nearest first."""
    seen = set()
    for klass in cls.__mro__:
        for name, value in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            func = value.__func__ if isinstance(value, (staticmethod, classmethod)) else value
            if inspect.isfunction(func):
                yield name, func


def action_specs(cls: type) -> List[ActionSpec]:
    """All methods of ``cls`` that carry a navigation directive."""
    specs = []
    for name, func in _iter_functions(cls):
        directive = getattr(func, ACTION_ATTR, None)
        if directive is not None:
            specs.append(ActionSpec(method_name=name, directive=directive))
    return specs


def subscriber_methods(cls: type) -> List[Tuple[str, type, int]]:
    """(method name, event type, priority) for each ``@subscribe`` method."""
    result = []
    for name, func in _iter_functions(cls):
        subscription = getattr(func, SUBSCRIBE_ATTR, None)
        if subscription is not None:
            event_type, priority = subscription
            result.append((name, event_type, priority))
    return result


def control_actions(cls: type) -> List[Tuple[str, ControlAction]]:
    """(method name, ControlAction) for each ``@on_action`` method, by control id."""
    found = [(name, getattr(func, ON_ACTION_ATTR)) for name, func in _iter_functions(cls)
             if getattr(func, ON_ACTION_ATTR, None) is not None]
    return sorted(found, key=lambda item: item[1].control_id)


def value_change_bindings(cls: type) -> List[Tuple[str, ValueChangeBinding]]:
    """(method name, binding) for each ``@on_value_changed`` method, by control id then order."""
    found = [(name, getattr(func, VALUE_CHANGED_ATTR)) for name, func in _iter_functions(cls)
             if getattr(func, VALUE_CHANGED_ATTR, None) is not None]
    return sorted(found, key=lambda item: (item[1].control_id, item[1].order))


def post_construct_methods(cls: type) -> List[str]:
    """Names of ``@post_construct`` methods, base classes first."""
    names = [name for name, func in _iter_functions(cls) if getattr(func, POST_CONSTRUCT_ATTR, False)]
    order = {}
    for depth, klass in enumerate(reversed(cls.__mro__)):
        for name in vars(klass):
            order.setdefault(name, depth)
    return sorted(names, key=lambda n: order.get(n, 0))


def _annotations(cls: type) -> Dict[str, Any]:
    merged: Dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        merged.update(getattr(klass, "__annotations__", {}) or {})
    try:
        merged.update(get_type_hints(cls))
    except (NameError, TypeError) as e:
        # Unresolvable forward references keep their raw annotation
        logger.debug(f"Keeping raw annotations of {cls.__qualname__}: {e}")
    return merged


def injection_points(cls: type) -> List[InjectionPoint]:
    """Attributes declared with ``inject()`` on ``cls`` or its bases."""
    annotations = _annotations(cls)
    points = []
    seen = set()
    for klass in cls.__mro__:
        for name, value in vars(klass).items():
            if name in seen or not isinstance(value, Inject):
                continue
            seen.add(name)
            bean_type = value.bean_type
            if bean_type is None:
                annotated = annotations.get(name)
                bean_type = annotated if isinstance(annotated, type) else None
            points.append(InjectionPoint(attribute=name, bean_id=value.bean_id or name, bean_type=bean_type))
    return points


def describe(cls: type) -> ComponentDescriptor:
    """
    Build the ComponentDescriptor of a controller type.

    Raises:
        ValueError: If ``cls`` does not carry the controller marker
    """
    marker = find_marker(cls)
    if marker is None:
        raise ValueError(f"{cls!r} is not marked with @controller")
    return ComponentDescriptor(
        id=derive_bean_id(cls),
        component_type=cls,
        singleton=marker.singleton,
        lazy=marker.lazy,
        view_id=marker.view_id,
        view_resource=marker.view_resource,
        title=marker.title,
        width=marker.width,
        height=marker.height,
        nested_views=tuple(marker.nested_views),
        actions=tuple(action_specs(cls)),
    )
