"""
Decorator Utilities for Foundation controllers.

Provides the declarative markers the runtime reads through
``foundation.core.metadata``.
"""
from typing import Type, TypeVar, Optional, Sequence

from .metadata import (
    ACTION_ATTR,
    ON_ACTION_ATTR,
    POST_CONSTRUCT_ATTR,
    SUBSCRIBE_ATTR,
    VALUE_CHANGED_ATTR,
    AttachNestedViews,
    ControlAction,
    ControllerMarker,
    Inject,
    NestedViewSpec,
    ShowView,
    ValueChangeBinding,
    mark_controller,
)

T = TypeVar('T')


def controller(
    view_id: str,
    view_resource: str = "",
    id: Optional[str] = None,
    singleton: bool = True,
    lazy: bool = True,
    title: str = "",
    width: int = 200,
    height: int = 100,
    nested_views: Sequence[NestedViewSpec] = (),
):
    """
    Decorator to mark a class as a controller.

    Args:
        view_id: Id of the view bean paired with the controller
        view_resource: Reference handed to the view loader (e.g. a .ui file)
        id: Bean id (defaults to the class name with a lower-cased first letter)
        singleton: One shared instance instead of one per lookup
        lazy: Construct on first lookup instead of at startup
        title: Window title used when the view gets its own window
        width: Initial window width
        height: Initial window height
        nested_views: Views attached into this view right after it is built

    Usage:
        @controller(view_id="mainView", view_resource="main.ui")
        class MainController:
            pass
    """
    def decorator(cls: Type[T]) -> Type[T]:
        marker = ControllerMarker(
            view_id=view_id,
            view_resource=view_resource,
            id=id,
            singleton=singleton,
            lazy=lazy,
            title=title,
            width=width,
            height=height,
            nested_views=tuple(nested_views),
        )
        return mark_controller(cls, marker)
    return decorator


def show_view(view_id: str, new_window: bool = False):
    """
    Decorator to navigate to another view after the method returns.

    Navigation only happens when the method completes without raising.

    Args:
        view_id: Id of the view to display
        new_window: Display in a fresh window instead of the controller's own

    Usage:
        @show_view("detailsView", new_window=True)
        def open_details(self):
            self.model.load()
    """
    if not view_id:
        raise ValueError("show_view requires a view_id")

    def decorator(func):
        setattr(func, ACTION_ATTR, ShowView(view_id=view_id, in_new_window=new_window))
        return func
    return decorator


def show_nested_views(*specs: NestedViewSpec):
    """
    Decorator to attach views into the controller's own view after the method returns.

    Usage:
        @show_nested_views(NestedViewSpec("sideView", anchor="sidebar"))
        def expand(self):
            pass
    """
    if not specs:
        raise ValueError("show_nested_views requires at least one NestedViewSpec")

    def decorator(func):
        setattr(func, ACTION_ATTR, AttachNestedViews(specs=tuple(specs)))
        return func
    return decorator


def subscribe(event_type: type, order: int = 1):
    """
    Decorator to mark a controller method as an event bus subscriber.

    Args:
        event_type: Event class; subclasses of it are delivered too
        order: Priority, lower values are called first

    Usage:
        @subscribe(CartChanged, order=0)
        def on_cart_changed(self, event):
            pass
    """
    def decorator(func):
        setattr(func, SUBSCRIBE_ATTR, (event_type, order))
        return func
    return decorator


def on_action(control_id: str):
    """
    Decorator to run a controller method when a control of its view is activated.

    Buttons trigger on click, line edits on Return. Combined with
    ``@show_view`` the method navigates like any other action.

    Usage:
        @on_action("saveButton")
        def save(self):
            self.model.save()
    """
    if not control_id:
        raise ValueError("on_action requires a control_id")

    def decorator(func):
        setattr(func, ON_ACTION_ATTR, ControlAction(control_id))
        return func
    return decorator


def on_value_changed(control_id: str, timeout_ms: int = 0, listener_active: Optional[str] = None, order: int = 1):
    """
    Decorator to run a controller method when a control's value changes.

    The method receives the new value if it takes an argument.

    Args:
        control_id: Object name of the control in the controller's view
        timeout_ms: Deliver only after the value stayed unchanged this long
        listener_active: Name of a boolean attribute that switches delivery on and off
        order: Wiring order among methods bound to the same control

    Usage:
        @on_value_changed("searchField", timeout_ms=300, listener_active="search_enabled")
        def search(self, text):
            self.results = self.catalog.find(text)
    """
    if not control_id:
        raise ValueError("on_value_changed requires a control_id")
    if timeout_ms < 0:
        raise ValueError(f"timeout_ms must not be negative, got {timeout_ms}")

    def decorator(func):
        setattr(func, VALUE_CHANGED_ATTR, ValueChangeBinding(control_id, timeout_ms, listener_active, order))
        return func
    return decorator


def post_construct(func):
    """Mark a method to run once right after the container builds the instance."""
    setattr(func, POST_CONSTRUCT_ATTR, True)
    return func


def inject(bean_id: Optional[str] = None, bean_type: Optional[type] = None) -> Inject:
    """
    Declare an attribute to be filled by the container.

    Resolution tries the bean id (defaults to the attribute name), then the
    declared type.

    Usage:
        class ShoppingController:
            event_bus: PriorityEventBus = inject()
    """
    return Inject(bean_id=bean_id, bean_type=bean_type)
