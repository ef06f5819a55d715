"""
Action Interceptor.

Runs an intercepted controller action and, only if it returns normally,
applies the navigation directive attached to it:

- ShowView: display the target view in a new window, or in the window that
  hosts the controller's own view.
- AttachNestedViews: graft the target views into the controller's own view.

Every lookup a directive needs is validated before the view tree is touched,
so a failing directive never leaves a half-applied navigation behind.

With a dispatcher, navigation runs on the UI thread even when the action
was called from a worker thread; the caller blocks until it is done.
"""
from typing import Any, Awaitable, Callable, Optional, Tuple, TypeVar

from loguru import logger

from .dispatch import UiDispatcher
from .errors import MissingAnchorError, UnattachedWindowError, UnresolvedViewError
from .events import NestedViewAttached, PriorityEventBus, ViewShown
from .metadata import AttachNestedViews, NavigationDirective, NestedViewSpec, ShowView
from .view import View, ViewFactory
from .wrapper import ComponentWrapper

T = TypeVar("T")


class ActionInterceptor:
    """
    Applies post-invocation navigation for intercepted actions.

    Args:
        view_factory: Resolves target views by id
        event_bus: Optional bus that receives ViewShown / NestedViewAttached
        dispatcher: Runs navigation on the UI thread; without it navigation
            runs on the calling thread, which must then be the UI thread
    """

    def __init__(
        self,
        view_factory: ViewFactory,
        event_bus: Optional[PriorityEventBus] = None,
        dispatcher: Optional[UiDispatcher] = None,
    ):
        self.view_factory = view_factory
        self.event_bus = event_bus
        self.dispatcher = dispatcher

    def intercept(self, instance: Any, directive: NavigationDirective, call: Callable[[], T]) -> T:
        """
        Invoke ``call`` and navigate on success.

        Exceptions raised by ``call`` propagate unchanged and skip navigation.

        Returns:
            The return value of ``call``
        """
        result = call()
        self._navigate_on_ui_thread(instance, directive)
        return result

    async def intercept_async(self, instance: Any, directive: NavigationDirective, call: Callable[[], Awaitable[T]]) -> T:
        """Coroutine variant of intercept(): navigation follows the awaited result."""
        result = await call()
        self._navigate_on_ui_thread(instance, directive)
        return result

    def _navigate_on_ui_thread(self, instance: Any, directive: NavigationDirective) -> None:
        if self.dispatcher is None:
            self.navigate(instance, directive)
        else:
            self.dispatcher.invoke_and_wait(lambda: self.navigate(instance, directive))

    def navigate(self, instance: Any, directive: NavigationDirective) -> None:
        if isinstance(directive, ShowView):
            self._show_view(instance, directive)
        elif isinstance(directive, AttachNestedViews):
            self.attach_nested_views(ComponentWrapper.get_view_from(instance), directive.specs)
        else:
            raise TypeError(f"Unsupported navigation directive: {directive!r}")

    def _show_view(self, instance: Any, directive: ShowView) -> None:
        view = self._resolve(directive.view_id)
        if directive.in_new_window:
            view.show_in_new_window()
        else:
            window = ComponentWrapper.of(instance).get_window()
            if window is None:
                raise UnattachedWindowError(directive.view_id)
            view.show(window)

        logger.debug(f"Navigated to view '{directive.view_id}' (new window: {directive.in_new_window})")
        if self.event_bus is not None:
            self.event_bus.publish(ViewShown(directive.view_id, directive.in_new_window, source=instance))

    def attach_nested_views(self, parent: Optional[View], specs: Tuple[NestedViewSpec, ...]) -> None:
        """
        Attach each spec's view below its anchor in ``parent``.

        Specs are applied one after another; each one is fully validated
        before it mutates anything.
        """
        if parent is None:
            raise UnresolvedViewError("<none>", "the invoking controller has no view to attach nested views to")

        for spec in specs:
            child = self._resolve(spec.view_id, f"can not embed it into view '{parent.id}'")
            anchor = parent.lookup_anchor(spec.anchor)
            if anchor is None:
                raise MissingAnchorError(spec.anchor, parent.id)

            parent.attach(child.get_content_root(), anchor, spec)
            logger.debug(f"Attached view '{spec.view_id}' to '{parent.id}#{spec.anchor}'")
            if self.event_bus is not None:
                self.event_bus.publish(NestedViewAttached(spec.view_id, parent.id, spec.anchor))

    def _resolve(self, view_id: str, context: str = "") -> View:
        view = self.view_factory.resolve(view_id)
        if view is None:
            raise UnresolvedViewError(view_id, context)
        return view
