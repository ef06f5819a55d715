"""
Component Wrapper.

Accessors for the view back-reference slot that enhancement installs on
controllers. The controller does not own its view; the slot only points back
to it.
"""
from typing import Any, Generic, Optional, TypeVar

from .errors import UnenhancedComponentError
from .metadata import VIEW_SLOT
from .view import View

T = TypeVar("T")


class ComponentWrapper(Generic[T]):
    """
    Wraps a controller instance.

    Usage:
        ComponentWrapper.of(controller).set_view(view)
        window = ComponentWrapper.of(controller).get_window()
    """

    def __init__(self, component: T):
        self.component = component

    @classmethod
    def of(cls, component: T) -> "ComponentWrapper[T]":
        return cls(component)

    def has_view_slot(self) -> bool:
        return hasattr(type(self.component), VIEW_SLOT)

    def set_view(self, view: Optional[View]) -> None:
        self._check_slot()
        if view is not None and not isinstance(view, View):
            raise TypeError(f"Expected a View, got {type(view).__name__}")
        setattr(self.component, VIEW_SLOT, view)

    def get_view(self) -> Optional[View]:
        self._check_slot()
        return getattr(self.component, VIEW_SLOT)

    def get_window(self) -> Optional[Any]:
        """The window hosting the controller's view, or None if not displayed."""
        view = self.get_view()
        return view.get_owning_window() if view is not None else None

    def _check_slot(self) -> None:
        if not self.has_view_slot():
            raise UnenhancedComponentError(type(self.component))

    @staticmethod
    def set_view_on(component: Any, view: Optional[View]) -> None:
        ComponentWrapper.of(component).set_view(view)

    @staticmethod
    def get_view_from(component: Any) -> Optional[View]:
        return ComponentWrapper.of(component).get_view()
