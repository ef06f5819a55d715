"""
View Contract.

Abstraction over a renderable content tree, associated 1:1 with a controller
instance. The runtime only talks to views through this interface; the
PySide6 implementation lives in ``foundation.ui.view``.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from .metadata import ComponentDescriptor, NestedViewSpec


class View(ABC):
    """A controller's content tree and the window currently hosting it."""

    @property
    @abstractmethod
    def id(self) -> str:
        pass

    @property
    @abstractmethod
    def controller(self) -> Any:
        pass

    @abstractmethod
    def show(self, window: Any) -> None:
        """Display this view as the content of an existing window."""

    @abstractmethod
    def show_in_new_window(self) -> Any:
        """Display this view in a freshly created window and return it."""

    @abstractmethod
    def get_owning_window(self) -> Optional[Any]:
        """The window hosting this view, or None if it is not displayed."""

    @abstractmethod
    def get_content_root(self) -> Any:
        pass

    @abstractmethod
    def lookup_anchor(self, anchor_id: str) -> Optional[Any]:
        """Find a named node of the content tree, or None."""

    @abstractmethod
    def attach(self, content: Any, anchor: Any, spec: NestedViewSpec) -> None:
        """
        Graft ``content`` beneath ``anchor`` at the position given by ``spec``.

        ``anchor`` is a value previously returned by lookup_anchor().
        """


class ViewFactory(ABC):
    """Resolves views by id."""

    @abstractmethod
    def resolve(self, view_id: str) -> Optional[View]:
        pass


# Builds the view of a freshly constructed controller
ViewLoader = Callable[[Any, ComponentDescriptor], View]
