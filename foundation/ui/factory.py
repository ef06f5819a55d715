"""
View Factory and Loader.

- ContainerViewFactory resolves views through the bean container, where each
  controller registered its view under the controller's ``view_id``.
- WidgetViewLoader builds the WidgetView of a freshly constructed controller.
  Parsing view markup is left to a pluggable ``content_builder``; by default
  the controller builds its own content in ``create_content()``.

Usage:
    loader = WidgetViewLoader()

    @controller(view_id="mainView")
    class MainController:
        def create_content(self) -> QWidget:
            return QLabel("Hello")
"""
from typing import Any, Callable, Optional

from PySide6.QtWidgets import QWidget

from ..core.container import BeanContainer
from ..core.metadata import ComponentDescriptor
from ..core.view import View, ViewFactory
from .view import WidgetView

# (controller, descriptor) -> root widget
ContentBuilder = Callable[[Any, ComponentDescriptor], QWidget]


class ContainerViewFactory(ViewFactory):
    """Looks up view beans by id."""

    def __init__(self, container: BeanContainer):
        self.container = container

    def resolve(self, view_id: str) -> Optional[View]:
        bean = self.container.get_by_id(view_id)
        return bean if isinstance(bean, View) else None


def controller_content(controller: Any, descriptor: ComponentDescriptor) -> QWidget:
    """Default content builder: asks the controller for its widget tree."""
    create = getattr(controller, "create_content", None)
    if create is None:
        raise TypeError(
            f"Controller '{descriptor.id}' has no create_content() method and no content builder "
            f"is registered for view resource '{descriptor.view_resource}'"
        )
    widget = create()
    if not isinstance(widget, QWidget):
        raise TypeError(f"create_content() of '{descriptor.id}' must return a QWidget, got {type(widget).__name__}")
    return widget


class WidgetViewLoader:
    """
    Creates WidgetViews for controllers.

    Args:
        content_builder: Builds the root widget; defaults to controller_content
    """

    def __init__(self, content_builder: Optional[ContentBuilder] = None):
        self.content_builder = content_builder or controller_content

    def __call__(self, controller: Any, descriptor: ComponentDescriptor) -> WidgetView:
        root = self.content_builder(controller, descriptor)
        return WidgetView(
            descriptor.view_id,
            root,
            controller=controller,
            title=descriptor.title,
            width=descriptor.width,
            height=descriptor.height,
        )
