"""
PySide6 adapters for the controller runtime.
"""
from .view import WidgetView, ViewWindow, open_windows
from .factory import ContainerViewFactory, WidgetViewLoader, controller_content
from .controls import ControlWiring, action_signal, value_signal

__all__ = [
    "WidgetView",
    "ViewWindow",
    "open_windows",
    "ContainerViewFactory",
    "WidgetViewLoader",
    "controller_content",
    "ControlWiring",
    "action_signal",
    "value_signal",
]
