import os

# Widgets need a platform plugin even without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import threading

import pytest
from typing import Any, Dict, List, Optional

from foundation.core.dispatch import QueuedDispatcher
from foundation.core.events import PriorityEventBus
from foundation.core.view import View, ViewFactory


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def dispatcher():
    """Dispatcher owned by the test thread."""
    return QueuedDispatcher()


@pytest.fixture
def event_bus():
    return PriorityEventBus()


class FakeWindow:
    def __init__(self, name: str = "window"):
        self.name = name
        self.content: Optional["FakeView"] = None

    def __repr__(self):
        return f"FakeWindow({self.name})"


class FakeView(View):
    """
    In-memory view: the content tree is a dict of anchor id -> attached children.
    """

    def __init__(self, view_id: str, anchors=(), controller: Any = None):
        self._id = view_id
        self._controller = controller
        self.window: Optional[FakeWindow] = None
        self.anchors: Dict[str, List[Any]] = {name: [] for name in anchors}
        self.root = f"{view_id}-root"
        self.opened_windows: List[FakeWindow] = []
        # Names of the threads show() ran on
        self.shown_on: List[str] = []

    @property
    def id(self) -> str:
        return self._id

    @property
    def controller(self) -> Any:
        return self._controller

    def show(self, window: FakeWindow) -> None:
        window.content = self
        self.window = window
        self.shown_on.append(threading.current_thread().name)

    def show_in_new_window(self) -> FakeWindow:
        window = FakeWindow(f"{self._id}-window-{len(self.opened_windows)}")
        self.opened_windows.append(window)
        self.show(window)
        return window

    def get_owning_window(self) -> Optional[FakeWindow]:
        return self.window

    def get_content_root(self) -> Any:
        return self.root

    def lookup_anchor(self, anchor_id: str) -> Optional[str]:
        return anchor_id if anchor_id in self.anchors else None

    def attach(self, content: Any, anchor: str, spec) -> None:
        children = self.anchors[anchor]
        if spec.index < 0:
            children.append(content)
        else:
            children.insert(spec.index, content)


class FakeViewFactory(ViewFactory):
    def __init__(self, *views: FakeView):
        self.views = {view.id: view for view in views}

    def add(self, view: FakeView) -> FakeView:
        self.views[view.id] = view
        return view

    def resolve(self, view_id: str) -> Optional[View]:
        return self.views.get(view_id)


@pytest.fixture
def fake_view():
    """Factory fixture for FakeView instances."""
    return FakeView


@pytest.fixture
def fake_window():
    return FakeWindow


@pytest.fixture
def view_factory():
    return FakeViewFactory()


@pytest.fixture
def fake_loader():
    """
    View loader for the container: builds a FakeView with the anchors a
    controller lists in its ``anchors`` class attribute.
    """
    def load(controller, descriptor):
        return FakeView(descriptor.view_id, anchors=getattr(controller, "anchors", ()), controller=controller)
    return load
