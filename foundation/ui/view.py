"""
Widget View - PySide6 implementation of the View contract.

A WidgetView wraps the root QWidget of a controller's content tree. Anchors
are descendant widgets looked up by objectName; windows are QMainWindows.

Attachment positions by anchor kind:
- QMainWindow: ``region`` center -> central widget, top/bottom/left/right -> dock area
- QTabWidget: new tab at ``index``
- QSplitter / QStackedWidget: inserted at ``index``
- QScrollArea: becomes the scrolled widget
- grid layout: cell (``row``, ``column``)
- box layout: inserted at ``index``
- widget without layout: a QVBoxLayout is created first
"""
from typing import Any, List, Optional, Set

from loguru import logger
from PySide6.QtCore import Qt
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QBoxLayout,
    QDockWidget,
    QGridLayout,
    QMainWindow,
    QScrollArea,
    QSplitter,
    QStackedWidget,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from ..core.metadata import NestedViewSpec, Region
from ..core.view import View

_DOCK_AREAS = {
    Region.TOP: Qt.DockWidgetArea.TopDockWidgetArea,
    Region.BOTTOM: Qt.DockWidgetArea.BottomDockWidgetArea,
    Region.LEFT: Qt.DockWidgetArea.LeftDockWidgetArea,
    Region.RIGHT: Qt.DockWidgetArea.RightDockWidgetArea,
}

# Windows opened by show_in_new_window(), referenced until they are closed
_open_windows: Set["ViewWindow"] = set()


class ViewWindow(QMainWindow):
    """
    Top-level window created for a view.

    Closing it releases the window but not the view content: the central
    widget and dock contents are detached first, since the views that own
    them may be shown again.
    """

    def closeEvent(self, event: QCloseEvent) -> None:
        for dock in self.findChildren(QDockWidget):
            content = dock.widget()
            if content is not None:
                content.setParent(None)
        self.takeCentralWidget()
        _open_windows.discard(self)
        logger.debug(f"Window '{self.windowTitle()}' closed, {len(_open_windows)} still open")
        super().closeEvent(event)


def open_windows() -> List[ViewWindow]:
    return list(_open_windows)


class WidgetView(View):
    """
    View over a QWidget content tree.

    Args:
        view_id: Id of the view bean
        root: Root widget of the content tree
        controller: Controller owning this view
        title: Window title when shown
        width: Initial width of a new window
        height: Initial height of a new window
    """

    def __init__(
        self,
        view_id: str,
        root: QWidget,
        controller: Any = None,
        title: str = "",
        width: int = 200,
        height: int = 100,
    ):
        self._id = view_id
        self._root = root
        self._controller = controller
        self.title = title
        self.width = width
        self.height = height
        if not root.objectName():
            root.setObjectName(view_id)

    @property
    def id(self) -> str:
        return self._id

    @property
    def controller(self) -> Any:
        return self._controller

    def show(self, window: QMainWindow) -> None:
        if not isinstance(window, QMainWindow):
            raise TypeError(f"Display of view '{self._id}' is not supported for window of type '{type(window).__name__}'")
        if window.centralWidget() is not self._root:
            # takeCentralWidget() keeps the previous view's widgets alive
            window.takeCentralWidget()
            window.setCentralWidget(self._root)
        if self.title:
            window.setWindowTitle(self.title)
        self._root.show()
        window.show()

    def show_in_new_window(self) -> QMainWindow:
        window = ViewWindow()
        window.resize(self.width, self.height)
        _open_windows.add(window)
        self.show(window)
        logger.debug(f"View '{self._id}' displayed in a new window")
        return window

    def get_owning_window(self) -> Optional[QWidget]:
        window = self._root.window()
        # A parent that is not a QMainWindow means the tree is not displayed
        if window is self._root or not isinstance(window, QMainWindow):
            return None
        return window

    def get_content_root(self) -> QWidget:
        return self._root

    def lookup_anchor(self, anchor_id: str) -> Optional[QWidget]:
        if self._root.objectName() == anchor_id:
            return self._root
        return self._root.findChild(QWidget, anchor_id)

    def attach(self, content: QWidget, anchor: QWidget, spec: NestedViewSpec) -> None:
        if spec.region is not None:
            self._attach_to_region(content, anchor, spec)
        elif isinstance(anchor, QTabWidget):
            label = content.windowTitle() or spec.view_id
            anchor.insertTab(spec.index, content, label)
        elif isinstance(anchor, (QSplitter, QStackedWidget)):
            anchor.insertWidget(spec.index, content)
        elif isinstance(anchor, QScrollArea):
            anchor.setWidget(content)
        else:
            self._attach_to_layout(content, anchor, spec)
        content.show()

    def _attach_to_region(self, content: QWidget, anchor: QWidget, spec: NestedViewSpec) -> None:
        if not isinstance(anchor, QMainWindow):
            raise TypeError(f"Region '{spec.region}' requires a QMainWindow anchor, '{spec.anchor}' is {type(anchor).__name__}")
        if spec.region == Region.CENTER:
            anchor.takeCentralWidget()
            anchor.setCentralWidget(content)
            return
        dock = QDockWidget(content.windowTitle() or spec.view_id, anchor)
        dock.setObjectName(f"{spec.view_id}Dock")
        dock.setWidget(content)
        anchor.addDockWidget(_DOCK_AREAS[spec.region], dock)

    def _attach_to_layout(self, content: QWidget, anchor: QWidget, spec: NestedViewSpec) -> None:
        layout = anchor.layout()
        if layout is None:
            layout = QVBoxLayout(anchor)
            layout.setContentsMargins(0, 0, 0, 0)

        if isinstance(layout, QGridLayout):
            row = spec.row if spec.row >= 0 else (layout.rowCount() if layout.count() else 0)
            column = spec.column if spec.column >= 0 else 0
            layout.addWidget(content, row, column)
        elif isinstance(layout, QBoxLayout):
            layout.insertWidget(spec.index, content)
        else:
            layout.addWidget(content)

    def __repr__(self):
        return f"WidgetView(id={self._id!r})"
