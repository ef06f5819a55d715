"""
UI Thread Dispatch.

All component construction, action invocation, view mutation and debounced
listener delivery happen on one UI-owning thread. Other threads hand work to
that thread through a UiDispatcher:

- run_in_ui_thread(): fire-and-forget; runs inline when already on the UI thread
- invoke_and_wait(): blocks the caller until the work finished on the UI thread
  and re-raises its exception

Two implementations are provided:

- QtDispatcher: the QApplication thread is the UI thread; work crosses over
  through a queued Qt signal.
- QueuedDispatcher: a plain thread-owned queue drained by process_pending(),
  for hosts without a running Qt event loop (command line tools, tests).
"""
import queue
import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import Future
from typing import Any, Callable, Optional, TypeVar

from loguru import logger
from PySide6.QtCore import QCoreApplication, QObject, QThread, Qt, Signal, Slot

T = TypeVar("T")


class UiDispatcher(ABC):
    """Hands work to the single UI-owning thread."""

    @abstractmethod
    def is_ui_thread(self) -> bool:
        """True if the calling thread is the UI thread."""

    @abstractmethod
    def post(self, task: Callable[[], Any]) -> None:
        """Queue ``task`` for execution on the UI thread, always deferred."""

    def run_in_ui_thread(self, task: Callable[[], Any]) -> None:
        """
        Run ``task`` on the UI thread without waiting for it.

        Runs inline when called from the UI thread. Exceptions raised by a
        deferred task surface on the UI thread, not in the caller.
        """
        if self.is_ui_thread():
            task()
        else:
            self.post(task)

    def invoke_and_wait(self, task: Callable[[], T]) -> T:
        """
        Run ``task`` on the UI thread and block until it finished.

        There is no timeout: a task that never returns blocks the caller forever.

        Returns:
            The task's return value

        Raises:
            Whatever the task raised
        """
        if self.is_ui_thread():
            return task()

        future: Future = Future()

        def _run():
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(task())
            except BaseException as e:
                future.set_exception(e)

        self.post(_run)
        return future.result()


class _Invoker(QObject):
    """Lives on the UI thread and runs whatever is sent through ``requested``."""

    requested = Signal(object)

    def __init__(self):
        super().__init__()
        self.requested.connect(self._run, Qt.ConnectionType.QueuedConnection)

    @Slot(object)
    def _run(self, task):
        try:
            task()
        except Exception as e:
            logger.error(f"Error in UI thread task {task!r}: {e}")
            raise


class QtDispatcher(UiDispatcher):
    """
    Dispatcher bound to the thread of the running QCoreApplication.

    Must be created after the QApplication exists.

    Usage:
        app = QApplication(sys.argv)
        dispatcher = QtDispatcher()
        dispatcher.run_in_ui_thread(lambda: window.setWindowTitle("Done"))
    """

    def __init__(self, app: Optional[QCoreApplication] = None):
        app = app or QCoreApplication.instance()
        if app is None:
            raise RuntimeError("QtDispatcher requires a QApplication instance")
        self._ui_thread = app.thread()
        self._invoker = _Invoker()
        self._invoker.moveToThread(self._ui_thread)

    def is_ui_thread(self) -> bool:
        return QThread.currentThread() == self._ui_thread

    def post(self, task: Callable[[], Any]) -> None:
        self._invoker.requested.emit(task)


class QueuedDispatcher(UiDispatcher):
    """
    Dispatcher whose UI thread is the thread that created it.

    The owning thread must call process_pending() regularly; tasks posted from
    other threads wait in a queue until then.

    Usage:
        dispatcher = QueuedDispatcher()
        worker = threading.Thread(target=lambda: container.get_by_id("main"))
        worker.start()
        while worker.is_alive():
            dispatcher.process_pending(timeout=0.05)
    """

    def __init__(self):
        self._owner = threading.get_ident()
        self._queue: "queue.Queue[Callable[[], Any]]" = queue.Queue()

    def is_ui_thread(self) -> bool:
        return threading.get_ident() == self._owner

    def post(self, task: Callable[[], Any]) -> None:
        self._queue.put(task)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def process_pending(self, timeout: float = 0.0) -> int:
        """
        Run queued tasks on the calling (owning) thread.

        Args:
            timeout: Seconds to wait for the first task when the queue is empty

        Returns:
            Number of tasks executed
        """
        if not self.is_ui_thread():
            raise RuntimeError("process_pending() must be called from the dispatcher's owning thread")

        executed = 0
        block = timeout > 0
        while True:
            try:
                task = self._queue.get(block=block, timeout=timeout if block else None)
            except queue.Empty:
                return executed
            block = False
            task()
            executed += 1

    def process_until(self, predicate: Callable[[], bool], timeout: float = 5.0, interval: float = 0.01) -> bool:
        """
        Process tasks until ``predicate`` holds or ``timeout`` seconds passed.

        Returns:
            The final value of ``predicate()``
        """
        deadline = time.monotonic() + timeout
        while not predicate():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            self.process_pending(timeout=min(interval, remaining))
        return predicate()
