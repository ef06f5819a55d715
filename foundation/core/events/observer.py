import threading
from typing import Any, Callable, List

from loguru import logger


class Signal:
    """
    Synchronous in-process notification without event types or priorities.

    Receivers run on the emitting thread, in connection order. A failing
    receiver is logged and does not prevent the others from running.

    Usage:
        config.on_changed.connect(runtime.apply_setting)

        @config.on_changed.connect
        def on_change(section, key, value):
            ...
    """

    def __init__(self, name: str = "Signal"):
        self.name = name
        self._lock = threading.Lock()
        self._receivers: List[Callable[..., Any]] = []

    def connect(self, receiver: Callable[..., Any]) -> Callable[..., Any]:
        """Connect ``receiver`` once; returns it so this works as a decorator."""
        with self._lock:
            if receiver not in self._receivers:
                self._receivers.append(receiver)
        return receiver

    def disconnect(self, receiver: Callable[..., Any]) -> None:
        with self._lock:
            if receiver in self._receivers:
                self._receivers.remove(receiver)

    def emit(self, *args, **kwargs) -> None:
        with self._lock:
            receivers = list(self._receivers)
        for receiver in receivers:
            try:
                receiver(*args, **kwargs)
            except Exception as e:
                logger.error(f"Signal '{self.name}' receiver {getattr(receiver, '__qualname__', receiver)} failed: {e}")

    def __len__(self) -> int:
        return len(self._receivers)
