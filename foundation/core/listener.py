"""
Debounced Listener.

Wraps a change callback so that a burst of notifications results in a single
delivery of the newest payload once the notifications pause for ``delay_ms``.

Usage:
    listener = DebouncedListener(self.on_search_text, delay_ms=400, dispatcher=dispatcher)
    line_edit.textChanged.connect(listener)

A background timer only measures the delay; the wrapped callback always runs
on the UI thread.
"""
import threading
from typing import Any, Callable, Optional, Union

from loguru import logger

from .dispatch import UiDispatcher

DEFAULT_DELAY_MS = 200


class DebouncedListener:
    """
    Coalesces rapid change notifications.

    Args:
        callback: Receives the positional and keyword arguments of the newest notification
        delay_ms: Quiet period before delivery; <= 0 delivers every notification at once
        enabled: Bool, or a zero-argument callable consulted on every notification.
            Notifications arriving while disabled are dropped, not deferred.
        dispatcher: UI dispatcher used for delivery

    Concurrent notifications from several threads are last-write-wins; the
    expected producer is the UI thread itself.
    """

    def __init__(
        self,
        callback: Callable[..., Any],
        delay_ms: int = DEFAULT_DELAY_MS,
        enabled: Union[bool, Callable[[], bool]] = True,
        dispatcher: Optional[UiDispatcher] = None,
    ):
        if dispatcher is None:
            raise ValueError("DebouncedListener requires a UI dispatcher")
        self._callback = callback
        self._dispatcher = dispatcher
        self._timer: Optional[threading.Timer] = None
        self.delay_ms = delay_ms
        self.enabled = enabled

    @property
    def is_enabled(self) -> bool:
        return bool(self.enabled() if callable(self.enabled) else self.enabled)

    @property
    def pending(self) -> bool:
        """True while a delivery is scheduled but has not fired yet."""
        timer = self._timer
        return timer is not None and timer.is_alive()

    def __call__(self, *args, **kwargs) -> None:
        self.notify(*args, **kwargs)

    def notify(self, *args, **kwargs) -> None:
        """Raw change notification."""
        if not self.is_enabled:
            return

        # A newer payload supersedes whatever is still waiting
        self.cancel()

        deliver = lambda: self._callback(*args, **kwargs)
        if self.delay_ms <= 0:
            self._dispatcher.run_in_ui_thread(deliver)
            return

        timer = threading.Timer(self.delay_ms / 1000.0, self._expire, args=(deliver,))
        timer.daemon = True
        self._timer = timer
        timer.start()

    def cancel(self) -> None:
        """Drop the pending delivery, if any."""
        timer = self._timer
        if timer is not None:
            timer.cancel()
            self._timer = None

    def _expire(self, deliver: Callable[[], Any]) -> None:
        # Runs on the timer thread: hand over, nothing else
        if threading.current_thread() is not self._timer:
            logger.debug("Debounced delivery superseded before expiry")
            return
        self._timer = None
        self._dispatcher.post(deliver)
