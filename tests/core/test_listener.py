"""
DebouncedListener - Unit Tests

Deliveries are drained on the test thread through a QueuedDispatcher, which
plays the role of the UI thread.
"""
import threading
import time
import pytest
from unittest.mock import MagicMock

from foundation.core.listener import DebouncedListener, DEFAULT_DELAY_MS


def drain(dispatcher, seconds):
    """Keep processing UI tasks for ``seconds``."""
    deadline = time.monotonic() + seconds
    while time.monotonic() < deadline:
        dispatcher.process_pending(timeout=0.01)


class TestDebouncing:
    """A burst of notifications results in one delivery."""

    def test_burst_delivers_newest_payload_once(self, dispatcher):
        """Test notifications at 0/100/200 ms with a 400 ms delay deliver only the last one."""
        received = []
        delivered_at = []

        def deliver(payload):
            delivered_at.append(time.monotonic())
            received.append(payload)

        listener = DebouncedListener(deliver, delay_ms=400, dispatcher=dispatcher)

        started = time.monotonic()
        listener("a")
        time.sleep(0.1)
        listener("b")
        time.sleep(0.1)
        listener("c")

        assert dispatcher.process_until(lambda: received, timeout=3.0)
        drain(dispatcher, 0.6)

        assert received == ["c"]
        # 400 ms after the last notification, which came 200 ms after the first
        assert 0.55 <= delivered_at[0] - started <= 0.9

    def test_delivery_waits_for_quiet_period(self, dispatcher):
        received = []
        listener = DebouncedListener(received.append, delay_ms=300, dispatcher=dispatcher)

        listener("x")
        drain(dispatcher, 0.1)

        assert received == []
        assert listener.pending

        assert dispatcher.process_until(lambda: received, timeout=3.0)
        assert received == ["x"]
        assert not listener.pending

    def test_separate_bursts_deliver_separately(self, dispatcher):
        received = []
        listener = DebouncedListener(received.append, delay_ms=50, dispatcher=dispatcher)

        listener(1)
        assert dispatcher.process_until(lambda: len(received) == 1, timeout=3.0)
        listener(2)
        assert dispatcher.process_until(lambda: len(received) == 2, timeout=3.0)

        assert received == [1, 2]

    def test_keyword_arguments_forwarded(self, dispatcher):
        callback = MagicMock()
        listener = DebouncedListener(callback, delay_ms=20, dispatcher=dispatcher)

        listener.notify("old", "value", source="field")

        assert dispatcher.process_until(lambda: callback.called, timeout=3.0)
        callback.assert_called_once_with("old", "value", source="field")

    def test_delivery_runs_on_ui_thread(self, dispatcher):
        threads = []
        listener = DebouncedListener(lambda: threads.append(threading.current_thread()), delay_ms=20, dispatcher=dispatcher)

        listener()

        assert dispatcher.process_until(lambda: threads, timeout=3.0)
        assert threads == [threading.current_thread()]


class TestImmediateDelivery:
    """A delay of zero or less delivers every notification."""

    @pytest.mark.parametrize("delay", [0, -5])
    def test_every_notification_delivered(self, dispatcher, delay):
        received = []
        listener = DebouncedListener(received.append, delay_ms=delay, dispatcher=dispatcher)

        listener(1)
        listener(2)
        listener(3)

        # Notified from the UI thread: delivered inline
        assert received == [1, 2, 3]

    def test_immediate_from_other_thread_is_marshalled(self, dispatcher):
        received = []
        listener = DebouncedListener(received.append, delay_ms=0, dispatcher=dispatcher)

        worker = threading.Thread(target=lambda: listener("from worker"))
        worker.start()
        worker.join()

        assert received == []
        dispatcher.process_pending()
        assert received == ["from worker"]


class TestEnablement:
    """Disabled listeners drop notifications."""

    def test_disabled_drops(self, dispatcher):
        callback = MagicMock()
        listener = DebouncedListener(callback, delay_ms=0, enabled=False, dispatcher=dispatcher)

        listener("ignored")

        callback.assert_not_called()
        assert not listener.pending

    def test_enablement_predicate_checked_per_notification(self, dispatcher):
        state = {"enabled": False}
        received = []
        listener = DebouncedListener(received.append, delay_ms=0, enabled=lambda: state["enabled"], dispatcher=dispatcher)

        listener("dropped")
        state["enabled"] = True
        listener("kept")

        assert received == ["kept"]

    def test_disabled_notification_keeps_pending_delivery(self, dispatcher):
        """Test a dropped notification does not cancel an already scheduled one."""
        state = {"enabled": True}
        received = []
        listener = DebouncedListener(received.append, delay_ms=50, enabled=lambda: state["enabled"], dispatcher=dispatcher)

        listener("scheduled")
        state["enabled"] = False
        listener("dropped")

        assert dispatcher.process_until(lambda: received, timeout=3.0)
        assert received == ["scheduled"]


class TestCancel:

    def test_cancel_drops_pending_delivery(self, dispatcher):
        callback = MagicMock()
        listener = DebouncedListener(callback, delay_ms=50, dispatcher=dispatcher)

        listener("never")
        listener.cancel()
        drain(dispatcher, 0.2)

        callback.assert_not_called()

    def test_requires_dispatcher(self):
        with pytest.raises(ValueError):
            DebouncedListener(MagicMock())

    def test_default_delay(self, dispatcher):
        listener = DebouncedListener(MagicMock(), dispatcher=dispatcher)
        assert listener.delay_ms == DEFAULT_DELAY_MS == 200
