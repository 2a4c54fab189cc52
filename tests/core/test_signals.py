from unittest.mock import MagicMock
from src.core.events import Signal


def test_signal_event():
    """Verify Signal connect/emit/disconnect behavior."""
    sig = Signal("test_signal")
    mock_handler = MagicMock()

    sig.connect(mock_handler)
    sig.emit("data", 123)

    mock_handler.assert_called_once_with("data", 123)

    sig.disconnect(mock_handler)
    sig.emit("data2")
    assert mock_handler.call_count == 1


def test_signal_connect_once():
    sig = Signal()
    handler = MagicMock()

    sig.connect(handler)
    sig.connect(handler)
    sig.emit()

    assert handler.call_count == 1


def test_signal_failing_subscriber_does_not_block_others():
    sig = Signal("faulty")
    broken = MagicMock(side_effect=RuntimeError("boom"))
    healthy = MagicMock()

    sig.connect(broken)
    sig.connect(healthy)
    sig.emit(key="value")

    healthy.assert_called_once_with(key="value")


def test_signal_subscriber_may_disconnect_during_emit():
    sig = Signal()
    calls = []

    def once():
        calls.append("once")
        sig.disconnect(once)

    def always():
        calls.append("always")

    sig.connect(once)
    sig.connect(always)
    sig.emit()
    sig.emit()

    assert calls == ["once", "always", "always"]
