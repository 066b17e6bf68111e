from unittest.mock import MagicMock

import pytest

from clipstash.models import ClipboardContent
from clipstash.monitor import (
    PASTEBOARD_TYPE_PNG,
    PASTEBOARD_TYPE_STRING,
    PASTEBOARD_TYPE_TIFF,
    ClipboardMonitor,
    PasteboardSink,
)
from clipstash.store import HistoryStore


@pytest.fixture
def mock_pasteboard():
    mock_pb = MagicMock()
    mock_pb.changeCount.return_value = 0
    mock_pb.types.return_value = []
    return mock_pb


@pytest.fixture
def monitor(store, mock_pasteboard):
    return ClipboardMonitor(store, pasteboard=mock_pasteboard)


def _copy_text(pasteboard, text: str, count: int) -> None:
    pasteboard.changeCount.return_value = count
    pasteboard.types.return_value = [PASTEBOARD_TYPE_STRING]
    pasteboard.stringForType_.return_value = text


class TestCheckClipboard:
    def test_no_change(self, monitor, mock_pasteboard):
        mock_pasteboard.changeCount.return_value = 0
        assert monitor.check_clipboard() is False

    def test_text_change(self, monitor, mock_pasteboard, store):
        _copy_text(mock_pasteboard, "hello world", 1)
        assert monitor.check_clipboard() is True

        assert len(store.ephemeral) == 1
        assert store.ephemeral[0].content == ClipboardContent.text("hello world")

    def test_same_count_not_reread(self, monitor, mock_pasteboard, store):
        _copy_text(mock_pasteboard, "once", 1)
        monitor.check_clipboard()
        mock_pasteboard.stringForType_.return_value = "changed without count"
        assert monitor.check_clipboard() is False
        assert len(store.ephemeral) == 1

    def test_redundant_event_deduped_by_store(self, monitor, mock_pasteboard, store):
        _copy_text(mock_pasteboard, "duplicate", 1)
        monitor.check_clipboard()
        _copy_text(mock_pasteboard, "duplicate", 2)
        assert monitor.check_clipboard() is False
        assert len(store.ephemeral) == 1

    def test_callback_called_on_change(self, store, mock_pasteboard):
        callback = MagicMock()
        mon = ClipboardMonitor(store, pasteboard=mock_pasteboard, on_change=callback)
        _copy_text(mock_pasteboard, "test", 1)
        mon.check_clipboard()
        callback.assert_called_once()

    def test_empty_clipboard_no_entry(self, monitor, mock_pasteboard, store):
        mock_pasteboard.changeCount.return_value = 1
        mock_pasteboard.types.return_value = []
        assert monitor.check_clipboard() is False
        assert store.ephemeral == []

    def test_none_types_no_crash(self, monitor, mock_pasteboard):
        mock_pasteboard.changeCount.return_value = 1
        mock_pasteboard.types.return_value = None
        assert monitor.check_clipboard() is False

    def test_read_error_is_logged(self, monitor, mock_pasteboard, caplog):
        mock_pasteboard.changeCount.return_value = 1
        mock_pasteboard.types.side_effect = RuntimeError("pasteboard gone")
        assert monitor.check_clipboard() is False
        assert "Error reading clipboard" in caplog.text

    def test_lone_surrogate_text_captured(self, monitor, mock_pasteboard, store):
        _copy_text(mock_pasteboard, "broken \udc00 pair", 1)
        assert monitor.check_clipboard() is True
        assert store.ephemeral[0].content == ClipboardContent.text("broken \udc00 pair")

    def test_oversized_text_skipped(self, monitor, mock_pasteboard, store):
        _copy_text(mock_pasteboard, "x" * 1_000_001, 1)
        assert monitor.check_clipboard() is False
        assert store.ephemeral == []


class TestImageClipboard:
    def test_png_preferred(self, monitor, mock_pasteboard, store):
        mock_pasteboard.changeCount.return_value = 1
        mock_pasteboard.types.return_value = [PASTEBOARD_TYPE_TIFF, PASTEBOARD_TYPE_PNG]
        mock_pasteboard.dataForType_.side_effect = lambda t: b"png-data" if t == PASTEBOARD_TYPE_PNG else b"tiff-data"

        assert monitor.check_clipboard() is True
        assert store.ephemeral[0].content == ClipboardContent.image(b"png-data")

    def test_tiff_fallback(self, monitor, mock_pasteboard, store):
        mock_pasteboard.changeCount.return_value = 1
        mock_pasteboard.types.return_value = [PASTEBOARD_TYPE_TIFF]
        mock_pasteboard.dataForType_.return_value = b"tiff-data"

        assert monitor.check_clipboard() is True
        assert store.ephemeral[0].content.is_image

    def test_text_wins_over_image(self, monitor, mock_pasteboard, store):
        mock_pasteboard.changeCount.return_value = 1
        mock_pasteboard.types.return_value = [PASTEBOARD_TYPE_STRING, PASTEBOARD_TYPE_PNG]
        mock_pasteboard.stringForType_.return_value = "caption"
        mock_pasteboard.dataForType_.return_value = b"png-data"

        monitor.check_clipboard()
        assert store.ephemeral[0].content == ClipboardContent.text("caption")

    def test_oversized_image_skipped(self, monitor, mock_pasteboard, store):
        mock_pasteboard.changeCount.return_value = 1
        mock_pasteboard.types.return_value = [PASTEBOARD_TYPE_PNG]
        mock_pasteboard.dataForType_.return_value = b"\x00" * 10_000_001

        assert monitor.check_clipboard() is False
        assert store.ephemeral == []


class TestPasteboardSink:
    def test_write_text_syncs_monitor(self, mock_pasteboard, pinned_path, ephemeral_path):
        sink = PasteboardSink(mock_pasteboard)
        store = HistoryStore(pinned_path, ephemeral_path, 1, sink=sink)
        monitor = ClipboardMonitor(store, pasteboard=mock_pasteboard)
        sink.attach(monitor)
        _copy_text(mock_pasteboard, "a", 1)
        monitor.check_clipboard()
        _copy_text(mock_pasteboard, "b", 2)
        monitor.check_clipboard()

        mock_pasteboard.changeCount.return_value = 3
        store.restore_to_buffer(store.ephemeral[1])

        mock_pasteboard.clearContents.assert_called()
        mock_pasteboard.setString_forType_.assert_called_with("a", PASTEBOARD_TYPE_STRING)
        assert monitor.check_clipboard() is False
        assert [i.content.value for i in store.ephemeral] == ["a", "b"]

    def test_attach(self, monitor, mock_pasteboard):
        sink = PasteboardSink(mock_pasteboard)
        sink.attach(monitor)
        mock_pasteboard.changeCount.return_value = 7
        sink.write(ClipboardContent.text("x"))
        assert monitor.check_clipboard() is False
