import logging
from collections.abc import Callable

from clipstash.config import MAX_IMAGE_SIZE, MAX_TEXT_SIZE
from clipstash.models import ClipboardContent
from clipstash.store import HistoryStore
from clipstash.utils import is_png

logger = logging.getLogger(__name__)

# Pasteboard type identifiers (NSPasteboardTypeString, NSPasteboardTypePNG, NSPasteboardTypeTIFF)
PASTEBOARD_TYPE_STRING = "public.utf8-plain-text"
PASTEBOARD_TYPE_PNG = "public.png"
PASTEBOARD_TYPE_TIFF = "public.tiff"


def general_pasteboard():
    from AppKit import NSPasteboard

    return NSPasteboard.generalPasteboard()


class ClipboardMonitor:
    """Polls the pasteboard change counter and feeds new content into the store."""

    def __init__(self, store: HistoryStore, pasteboard=None, on_change: Callable[[], None] | None = None):
        self._store = store
        self._on_change = on_change
        self._pasteboard = pasteboard if pasteboard is not None else general_pasteboard()
        self._last_change_count = self._pasteboard.changeCount()

    def check_clipboard(self) -> bool:
        current_count = self._pasteboard.changeCount()
        if current_count == self._last_change_count:
            return False

        self._last_change_count = current_count

        try:
            content = self._read_clipboard()
            if content is None:
                return False

            if not self._store.insert_captured(content):
                return False

            if self._on_change:
                self._on_change()
            return True
        except Exception:
            logger.exception("Error reading clipboard")
            return False

    def sync_change_count(self) -> None:
        self._last_change_count = self._pasteboard.changeCount()

    def _read_clipboard(self) -> ClipboardContent | None:
        types = self._pasteboard.types()
        if types is None:
            return None

        if PASTEBOARD_TYPE_STRING in types:
            content = self._read_text()
            if content:
                return content

        for img_type in (PASTEBOARD_TYPE_PNG, PASTEBOARD_TYPE_TIFF):
            if img_type in types:
                content = self._read_image(img_type)
                if content:
                    return content

        return None

    def _read_text(self) -> ClipboardContent | None:
        text = self._pasteboard.stringForType_(PASTEBOARD_TYPE_STRING)
        if not text:
            return None

        content = ClipboardContent.text(str(text))
        if content.byte_size > MAX_TEXT_SIZE:
            logger.warning("Text too large (%d bytes), skipping", content.byte_size)
            return None

        return content

    def _read_image(self, img_type: str) -> ClipboardContent | None:
        data = self._pasteboard.dataForType_(img_type)
        if data is None:
            return None

        content = ClipboardContent.image(bytes(data))
        if content.byte_size > MAX_IMAGE_SIZE:
            logger.warning("Image too large (%d bytes), skipping", content.byte_size)
            return None

        return content


class PasteboardSink:
    """Writes restored content back onto the pasteboard."""

    def __init__(self, pasteboard=None, monitor: ClipboardMonitor | None = None):
        self._pasteboard = pasteboard if pasteboard is not None else general_pasteboard()
        self._monitor = monitor

    def attach(self, monitor: ClipboardMonitor) -> None:
        self._monitor = monitor

    def write(self, content: ClipboardContent) -> None:
        self._pasteboard.clearContents()
        if content.is_text:
            self._pasteboard.setString_forType_(content.value, PASTEBOARD_TYPE_STRING)
        else:
            from Foundation import NSData

            img_type = PASTEBOARD_TYPE_PNG if is_png(content.value) else PASTEBOARD_TYPE_TIFF
            ns_data = NSData.dataWithBytes_length_(content.value, len(content.value))
            self._pasteboard.setData_forType_(ns_data, img_type)

        # Restored content is already in the history
        if self._monitor is not None:
            self._monitor.sync_change_count()
