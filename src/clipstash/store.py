import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Protocol
from uuid import UUID

from clipstash.codec import load_ephemeral, load_pinned, save_ephemeral, save_pinned
from clipstash.config import DEFAULT_MAX_EPHEMERAL, DEFAULT_MAX_PINNED
from clipstash.models import ClipboardContent, ClipboardItem

logger = logging.getLogger(__name__)


class ClipboardSink(Protocol):
    def write(self, content: ClipboardContent) -> None: ...


class HistoryStore:
    """Owns the pinned and ephemeral collections.

    Every mutation is written to disk right away. Write failures are logged
    and the in-memory state is kept, so the running session never loses
    data because of a full or read-only disk.
    """

    def __init__(
        self,
        pinned_path: str | Path,
        ephemeral_path: str | Path,
        session_id,
        max_pinned: int = DEFAULT_MAX_PINNED,
        max_ephemeral: int = DEFAULT_MAX_EPHEMERAL,
        sink: ClipboardSink | None = None,
    ):
        self._pinned_path = Path(pinned_path)
        self._ephemeral_path = Path(ephemeral_path)
        self._session_id = session_id
        self._max_pinned = max(0, max_pinned)
        self._max_ephemeral = max(0, max_ephemeral)
        self._sink = sink
        self._lock = threading.RLock()
        self._listeners: list[Callable[[], None]] = []
        self._pinned: list[ClipboardItem] = load_pinned(self._pinned_path)
        self._ephemeral: list[ClipboardItem] = load_ephemeral(self._ephemeral_path, self._session_id)

    @property
    def pinned(self) -> list[ClipboardItem]:
        with self._lock:
            return list(self._pinned)

    @property
    def ephemeral(self) -> list[ClipboardItem]:
        with self._lock:
            return list(self._ephemeral)

    @property
    def max_pinned(self) -> int:
        return self._max_pinned

    @property
    def max_ephemeral(self) -> int:
        return self._max_ephemeral

    @property
    def session_id(self):
        return self._session_id

    def counts(self) -> tuple[int, int]:
        with self._lock:
            return len(self._pinned), len(self._ephemeral)

    def find(self, item_id: UUID) -> ClipboardItem | None:
        with self._lock:
            for item in self._pinned + self._ephemeral:
                if item.id == item_id:
                    return item
        return None

    def is_pinned(self, item: ClipboardItem) -> bool:
        with self._lock:
            return item in self._pinned

    # Observers

    def add_listener(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[], None]) -> None:
        try:
            self._listeners.remove(callback)
        except ValueError:
            pass

    def _notify(self) -> None:
        for callback in list(self._listeners):
            try:
                callback()
            except Exception:
                logger.exception("History listener failed")

    # Persistence

    def _save_pinned(self) -> None:
        try:
            save_pinned(self._pinned, self._pinned_path)
        except (OSError, ValueError):
            logger.exception("Failed to save pinned items to %s", self._pinned_path)

    def _save_ephemeral(self) -> None:
        try:
            save_ephemeral(self._ephemeral, self._session_id, self._ephemeral_path)
        except (OSError, ValueError):
            logger.exception("Failed to save ephemeral items to %s", self._ephemeral_path)

    def _trim_ephemeral(self) -> int:
        excess = len(self._ephemeral) - self._max_ephemeral
        if excess <= 0:
            return 0
        del self._ephemeral[self._max_ephemeral:]
        return excess

    @staticmethod
    def _index_of(items: list[ClipboardItem], item: ClipboardItem) -> int | None:
        for i, existing in enumerate(items):
            if existing.id == item.id:
                return i
        return None

    # Operations

    def insert_captured(self, content: ClipboardContent) -> bool:
        """Record newly copied content at the head of the ephemeral history.

        Returns False when ``content`` equals the current head.
        """
        with self._lock:
            if self._ephemeral and self._ephemeral[0].content == content:
                return False
            self._ephemeral.insert(0, ClipboardItem.wrap(content))
            self._trim_ephemeral()
            self._save_ephemeral()
        self._notify()
        return True

    def restore_to_buffer(self, item: ClipboardItem) -> None:
        if self._sink is not None:
            try:
                self._sink.write(item.content)
            except Exception:
                logger.exception("Failed to write item to the clipboard")

        with self._lock:
            idx = self._index_of(self._ephemeral, item)
            if idx is None:
                return
            del self._ephemeral[idx]
            self._ephemeral.insert(0, ClipboardItem.wrap(item.content))
            self._save_ephemeral()
        self._notify()

    def pin(self, item: ClipboardItem) -> bool:
        with self._lock:
            if any(p.content == item.content for p in self._pinned):
                return False
            if len(self._pinned) >= self._max_pinned:
                return False

            idx = self._index_of(self._ephemeral, item)
            if idx is not None:
                del self._ephemeral[idx]
                self._save_ephemeral()

            self._pinned.insert(0, ClipboardItem.wrap(item.content))
            self._save_pinned()
        self._notify()
        return True

    def unpin(self, item: ClipboardItem) -> bool:
        with self._lock:
            idx = self._index_of(self._pinned, item)
            if idx is None:
                return False
            del self._pinned[idx]
            self._ephemeral.insert(0, ClipboardItem.wrap(item.content))
            self._trim_ephemeral()
            self._save_pinned()
            self._save_ephemeral()
        self._notify()
        return True

    def delete_ephemeral(self, item: ClipboardItem) -> bool:
        with self._lock:
            idx = self._index_of(self._ephemeral, item)
            if idx is None:
                return False
            del self._ephemeral[idx]
            self._save_ephemeral()
        self._notify()
        return True

    def delete_pinned(self, item: ClipboardItem) -> bool:
        with self._lock:
            idx = self._index_of(self._pinned, item)
            if idx is None:
                return False
            del self._pinned[idx]
            self._save_pinned()
        self._notify()
        return True

    def clear_ephemeral(self) -> None:
        with self._lock:
            self._ephemeral.clear()
            self._save_ephemeral()
        self._notify()

    def reorder_pinned(self, from_index: int, to_index: int) -> bool:
        """Move the pinned item at ``from_index`` so it ends up at ``to_index``."""
        with self._lock:
            count = len(self._pinned)
            if not (0 <= from_index < count and 0 <= to_index < count):
                return False
            if from_index != to_index:
                self._pinned.insert(to_index, self._pinned.pop(from_index))
            self._save_pinned()
        self._notify()
        return True

    def set_limits(self, max_pinned: int, max_ephemeral: int) -> None:
        # A lower pinned cap never evicts existing pins, it only blocks new ones
        with self._lock:
            self._max_pinned = max(0, max_pinned)
            self._max_ephemeral = max(0, max_ephemeral)
            trimmed = self._trim_ephemeral()
            if trimmed:
                self._save_ephemeral()
        if trimmed:
            self._notify()

    def on_quit(self, clear_on_quit: bool) -> None:
        if clear_on_quit:
            self.clear_ephemeral()
