import pytest

from clipstash.models import ClipboardContent
from clipstash.store import HistoryStore

SESSION_ID = 1_700_000_000


class FakeSink:
    def __init__(self):
        self.written: list[ClipboardContent] = []

    def write(self, content: ClipboardContent) -> None:
        self.written.append(content)


@pytest.fixture
def pinned_path(tmp_path):
    return tmp_path / "pinned.json"


@pytest.fixture
def ephemeral_path(tmp_path):
    return tmp_path / "ephemeral.json"


@pytest.fixture
def sink():
    return FakeSink()


@pytest.fixture
def make_store(pinned_path, ephemeral_path, sink):
    """Factory fixture that opens a HistoryStore over tmp_path files."""

    def _make_store(max_pinned: int = 12, max_ephemeral: int = 100, session_id=SESSION_ID) -> HistoryStore:
        return HistoryStore(
            pinned_path,
            ephemeral_path,
            session_id,
            max_pinned=max_pinned,
            max_ephemeral=max_ephemeral,
            sink=sink,
        )

    return _make_store


@pytest.fixture
def store(make_store):
    return make_store()

