import os
from dataclasses import dataclass
from pathlib import Path

DATA_DIR = Path(os.environ.get("CLIPSTASH_DATA_DIR", Path.home() / ".local" / "share" / "clipstash"))
PINNED_PATH = DATA_DIR / "pinned.json"
EPHEMERAL_PATH = DATA_DIR / "ephemeral.json"
LOG_PATH = DATA_DIR / "clipstash.log"

MAX_TEXT_SIZE = 1_000_000  # 1MB text limit
MAX_IMAGE_SIZE = 10_000_000  # 10MB image limit
PREVIEW_LENGTH = 60  # characters shown in menu item
MENU_DISPLAY_COUNT = 25

DEFAULT_MAX_PINNED = 12
DEFAULT_MAX_EPHEMERAL = 100
DEFAULT_POLL_INTERVAL = 0.5  # seconds between clipboard checks

SORT_MODES = ("recent", "alphabetical")
TYPE_FILTERS = ("all", "textOnly", "imagesOnly")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_int(name: str, default: int, minimum: int, maximum: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(minimum, min(maximum, value))


def _parse_float(name: str, default: float, minimum: float, maximum: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    if value != value:  # NaN
        return default
    return max(minimum, min(maximum, value))


def _parse_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return default


def _parse_choice(name: str, default: str, choices: tuple[str, ...]) -> str:
    raw = os.environ.get(name)
    if raw is None or raw not in choices:
        return default
    return raw


@dataclass(frozen=True)
class Settings:
    max_pinned: int = DEFAULT_MAX_PINNED
    max_ephemeral: int = DEFAULT_MAX_EPHEMERAL
    poll_interval: float = DEFAULT_POLL_INTERVAL
    clear_on_quit: bool = False
    sort_mode: str = "recent"
    type_filter: str = "all"
    group_by_type: bool = False


def load_settings() -> Settings:
    """Read user preferences from ``CLIPSTASH_*`` environment variables."""
    return Settings(
        max_pinned=_parse_int("CLIPSTASH_MAX_PINNED", DEFAULT_MAX_PINNED, 0, 100),
        max_ephemeral=_parse_int("CLIPSTASH_MAX_EPHEMERAL", DEFAULT_MAX_EPHEMERAL, 0, 10_000),
        poll_interval=_parse_float("CLIPSTASH_POLL_INTERVAL", DEFAULT_POLL_INTERVAL, 0.1, 10.0),
        clear_on_quit=_parse_bool("CLIPSTASH_CLEAR_ON_QUIT", False),
        sort_mode=_parse_choice("CLIPSTASH_SORT_MODE", "recent", SORT_MODES),
        type_filter=_parse_choice("CLIPSTASH_TYPE_FILTER", "all", TYPE_FILTERS),
        group_by_type=_parse_bool("CLIPSTASH_GROUP_BY_TYPE", False),
    )
