"""JSON persistence for the pinned and ephemeral collections.

Pinned file::

    [{"id": "<uuid>", "content": {"type": "text", "value": "..."}, "timestamp": "<iso>"}, ...]

Ephemeral file::

    {"bootSessionId": 1691234567, "items": [<item>, ...]}

The legacy schema stored bare content objects (``{"type", "value"}``) where
items now live. Files carry no version tag: the current schema is tried
first, then the legacy one.
"""
import base64
import json
import logging
import os
import tempfile
import uuid
from datetime import datetime
from pathlib import Path

from clipstash.models import ClipboardContent, ClipboardItem, ContentType

logger = logging.getLogger(__name__)

SESSION_KEY = "bootSessionId"


class CodecError(ValueError):
    """Raised when JSON data does not match the expected schema."""


def encode_content(content: ClipboardContent) -> dict:
    if content.is_text:
        value = content.value
    else:
        value = base64.b64encode(content.value).decode("ascii")
    return {"type": content.content_type.value, "value": value}


def decode_content(data) -> ClipboardContent:
    if not isinstance(data, dict):
        raise CodecError("content must be an object")
    try:
        content_type = ContentType(data["type"])
        value = data["value"]
    except (KeyError, ValueError) as e:
        raise CodecError(f"invalid content: {e}") from e
    if not isinstance(value, str):
        raise CodecError("content value must be a string")
    if content_type == ContentType.TEXT:
        return ClipboardContent.text(value)
    try:
        return ClipboardContent.image(base64.b64decode(value, validate=True))
    except ValueError as e:
        raise CodecError(f"invalid image data: {e}") from e


def encode_item(item: ClipboardItem) -> dict:
    return {
        "id": str(item.id),
        "content": encode_content(item.content),
        "timestamp": item.timestamp.isoformat(),
    }


def decode_item(data) -> ClipboardItem:
    if not isinstance(data, dict):
        raise CodecError("item must be an object")
    try:
        item_id = uuid.UUID(data["id"])
        timestamp = datetime.fromisoformat(data["timestamp"])
        content = decode_content(data["content"])
    except (KeyError, TypeError, AttributeError) as e:
        raise CodecError(f"invalid item: {e}") from e
    except CodecError:
        raise
    except ValueError as e:
        raise CodecError(f"invalid item: {e}") from e
    return ClipboardItem(content=content, id=item_id, timestamp=timestamp)


def _decode_list(data, decode) -> list:
    if not isinstance(data, list):
        raise CodecError("expected a list")
    return [decode(entry) for entry in data]


def atomic_write(path: str | Path, data: bytes) -> None:
    """Write ``data`` to ``path`` so readers only ever see a complete file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _dump(payload) -> bytes:
    # ASCII output escapes lone surrogates, which UTF-8 cannot encode
    return json.dumps(payload).encode("ascii")


def _read_json(path: Path):
    """Return parsed JSON, or ``None`` when the file is missing or unparsable."""
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError:
        logger.exception("Failed to read %s", path)
        return None
    try:
        return json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError):
        logger.warning("Ignoring unparsable history file %s", path)
        return None


def save_pinned(items: list[ClipboardItem], path: str | Path) -> None:
    atomic_write(path, _dump([encode_item(item) for item in items]))


def load_pinned(path: str | Path) -> list[ClipboardItem]:
    path = Path(path)
    data = _read_json(path)
    if data is None:
        return []

    try:
        return _decode_list(data, decode_item)
    except CodecError:
        pass

    try:
        legacy = _decode_list(data, decode_content)
    except CodecError:
        logger.warning("Pinned history at %s matches no known schema", path)
        return []

    items = [ClipboardItem.wrap(content) for content in legacy]
    logger.info("Migrating %d legacy pinned items in %s", len(items), path)
    try:
        save_pinned(items, path)
    except (OSError, ValueError):
        logger.exception("Failed to re-save migrated pinned items")
    return items


def save_ephemeral(items: list[ClipboardItem], session_id, path: str | Path) -> None:
    payload = {SESSION_KEY: session_id, "items": [encode_item(item) for item in items]}
    atomic_write(path, _dump(payload))


def _split_container(data) -> tuple:
    if not isinstance(data, dict) or SESSION_KEY not in data or "items" not in data:
        raise CodecError("expected an ephemeral container")
    return data[SESSION_KEY], data["items"]


def _discard_stale(path: Path) -> list[ClipboardItem]:
    logger.info("Discarding ephemeral history from a previous boot session")
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.exception("Failed to delete stale ephemeral history %s", path)
    return []


def load_ephemeral(path: str | Path, session_id) -> list[ClipboardItem]:
    path = Path(path)
    data = _read_json(path)
    if data is None:
        return []

    try:
        stored_session, raw_items = _split_container(data)
    except CodecError:
        logger.warning("Ephemeral history at %s matches no known schema", path)
        return []

    try:
        items = _decode_list(raw_items, decode_item)
    except CodecError:
        items = None

    if items is not None:
        if stored_session != session_id:
            return _discard_stale(path)
        return items

    try:
        legacy = _decode_list(raw_items, decode_content)
    except CodecError:
        logger.warning("Ephemeral history at %s matches no known schema", path)
        return []

    if stored_session != session_id:
        return _discard_stale(path)

    items = [ClipboardItem.wrap(content) for content in legacy]
    logger.info("Migrating %d legacy ephemeral items in %s", len(items), path)
    try:
        save_ephemeral(items, session_id, path)
    except (OSError, ValueError):
        logger.exception("Failed to re-save migrated ephemeral items")
    return items
