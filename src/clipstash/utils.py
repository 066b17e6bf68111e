import struct

from clipstash.config import DATA_DIR
from clipstash.models import ClipboardContent

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def truncate_text(text: str, max_len: int) -> str:
    single_line = " ".join(text.split())
    if len(single_line) <= max_len:
        return single_line
    return single_line[: max_len - 3] + "..."


def ensure_dirs() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)


def is_png(data: bytes) -> bool:
    return data[:8] == PNG_SIGNATURE


def get_image_dimensions(png_bytes: bytes) -> tuple[int, int]:
    if len(png_bytes) < 24 or not is_png(png_bytes):
        return (0, 0)
    width = struct.unpack(">I", png_bytes[16:20])[0]
    height = struct.unpack(">I", png_bytes[20:24])[0]
    return (width, height)


def content_preview(content: ClipboardContent, max_len: int) -> str:
    if content.is_text:
        return truncate_text(content.value, max_len)
    width, height = get_image_dimensions(content.value)
    return f"[Image: {width}x{height}]" if width > 0 else "[Image]"
