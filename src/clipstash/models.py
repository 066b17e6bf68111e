import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ContentType(str, Enum):
    TEXT = "text"
    IMAGE = "image"


@dataclass(frozen=True)
class ClipboardContent:
    """A captured clipboard payload. Equal when type and payload are equal."""

    content_type: ContentType
    value: str | bytes

    @classmethod
    def text(cls, value: str) -> "ClipboardContent":
        return cls(ContentType.TEXT, value)

    @classmethod
    def image(cls, data: bytes) -> "ClipboardContent":
        return cls(ContentType.IMAGE, bytes(data))

    @classmethod
    def from_event(cls, kind: str, payload: str | bytes) -> "ClipboardContent":
        """Build content from a change-source ``(kind, payload)`` event."""
        content_type = ContentType(kind)
        if content_type == ContentType.TEXT:
            if not isinstance(payload, str):
                raise ValueError("text payload must be str")
            return cls.text(payload)
        if not isinstance(payload, (bytes, bytearray)):
            raise ValueError("image payload must be bytes")
        return cls.image(payload)

    @property
    def is_text(self) -> bool:
        return self.content_type == ContentType.TEXT

    @property
    def is_image(self) -> bool:
        return self.content_type == ContentType.IMAGE

    @property
    def text_representation(self) -> str:
        return self.value if self.is_text else "Image"

    @property
    def byte_size(self) -> int:
        if self.is_text:
            return len(self.value.encode("utf-8", errors="surrogatepass"))
        return len(self.value)

    def matches_search(self, query: str) -> bool:
        if not query:
            return True
        if self.is_text:
            return query.casefold() in self.value.casefold()
        # Images carry no searchable text
        return False


@dataclass(eq=False)
class ClipboardItem:
    content: ClipboardContent
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def wrap(cls, content: ClipboardContent) -> "ClipboardItem":
        return cls(content=content)

    def __eq__(self, other):
        if not isinstance(other, ClipboardItem):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)
