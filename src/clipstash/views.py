"""Sorting and filtering for display. These return new lists and never touch stored order."""
from enum import Enum

from clipstash.models import ClipboardItem


class SortMode(str, Enum):
    RECENT = "recent"
    ALPHABETICAL = "alphabetical"

    @property
    def display_name(self) -> str:
        return {SortMode.RECENT: "Most Recent", SortMode.ALPHABETICAL: "Alphabetical"}[self]


class DataTypeFilter(str, Enum):
    ALL = "all"
    TEXT_ONLY = "textOnly"
    IMAGES_ONLY = "imagesOnly"

    @property
    def display_name(self) -> str:
        return {
            DataTypeFilter.ALL: "All Types",
            DataTypeFilter.TEXT_ONLY: "Text Only",
            DataTypeFilter.IMAGES_ONLY: "Images Only",
        }[self]

    def allows(self, item: ClipboardItem) -> bool:
        if self == DataTypeFilter.TEXT_ONLY:
            return item.content.is_text
        if self == DataTypeFilter.IMAGES_ONLY:
            return item.content.is_image
        return True


def filter_items(
    items: list[ClipboardItem],
    query: str = "",
    type_filter: DataTypeFilter = DataTypeFilter.ALL,
) -> list[ClipboardItem]:
    return [item for item in items if item.content.matches_search(query) and type_filter.allows(item)]


def sort_items(items: list[ClipboardItem], mode: SortMode = SortMode.RECENT) -> list[ClipboardItem]:
    if mode == SortMode.ALPHABETICAL:
        return sorted(items, key=lambda item: item.content.text_representation.casefold())
    return list(items)


def group_by_type(items: list[ClipboardItem]) -> tuple[list[ClipboardItem], list[ClipboardItem]]:
    text_items = [item for item in items if item.content.is_text]
    image_items = [item for item in items if item.content.is_image]
    return text_items, image_items
