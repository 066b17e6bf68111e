"""Menu layout computed from store snapshots, kept free of rumps for testability."""
from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

from clipstash.config import MENU_DISPLAY_COUNT, PREVIEW_LENGTH, Settings
from clipstash.models import ClipboardItem
from clipstash.utils import content_preview
from clipstash.views import DataTypeFilter, SortMode, filter_items, group_by_type, sort_items

PINNED_PREFIX = "📌 "


@dataclass
class MenuItemSpec:
    """Specification for a menu item, separating logic from rumps rendering."""

    title: str
    callback: Callable | None = None
    item_id: UUID | None = None
    is_submenu: bool = False
    children: list["MenuItemSpec | None"] | None = None


@dataclass
class MenuCallbacks:
    on_item: Callable
    on_clear: Callable
    on_quit: Callable


def entry_spec(item: ClipboardItem, on_item: Callable) -> MenuItemSpec:
    return MenuItemSpec(
        title=content_preview(item.content, PREVIEW_LENGTH) or "(empty)",
        callback=on_item,
        item_id=item.id,
    )


def view_summary(settings: Settings) -> str:
    sort_mode = SortMode(settings.sort_mode)
    type_filter = DataTypeFilter(settings.type_filter)
    return f"Showing: {type_filter.display_name}, {sort_mode.display_name}"


def _visible(items: list[ClipboardItem], settings: Settings) -> list[ClipboardItem]:
    filtered = filter_items(items, type_filter=DataTypeFilter(settings.type_filter))
    return sort_items(filtered, SortMode(settings.sort_mode))


def build_menu_specs(
    pinned: list[ClipboardItem],
    ephemeral: list[ClipboardItem],
    settings: Settings,
    callbacks: MenuCallbacks,
    header: str = "Clipboard History",
) -> list[MenuItemSpec | None]:
    specs: list[MenuItemSpec | None] = [MenuItemSpec(header), None]

    visible_pinned = _visible(pinned, settings)
    if visible_pinned:
        children = [entry_spec(item, callbacks.on_item) for item in visible_pinned]
        specs.append(MenuItemSpec(f"{PINNED_PREFIX}Pinned ({len(pinned)}/{settings.max_pinned})", is_submenu=True, children=children))
        specs.append(None)

    visible = _visible(ephemeral, settings)[:MENU_DISPLAY_COUNT]
    if not visible and not visible_pinned:
        specs.append(MenuItemSpec("(No clipboard history)"))
    elif settings.group_by_type:
        text_items, image_items = group_by_type(visible)
        for label, group in (("Text", text_items), ("Images", image_items)):
            if group:
                specs.append(MenuItemSpec(label))
                specs.extend(entry_spec(item, callbacks.on_item) for item in group)
    else:
        specs.extend(entry_spec(item, callbacks.on_item) for item in visible)

    specs.extend([
        None,
        MenuItemSpec(view_summary(settings)),
        MenuItemSpec("Hold ⌥ while clicking to pin or unpin"),
        MenuItemSpec("Clear History", callback=callbacks.on_clear),
        None,
        MenuItemSpec("Quit", callback=callbacks.on_quit),
    ])
    return specs
