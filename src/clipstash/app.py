import logging

import rumps

from clipstash import __version__
from clipstash.config import EPHEMERAL_PATH, PINNED_PATH, load_settings
from clipstash.menu import MenuCallbacks, MenuItemSpec, build_menu_specs
from clipstash.monitor import ClipboardMonitor, PasteboardSink, general_pasteboard
from clipstash.session import current_session_id
from clipstash.store import HistoryStore
from clipstash.utils import ensure_dirs

logger = logging.getLogger(__name__)

ENTRY_KEY_PREFIX = "clipstash_entry_"


class ClipStashApp(rumps.App):
    def __init__(self):
        super().__init__("ClipStash", title="📋", quit_button=None)
        self._init_app()

    def _init_app(self) -> None:
        """Initialize app components. Separated for testability."""
        ensure_dirs()
        self._settings = load_settings()
        pasteboard = general_pasteboard()
        sink = PasteboardSink(pasteboard)
        self._store = HistoryStore(
            PINNED_PATH,
            EPHEMERAL_PATH,
            current_session_id(),
            max_pinned=self._settings.max_pinned,
            max_ephemeral=self._settings.max_ephemeral,
            sink=sink,
        )
        self._monitor = ClipboardMonitor(self._store, pasteboard=pasteboard)
        sink.attach(self._monitor)
        self._store.add_listener(self._refresh_menu)
        self._entry_ids: dict[str, object] = {}
        self._build_menu()
        self._timer = rumps.Timer(self._poll_clipboard, self._settings.poll_interval)
        self._timer.start()

    def _build_menu(self) -> None:
        self.menu.clear()
        self._entry_ids.clear()
        callbacks = MenuCallbacks(on_item=self._on_entry_click, on_clear=self._on_clear, on_quit=self._on_quit)
        specs = build_menu_specs(
            self._store.pinned,
            self._store.ephemeral,
            self._settings,
            callbacks,
            header=f"ClipStash v{__version__}",
        )
        self.menu = [self._render_single_spec(spec) for spec in specs]

    def _render_single_spec(self, spec: MenuItemSpec | None) -> rumps.MenuItem | None:
        if spec is None:
            return None

        if spec.is_submenu and spec.children:
            submenu = rumps.MenuItem(spec.title)
            for child in spec.children:
                submenu.add(self._render_single_spec(child))
            return submenu

        item = rumps.MenuItem(spec.title, callback=spec.callback)
        if spec.item_id is not None:
            key = f"{ENTRY_KEY_PREFIX}{spec.item_id}"
            self._entry_ids[key] = spec.item_id
            item._id = key
        return item

    def _refresh_menu(self) -> None:
        self._build_menu()

    def _poll_clipboard(self, _sender) -> None:
        self._monitor.check_clipboard()

    def _on_entry_click(self, sender) -> None:
        item_id = self._entry_ids.get(getattr(sender, "_id", ""))
        if item_id is None:
            return

        item = self._store.find(item_id)
        if item is None:
            return

        # Option-click toggles the pin instead of copying
        try:
            from AppKit import NSAlternateKeyMask, NSEvent

            if NSEvent.modifierFlags() & NSAlternateKeyMask:
                self._on_pin_toggle(item)
                return
        except Exception:
            logger.debug("Could not read modifier flags", exc_info=True)

        self._store.restore_to_buffer(item)

    def _on_pin_toggle(self, item) -> None:
        if self._store.is_pinned(item):
            self._store.unpin(item)
            rumps.notification("ClipStash", "", "Unpinned", sound=False)
            return

        if self._store.pin(item):
            rumps.notification("ClipStash", "", "Pinned", sound=False)
        else:
            rumps.notification("ClipStash", "", f"Already pinned or limit of {self._store.max_pinned} reached", sound=False)

    def _on_clear(self, _sender) -> None:
        if rumps.alert("ClipStash", "Clear clipboard history?", ok="Clear", cancel="Cancel"):
            self._store.clear_ephemeral()

    def _on_quit(self, _sender) -> None:
        self._timer.stop()
        self._store.on_quit(self._settings.clear_on_quit)
        rumps.quit_application()
