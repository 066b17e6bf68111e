import argparse
import logging
import sys

from clipstash.config import EPHEMERAL_PATH, LOG_PATH, PINNED_PATH, PREVIEW_LENGTH, load_settings
from clipstash.session import current_session_id
from clipstash.store import HistoryStore
from clipstash.utils import content_preview, ensure_dirs
from clipstash.views import filter_items


def open_store() -> HistoryStore:
    """Open the on-disk history without attaching a pasteboard."""
    settings = load_settings()
    return HistoryStore(
        PINNED_PATH,
        EPHEMERAL_PATH,
        current_session_id(),
        max_pinned=settings.max_pinned,
        max_ephemeral=settings.max_ephemeral,
    )


def list_history(query: str = "") -> int:
    """Print pinned and ephemeral items, most recent first, optionally filtered by ``query``."""
    store = open_store()
    pinned_count, ephemeral_count = store.counts()
    pinned = filter_items(store.pinned, query)
    ephemeral = filter_items(store.ephemeral, query)

    if query:
        print(f'Search: "{query}" ({len(pinned) + len(ephemeral)} results)')

    print(f"Pinned ({pinned_count}/{store.max_pinned}):")
    for i, item in enumerate(pinned, start=1):
        print(f"  {i:>3}. {content_preview(item.content, PREVIEW_LENGTH)}")

    print(f"History ({ephemeral_count}/{store.max_ephemeral}):")
    for i, item in enumerate(ephemeral, start=1):
        stamp = item.timestamp.strftime("%H:%M:%S")
        print(f"  {i:>3}. [{stamp}] {content_preview(item.content, PREVIEW_LENGTH)}")
    return 0


def clear_history() -> int:
    store = open_store()
    store.clear_ephemeral()
    print("Clipboard history cleared. Pinned items were kept.")
    return 0


def run_app():
    """Run the menu bar application."""
    ensure_dirs()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(LOG_PATH),
            logging.StreamHandler(sys.stderr),
        ],
    )

    from clipstash.app import ClipStashApp

    app = ClipStashApp()
    app.run()


def main():
    parser = argparse.ArgumentParser(
        description="ClipStash - clipboard history with pinned favorites",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  (none)   Run ClipStash in the menu bar
  list     Print pinned items and clipboard history
           (--search QUERY shows only matching text)
  clear    Clear clipboard history (pinned items are kept)
""",
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=["list", "clear"],
        help="Command to run",
    )
    parser.add_argument(
        "-s",
        "--search",
        default="",
        metavar="QUERY",
        help="With list: show only items whose text contains QUERY (case-insensitive)",
    )

    args = parser.parse_args()

    if args.command == "list":
        sys.exit(list_history(args.search))
    elif args.command == "clear":
        sys.exit(clear_history())
    else:
        run_app()


if __name__ == "__main__":
    main()
