# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Watches content roots and refreshes the resolution cache on table changes.

Only files named like the redirect table directly inside a locale folder
(<root>/<locale>/_redirects.txt) are of interest. Every other event is
ignored.

Thread Safety:
- Events arrive on the watchdog observer thread
- RedirectResolver.load() takes the resolver's own lock
- Reload failures are logged, never raised into the observer thread
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, List, Optional, Union

from watchdog.events import FileMovedEvent, FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from locale_redirects.locales import VALID_LOCALES
from locale_redirects.models import RedirectError
from locale_redirects.resolver import RedirectResolver

if TYPE_CHECKING:
    from watchdog.observers.api import BaseObserver

logger = logging.getLogger(__name__)


class RedirectTableWatcher:
    """Reloads a locale's redirects whenever its table file changes.

    Usage:
        watcher = RedirectTableWatcher(resolver, [content_root, translated_root])
        watcher.start()
        # ... tables edited on disk are picked up ...
        watcher.stop()
    """

    def __init__(
        self,
        resolver: RedirectResolver,
        roots: Iterable[Union[str, Path, None]],
        filename: str = "_redirects.txt",
    ):
        """Initialize the watcher.

        Args:
            resolver: Cache to refresh.
            roots: Content roots to watch; None entries (unset roots) are skipped.
            filename: Name of the per-locale table file.
        """
        self.resolver = resolver
        self.roots: List[Path] = [Path(root).resolve() for root in roots if root]
        self.filename = filename

        self._observer: Optional[BaseObserver] = None
        self._event_handler = _TableEventHandler(self)

        logger.info(f"RedirectTableWatcher initialized for {len(self.roots)} roots")

    def locale_for(self, file_path: str) -> Optional[str]:
        """Locale whose table lives at file_path, or None if it isn't a table."""
        path = Path(file_path)
        if path.name != self.filename:
            return None
        locale = path.parent.name.lower()
        if locale not in VALID_LOCALES:
            return None
        if path.parent.parent.resolve() not in self.roots:
            return None
        return locale

    def table_changed(self, file_path: str) -> None:
        """Reload the locale owning file_path, if it is a redirect table."""
        locale = self.locale_for(file_path)
        if locale is None:
            return
        logger.info(f"Redirect table changed: {file_path}")
        try:
            self.resolver.load([locale])
        except (RedirectError, OSError, ValueError) as e:
            logger.error(f"Failed to reload redirects for {locale}: {e}")

    def start(self) -> None:
        """Start watching the content roots.

        Raises:
            RuntimeError: If watcher is already running
        """
        if self._observer is not None and self._observer.is_alive():
            raise RuntimeError("RedirectTableWatcher is already running")

        self._observer = Observer()
        for root in self.roots:
            self._observer.schedule(  # type: ignore  # watchdog types vary by version
                self._event_handler, str(root), recursive=True
            )
        self._observer.start()  # type: ignore  # watchdog types vary by version

        logger.info(f"RedirectTableWatcher started, monitoring {len(self.roots)} roots")

    def stop(self) -> None:
        """Stop watching; blocks until the observer thread terminates (with timeout)."""
        if self._observer is not None and self._observer.is_alive():
            self._observer.stop()  # type: ignore  # watchdog types vary by version
            self._observer.join(timeout=5.0)
            logger.info("RedirectTableWatcher stopped")

    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()


class _TableEventHandler(FileSystemEventHandler):
    """Internal event handler for watchdog.

    Delegates to RedirectTableWatcher for filtering and reloading.
    """

    def __init__(self, watcher: RedirectTableWatcher):
        super().__init__()
        self.watcher = watcher

    def _handle_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        # Convert path from Union[bytes, str] to str
        file_path = str(event.src_path)
        logger.debug(f"Event: {event.event_type} - {file_path}")
        self.watcher.table_changed(file_path)

    def on_created(self, event: FileSystemEvent) -> None:
        self._handle_event(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._handle_event(event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._handle_event(event)

    def on_moved(self, event: FileSystemEvent) -> None:
        """Handle file move/rename events.

        Treated as Delete (old path) + Create (new path). Atomic table
        writes arrive here as a temp file moved onto the table.
        """
        if event.is_directory:
            return

        if not isinstance(event, FileMovedEvent):
            return

        src_path = str(event.src_path)
        dest_path = str(event.dest_path)
        logger.debug(f"Event: moved - {src_path} -> {dest_path}")

        self.watcher.table_changed(src_path)
        if self.watcher.locale_for(dest_path) != self.watcher.locale_for(src_path):
            self.watcher.table_changed(dest_path)
