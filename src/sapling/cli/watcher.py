"""
FileSystem Watcher Module.

Keeps a component tree in sync with the files on disk. Saved, created,
moved and deleted source files are routed to TreeStore.update_tree; a
change to the configured tsconfig or webpack config re-traverses the
whole tree.

Key Components:
- TreeUpdateHandler: watchdog handler that filters and dispatches events.
- TreeWatcher: Main controller that owns the observer loop.
"""

import logging
import time
from pathlib import Path
from typing import Dict, Optional, Set

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..config import is_external_package_path, is_source_file
from ..core.errors import SaplingError
from ..tree.builder import normalize_path
from ..tree.store import TreeStore

logger = logging.getLogger(__name__)


class TreeUpdateHandler(FileSystemEventHandler):
    """
    Handles file system events and triggers tree updates.

    Only source files and the configured alias configs are considered;
    anything inside node_modules is ignored.
    """

    def __init__(self, store: TreeStore):
        self.store = store
        self._last_seen: Dict[str, Optional[float]] = {}

    def on_modified(self, event: FileSystemEvent) -> None:
        """Handle file modification events."""
        if event.is_directory:
            return
        self._process_file(Path(event.src_path))

    def on_created(self, event: FileSystemEvent) -> None:
        """Handle file creation events."""
        if event.is_directory:
            return
        self._process_file(Path(event.src_path))

    def on_deleted(self, event: FileSystemEvent) -> None:
        """Handle file deletion events."""
        if event.is_directory:
            return
        self._process_file(Path(event.src_path))

    def on_moved(self, event: FileSystemEvent) -> None:
        """Handle file move/rename events."""
        if event.is_directory:
            return
        self._process_file(Path(event.src_path))
        self._process_file(Path(event.dest_path))

    def watched_configs(self) -> Set[Path]:
        settings = self.store.settings
        return {
            normalize_path(settings.resolve_path(value))
            for value in (settings.ts_config, settings.webpack_config)
            if value
        }

    def should_process(self, file_path: Path) -> bool:
        path = normalize_path(file_path)
        if path in self.watched_configs():
            return True
        return is_source_file(path) and not is_external_package_path(path)

    def _process_file(self, file_path: Path) -> None:
        if not self.should_process(file_path):
            return

        path = normalize_path(file_path)
        # Editors often emit several modified events for one save
        mtime = path.stat().st_mtime if path.exists() else None
        key = str(path)
        if key in self._last_seen and self._last_seen[key] == mtime:
            logger.debug(f"Skipping repeated event for {path}")
            return
        self._last_seen[key] = mtime

        logger.info(f"⚡ Change detected: {path.name}")
        try:
            self.store.update_tree(path)
        except SaplingError as e:
            logger.error(f"❌ Tree update failed: {e}")
        except Exception as e:
            logger.error(f"❌ Tree update failed for {path}: {e}", exc_info=True)


class TreeWatcher:
    """
    Main controller for the watch process.
    """

    def __init__(self, store: TreeStore, root_dir: Path):
        self.store = store
        self.root_dir = root_dir
        self.observer: Optional[Observer] = None

    def start(self, block: bool = True) -> None:
        """Start the observer; with block=True, run until interrupted."""
        handler = TreeUpdateHandler(self.store)

        self.observer = Observer()
        self.observer.schedule(handler, str(self.root_dir), recursive=True)
        for config in handler.watched_configs():
            # Configs may live outside the watched root
            if self.root_dir not in config.parents:
                self.observer.schedule(handler, str(config.parent), recursive=False)
        self.observer.start()

        logger.info(f"👀 Watching {self.root_dir} for changes. Press Ctrl+C to stop.")

        if not block:
            return
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            self.stop()

    def stop(self) -> None:
        """Gracefully stop the watcher."""
        logger.info("Stopping watcher...")
        if self.observer:
            self.observer.stop()
            self.observer.join()
            self.observer = None
