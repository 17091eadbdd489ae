"""
Vault file system watcher (polling-based).

Notes may live on a mounted volume that does not deliver change events, so
changes are found by comparing modification times between polls.

The watcher runs a daemon thread that:
1. Lists every document in the store every POLL_INTERVAL seconds
2. Compares mtimes against the previous poll
3. Enqueues one cache rebuild if any document changed, appeared, or disappeared
"""

import logging
import os
import threading
from typing import Dict, Optional

from tasks_overview.store.documents import FileSystemDocumentStore

log = logging.getLogger(__name__)

# Default polling interval in seconds (configurable via POLL_INTERVAL env var)
_DEFAULT_POLL_INTERVAL = 5.0


class VaultWatcher:
    """
    Polling-based vault watcher.

    Usage:
        watcher = VaultWatcher(cache, store)
        watcher.start()
        ...
        watcher.stop()
    """

    def __init__(
        self,
        cache,
        store: FileSystemDocumentStore,
        poll_interval: Optional[float] = None,
    ) -> None:
        self._cache = cache
        self._store = store
        self._poll_interval = poll_interval or float(
            os.environ.get("POLL_INTERVAL", _DEFAULT_POLL_INTERVAL)
        )
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        # Known documents and their mtimes from the last poll cycle
        self._known: Dict[str, float] = {}

    def start(self) -> None:
        """Start the polling thread (daemon)."""
        log.info("Starting vault watcher (polling every %.1fs)", self._poll_interval)
        self._known = self._store.mtimes()
        self._thread = threading.Thread(
            target=self._poll_loop, daemon=True, name="vault-watcher"
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the poll thread to stop and wait for it."""
        log.info("Stopping vault watcher")
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=self._poll_interval + 2)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _poll_loop(self) -> None:
        """Main polling loop; runs until stop_event is set."""
        while not self._stop_event.is_set():
            self._stop_event.wait(self._poll_interval)
            if self._stop_event.is_set():
                break
            try:
                self.check_for_changes()
            except Exception:
                log.exception("Error during poll cycle")

    def check_for_changes(self) -> bool:
        """Single poll cycle. Returns True if a rebuild was enqueued."""
        current = self._store.mtimes()
        changed = False

        for source_id, mtime in current.items():
            old_mtime = self._known.get(source_id)
            if old_mtime is None:
                log.debug("New document detected: %s", source_id)
                changed = True
            elif mtime > old_mtime:
                log.debug("Modified document: %s", source_id)
                changed = True

        for source_id in self._known:
            if source_id not in current:
                log.debug("Deleted document: %s", source_id)
                changed = True

        self._known = current
        if changed:
            self._cache.enqueue_rebuild()
        return changed
