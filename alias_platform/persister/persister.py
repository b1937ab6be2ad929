"""
Background persister for Alias Platform.

Responsibilities:
    - Checkpoint the alias store to its snapshot file on a fixed interval
    - Keep running through failed saves (log and retry next tick)

Design:
    - A daemon `threading.Thread` waiting on a `threading.Event`; `stop()`
      sets the event, so shutdown does not wait for a full interval.
    - Holds a reference to the store only; the store owns the table.
"""

import logging
import threading
from typing import Optional

from alias_platform.config import DEFAULT_PERSIST_INTERVAL
from alias_platform.errors import SnapshotIOError
from alias_platform.storage.base import BaseAliasStore

log = logging.getLogger("alias_platform.persister")


class SnapshotPersister:
    """Periodically calls `store.snapshot_save()` from a background thread."""

    def __init__(self, store: BaseAliasStore, interval: float = DEFAULT_PERSIST_INTERVAL):
        """
        Args:
            store (BaseAliasStore): Store to checkpoint.
            interval (float): Seconds between saves; must be positive.

        Raises:
            ValueError: interval is not positive.
        """
        if interval <= 0:
            raise ValueError("Persist interval must be positive")
        self.store = store
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Spawn the saver thread. Calling it on a running persister is a no-op."""
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop, name="alias-snapshot-persister", daemon=True
        )
        log.info("Spawning snapshot persister (every %.1fs)", self.interval)
        self._thread.start()

    def stop(self, flush: bool = False, timeout: Optional[float] = None) -> None:
        """
        Stop the saver thread and wait for it.

        Args:
            flush (bool): Write one last snapshot after the thread exits.
            timeout (Optional[float]): Max seconds to wait for the thread.
        """
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        if flush:
            log.info("Flushing final snapshot")
            self.run_once()
        log.info("Snapshot persister stopped")

    def run_once(self) -> bool:
        """
        Perform a single save.

        Returns:
            bool: True if the snapshot was written, False if it failed.
        """
        try:
            self.store.snapshot_save()
        except SnapshotIOError as exc:
            log.error("Failed to save snapshot: %s", exc)
            return False
        except Exception:
            # The loop outlives any single failed tick
            log.exception("Unexpected error while saving snapshot")
            return False
        return True

    def _loop(self) -> None:
        while not self._stop.wait(self.interval):
            self.run_once()
