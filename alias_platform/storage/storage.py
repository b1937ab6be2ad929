"""
Alias store for Alias Platform (in-memory table with snapshot persistence).

Responsibilities:
    - Create aliases (first writer wins, never overwrite)
    - Resolve aliases while counting visits, logging every 1000th visit
    - Report per-alias visit counts
    - Save the whole table to a snapshot file and restore it at boot

Design:
    - One `threading.Lock` guards the table. FastAPI runs sync routes in a
      thread pool, so every route and the persister thread go through it.
    - `snapshot_save` encodes under the table lock and writes outside it;
      a separate save lock keeps writers ordered so an older snapshot never
      replaces a newer one.
    - The raw dict is never handed out; callers get copies.

LLM Prompt Example:
    "Explain how a single lock around a dict gives linearizable create and
     lost-update-free increments, and why file I/O should stay outside it."
"""

import dataclasses
import logging
import threading
from typing import List, Optional, Tuple

from alias_platform.config import DEFAULT_DB_PATH
from alias_platform.errors import AliasConflict, AliasNotFound, InvalidAliasRequest
from .base import AliasRecord, AliasTable, BaseAliasStore
from .snapshot import encode_table, load_table, write_snapshot

log = logging.getLogger("alias_platform.store")

MILESTONE_EVERY = 1000


class AliasStore(BaseAliasStore):
    def __init__(self, path: str = DEFAULT_DB_PATH, table: Optional[AliasTable] = None):
        """
        Initialize the store.

        Args:
            path (str): Snapshot file used by `snapshot_save`.
            table (Optional[AliasTable]): Initial contents (copied).

        Internal schema:
            self._table = {alias: AliasRecord(alias, destination, visit_count)}
        """
        self.path = path
        self._table: AliasTable = dict(table) if table else {}
        self._lock = threading.Lock()
        self._save_lock = threading.Lock()

    @classmethod
    def snapshot_load(cls, path: str = DEFAULT_DB_PATH) -> "AliasStore":
        """
        Build a store from the snapshot at `path`.

        A missing file yields an empty store.

        Raises:
            CorruptSnapshot: the snapshot exists but cannot be decoded.
            SnapshotIOError: the snapshot exists but cannot be read.
        """
        return cls(path=path, table=load_table(path))

    def __len__(self) -> int:
        with self._lock:
            return len(self._table)

    def __contains__(self, alias: object) -> bool:
        with self._lock:
            return alias in self._table

    def create_alias(self, alias: str, destination: str) -> None:
        """
        Insert `alias -> destination` with a zero visit count.

        Rules:
            - Both alias and destination must be non-empty.
            - An existing alias is never overwritten.
            - The destination is stored as given; it is checked on redirect.

        Raises:
            InvalidAliasRequest: alias or destination is empty.
            AliasConflict: alias already exists.
        """
        if not alias:
            raise InvalidAliasRequest("Alias must not be empty")
        if not destination:
            raise InvalidAliasRequest("Destination URL must not be empty")

        with self._lock:
            if alias in self._table:
                raise AliasConflict(alias)
            self._table[alias] = AliasRecord(alias=alias, destination=destination)
            log.info("new alias created: %s -> %s", alias, destination)

    def resolve_and_count(self, alias: str) -> str:
        """
        Count one visit to `alias` and return its destination.

        The increment and the milestone check run under the same lock hold,
        so each multiple of 1000 is logged exactly once.

        Returns:
            str: Destination URL.

        Raises:
            AliasNotFound: alias is unknown (nothing is created).
        """
        with self._lock:
            record = self._table.get(alias)
            if record is None:
                raise AliasNotFound(alias)
            record.visit_count += 1
            if record.visit_count % MILESTONE_EVERY == 0:
                log.info(
                    "%s (%s) reached %d views!",
                    alias, record.destination, record.visit_count,
                )
            return record.destination

    def list_stats(self) -> List[Tuple[str, int]]:
        """
        Return `(alias, visit_count)` for every alias, in insertion order.

        The list is built under the lock, so no concurrent update is half
        visible.
        """
        with self._lock:
            return [(alias, rec.visit_count) for alias, rec in self._table.items()]

    def get_alias(self, alias: str) -> Optional[AliasRecord]:
        with self._lock:
            record = self._table.get(alias)
            return dataclasses.replace(record) if record is not None else None

    def snapshot_save(self) -> None:
        """
        Replace the snapshot file with the current table.

        Raises:
            SnapshotIOError: the file could not be written. The in-memory
                table is unaffected.
        """
        with self._save_lock:
            with self._lock:
                text = encode_table(self._table)
                count = len(self._table)
            write_snapshot(self.path, text)
        log.debug("Saved %d aliases to %s", count, self.path)
