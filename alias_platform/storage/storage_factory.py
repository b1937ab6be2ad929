"""
Store factory: build the alias store from configuration
=======================================================

Centralizes where the snapshot lives so the app and the CLI stay ignorant of
it. Reads settings **at call time** to avoid stale values in tests.

Environment variables
---------------------
- ALIAS_DB_PATH: snapshot file (default "db.json")
"""

import logging
from typing import Optional

from alias_platform.config import load_settings
from alias_platform.storage.storage import AliasStore

log = logging.getLogger("alias_platform.store")


def get_store(db_path: Optional[str] = None) -> AliasStore:
    """
    Return an `AliasStore` restored from the configured snapshot.

    Parameters
    ----------
    db_path : str, optional
        Snapshot file. If omitted, reads ALIAS_DB_PATH.

    Raises
    ------
    CorruptSnapshot
        The snapshot exists but cannot be decoded. Callers must not start.
    """
    path = db_path or load_settings().db_path
    log.info("Alias store snapshot: %s", path)
    return AliasStore.snapshot_load(path)
