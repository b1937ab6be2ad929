"""
Snapshot codec for Alias Platform.

The whole alias table is persisted as one JSON object, destination first and
count second, so a saved file diffs cleanly and reloads to the same table:

    {
      "docs": ["https://example.com/docs", 12],
      "home": ["https://example.com", 0]
    }

Writes go to a temporary file in the same directory and are moved into place
with `os.replace`, so readers never see a half-written snapshot.
"""

import json
import logging
import os
import tempfile
from typing import Optional

from alias_platform.errors import CorruptSnapshot, SnapshotIOError
from .base import AliasRecord, AliasTable

log = logging.getLogger("alias_platform.snapshot")


def encode_table(table: AliasTable) -> str:
    """Serialize the table to the snapshot document."""
    payload = {alias: [rec.destination, rec.visit_count] for alias, rec in table.items()}
    return json.dumps(payload, indent=2, ensure_ascii=False)


def decode_table(text: str, path: str = "<memory>") -> AliasTable:
    """
    Parse a snapshot document back into a table.

    Raises:
        CorruptSnapshot: invalid JSON, or a document that does not match
            the `{alias: [destination, count]}` shape.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CorruptSnapshot(path, f"invalid JSON ({exc})") from exc

    if not isinstance(payload, dict):
        raise CorruptSnapshot(path, "top-level value must be an object")

    table: AliasTable = {}
    for alias, value in payload.items():
        if not alias:
            raise CorruptSnapshot(path, "empty alias key")
        if not isinstance(value, list) or len(value) != 2:
            raise CorruptSnapshot(path, f"record for {alias!r} must be [destination, count]")
        destination, count = value
        if not isinstance(destination, str):
            raise CorruptSnapshot(path, f"destination for {alias!r} must be a string")
        # bool is an int subclass; reject it explicitly
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise CorruptSnapshot(path, f"count for {alias!r} must be a non-negative integer")
        table[alias] = AliasRecord(alias=alias, destination=destination, visit_count=count)
    return table


def read_snapshot(path: str) -> Optional[str]:
    """
    Return the raw snapshot text, or None when the file does not exist.

    Raises:
        SnapshotIOError: the file exists but cannot be read.
        CorruptSnapshot: the file is not valid UTF-8.
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return fh.read()
    except FileNotFoundError:
        return None
    except UnicodeDecodeError as exc:
        raise CorruptSnapshot(path, f"not UTF-8 text ({exc})") from exc
    except OSError as exc:
        raise SnapshotIOError(f"Unable to read snapshot {path}: {exc}") from exc


def write_snapshot(path: str, text: str) -> None:
    """
    Atomically replace `path` with `text`.

    Raises:
        SnapshotIOError: on any filesystem failure; the previous snapshot is
            left untouched.
    """
    directory = os.path.dirname(os.path.abspath(path))
    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(
            dir=directory, prefix=f".{os.path.basename(path)}.", suffix=".tmp"
        )
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as exc:
        raise SnapshotIOError(f"Unable to write snapshot {path}: {exc}") from exc
    finally:
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                log.warning("Could not remove temporary snapshot %s", tmp_path)


def load_table(path: str) -> AliasTable:
    """
    Load the table persisted at `path`.

    Returns:
        AliasTable: decoded table; empty only when the file is missing.

    Raises:
        CorruptSnapshot: the file exists but cannot be decoded.
        SnapshotIOError: the file exists but cannot be read.
    """
    text = read_snapshot(path)
    if text is None:
        log.info("No snapshot at %s, starting with an empty table", path)
        return {}
    table = decode_table(text, path=path)
    log.info("Loaded %d aliases from %s", len(table), path)
    return table
