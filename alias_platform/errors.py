"""
Error taxonomy for Alias Platform.

Store operations raise these instead of returning status flags; the HTTP
layer (`main.py`) maps them to status codes. Only `CorruptSnapshot` (and an
unreadable snapshot at boot) is allowed to stop the process.
"""

__all__ = [
    "AliasError",
    "AliasConflict",
    "AliasNotFound",
    "InvalidAliasRequest",
    "SnapshotIOError",
    "CorruptSnapshot",
]


class AliasError(Exception):
    """Base class for every alias store failure."""


class AliasConflict(AliasError):
    """Create was attempted on an alias that already exists."""

    def __init__(self, alias: str):
        super().__init__(f"Alias already exists: {alias!r}")
        self.alias = alias


class AliasNotFound(AliasError, KeyError):
    """Lookup on an alias that is not in the table."""

    def __init__(self, alias: str):
        super().__init__(alias)
        self.alias = alias

    def __str__(self) -> str:
        return f"Alias not found: {self.alias!r}"


class InvalidAliasRequest(AliasError, ValueError):
    """Alias or destination is empty."""


class SnapshotIOError(AliasError, OSError):
    """Reading or writing the snapshot file failed."""


class CorruptSnapshot(AliasError):
    """
    Snapshot exists but cannot be decoded.

    Fatal at startup: the process must not come up with an empty table
    while recorded data sits unread on disk.
    """

    def __init__(self, path: str, reason: str):
        super().__init__(f"Corrupt snapshot at {path}: {reason}")
        self.path = path
        self.reason = reason
