from .persister import SnapshotPersister

__all__ = ["SnapshotPersister"]
