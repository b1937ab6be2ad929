"""
Base store interface and data model for Alias Platform.

Purpose:
    Define the narrow contract the HTTP layer and the background persister
    talk to, so neither ever touches the raw alias table.

Testing & Coverage:
    Abstract methods are not executed directly in tests and are annotated
    with `# pragma: no cover`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass
class AliasRecord:
    """One alias: its destination (immutable) and visit counter."""
    alias: str
    destination: str
    visit_count: int = 0


# alias -> record
AliasTable = Dict[str, AliasRecord]


class BaseAliasStore(ABC):
    """Abstract base class for alias stores."""

    @abstractmethod  # pragma: no cover
    def create_alias(self, alias: str, destination: str) -> None:
        """
        Insert a new alias with a zero visit count.

        Raises:
            InvalidAliasRequest: alias or destination is empty.
            AliasConflict: alias already exists (never overwritten).
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def resolve_and_count(self, alias: str) -> str:
        """
        Count one visit and return the destination.

        Raises:
            AliasNotFound: alias is unknown.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def list_stats(self) -> List[Tuple[str, int]]:
        """Return `(alias, visit_count)` pairs taken at a single instant."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def get_alias(self, alias: str) -> Optional[AliasRecord]:
        """Return a copy of the record without counting a visit, or None."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def snapshot_save(self) -> None:
        """
        Replace the persisted snapshot with the current table.

        Raises:
            SnapshotIOError: the snapshot could not be written.
        """
        raise NotImplementedError
