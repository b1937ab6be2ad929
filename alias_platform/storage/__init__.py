from .base import AliasRecord, AliasTable, BaseAliasStore
from .storage import AliasStore
from .storage_factory import get_store

__all__ = ["AliasRecord", "AliasTable", "BaseAliasStore", "AliasStore", "get_store"]
