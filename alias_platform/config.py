"""
Runtime configuration for Alias Platform
========================================

Simple settings module that reads from environment variables (only here),
and exposes a `Settings` object for the rest of the codebase.
Avoid reading env vars anywhere else; call `load_settings()` instead.

Environment is read **at call time** so tests can monkeypatch it freely.

Persistence
-----------
- ALIAS_DB_PATH            : snapshot file (default "db.json")
- ALIAS_PERSIST_INTERVAL   : seconds between snapshots (default 10, must be > 0)
- ALIAS_FLUSH_ON_SHUTDOWN  : "1"/"true" to write a final snapshot on graceful shutdown

Server
------
- ALIAS_HOST               : listen address (default "0.0.0.0")
- ALIAS_PORT               : listen port (default 3030)
- ALIAS_LOG_LEVEL          : logging level name (default "INFO")
- ALIAS_CONFLICT_STATUS    : HTTP status for create conflicts, 409 (default) or 404
- ALIAS_FAVICON_PATH       : icon served at /favicon.ico (default "bin/favicon.ico")
"""

import logging
import os
from dataclasses import dataclass, replace

DEFAULT_DB_PATH = "db.json"
DEFAULT_PERSIST_INTERVAL = 10.0
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3030

_ALLOWED_CONFLICT_STATUS = (404, 409)
_TRUTHY = {"1", "true", "yes", "on"}


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name, str(default))
    try:
        value = float(raw)
    except ValueError:
        return default
    # A non-positive interval would spin the persister
    return value if value > 0 else default


def _get_log_level(name: str, default: str = "INFO") -> str:
    raw = os.getenv(name, default).strip().upper()
    # getLevelName returns an int only for registered level names
    return raw if isinstance(logging.getLevelName(raw), int) else default


def _get_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    db_path: str = DEFAULT_DB_PATH
    persist_interval: float = DEFAULT_PERSIST_INTERVAL
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    conflict_status: int = 409
    favicon_path: str = "bin/favicon.ico"
    flush_on_shutdown: bool = False

    def with_overrides(self, **overrides) -> "Settings":
        """Return a copy with every non-None override applied (CLI flags)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def load_settings() -> Settings:
    """Build a `Settings` snapshot from the current environment."""
    conflict_status = _get_int("ALIAS_CONFLICT_STATUS", 409)
    if conflict_status not in _ALLOWED_CONFLICT_STATUS:
        conflict_status = 409

    return Settings(
        db_path=os.getenv("ALIAS_DB_PATH", DEFAULT_DB_PATH).strip() or DEFAULT_DB_PATH,
        persist_interval=_get_float("ALIAS_PERSIST_INTERVAL", DEFAULT_PERSIST_INTERVAL),
        host=os.getenv("ALIAS_HOST", DEFAULT_HOST).strip() or DEFAULT_HOST,
        port=_get_int("ALIAS_PORT", DEFAULT_PORT),
        log_level=_get_log_level("ALIAS_LOG_LEVEL"),
        conflict_status=conflict_status,
        favicon_path=os.getenv("ALIAS_FAVICON_PATH", "bin/favicon.ico"),
        flush_on_shutdown=_get_bool("ALIAS_FLUSH_ON_SHUTDOWN"),
    )
