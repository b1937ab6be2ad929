"""
Main API module for Alias Platform.

Responsibilities:
    - Expose REST endpoints for creating aliases, redirecting and stats
    - Map store errors to HTTP status codes without leaking internals
    - Run the background snapshot persister for the lifetime of the app

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - The alias store is restored from its snapshot at creation time; a
      corrupt snapshot stops app creation instead of starting empty.
    - The persister starts and stops with the app lifespan, so a bare
      `TestClient(app)` (no `with` block) never spawns the thread.

Run:
    python main.py --port 3030
    uvicorn main:create_app --factory --port 3030
"""

import argparse
import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse, RedirectResponse, Response

from alias_platform.api.schemas import CreateAliasRequest, stats_payload
from alias_platform.config import Settings, load_settings
from alias_platform.errors import AliasConflict, AliasNotFound, CorruptSnapshot, InvalidAliasRequest
from alias_platform.persister.persister import SnapshotPersister
from alias_platform.storage.base import BaseAliasStore
from alias_platform.storage.storage_factory import get_store

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_LEVELS = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


def create_app(
    store: Optional[BaseAliasStore] = None,
    settings: Optional[Settings] = None,
    start_persister: bool = True,
) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        store (Optional[BaseAliasStore]): Store to serve. When omitted, one is
            restored from `settings.db_path`.
        settings (Optional[Settings]): Configuration; read from the environment
            when omitted.
        start_persister (bool): Run the snapshot persister during the app
            lifespan.

    Returns:
        FastAPI: A fully configured application instance.

    Raises:
        CorruptSnapshot: The snapshot file exists but cannot be decoded.
    """
    settings = settings or load_settings()

    # basic console logging (optional)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    log = logging.getLogger("alias_platform.api")

    if store is None:
        store = get_store(settings.db_path)
    persister = SnapshotPersister(store, interval=settings.persist_interval)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if start_persister:
            persister.start()
        try:
            yield
        finally:
            if start_persister or settings.flush_on_shutdown:
                persister.stop(flush=settings.flush_on_shutdown)

    app = FastAPI(
        title="Alias Platform",
        description="URL shortener with user-chosen aliases and visit counting",
        # Keep "/docs" free for use as an alias
        docs_url="/_docs",
        redoc_url=None,
        openapi_url="/_openapi.json",
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.persister = persister
    app.state.settings = settings

    # ----------------------------------------------------------------
    # Error mapping
    # ----------------------------------------------------------------
    @app.exception_handler(AliasNotFound)
    async def handle_not_found(request: Request, exc: AliasNotFound) -> Response:
        log.info("Unknown alias requested: %s", exc.alias)
        return PlainTextResponse("Not Found", status_code=404)

    @app.exception_handler(AliasConflict)
    async def handle_conflict(request: Request, exc: AliasConflict) -> Response:
        log.info("Rejected create for existing alias: %s", exc.alias)
        body = "Conflict" if settings.conflict_status == 409 else "Not Found"
        return PlainTextResponse(body, status_code=settings.conflict_status)

    @app.exception_handler(InvalidAliasRequest)
    async def handle_invalid(request: Request, exc: InvalidAliasRequest) -> Response:
        return PlainTextResponse(str(exc), status_code=400)

    # ----------------------------------------------------------------
    # Routes (fixed paths first; "/{alias}" matches everything else)
    # ----------------------------------------------------------------
    @app.get("/", response_class=PlainTextResponse)
    def index() -> str:
        return "Nothing to see here"

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"status": "ok", "aliases": len(store)}

    @app.get("/favicon.ico", include_in_schema=False)
    def favicon() -> Response:
        if not os.path.isfile(settings.favicon_path):
            return PlainTextResponse("Not Found", status_code=404)
        return FileResponse(settings.favicon_path, media_type="image/x-icon")

    @app.get("/stats")
    def stats() -> JSONResponse:
        """
        Visit counts for every alias.

        Returns:
            JSONResponse: `[{"alias": str, "count": int}, ...]`
        """
        payload: List[dict] = stats_payload(store.list_stats())
        return JSONResponse(payload)

    @app.post("/{alias}", status_code=201, response_class=PlainTextResponse)
    def create_alias(alias: str, req: CreateAliasRequest) -> PlainTextResponse:
        """
        Register `alias` for `req.url`.

        Raises:
            AliasConflict: alias already exists (409, or 404 in legacy mode).
            InvalidAliasRequest: empty URL (400).
        """
        store.create_alias(alias, req.url)
        return PlainTextResponse("Created", status_code=201)

    @app.get("/{alias}")
    def view_alias(alias: str) -> Response:
        """
        Count a visit and redirect (307) to the alias destination.

        Raises:
            AliasNotFound: unknown alias (404).
        """
        destination = store.resolve_and_count(alias)
        parsed = urlparse(destination)
        if not parsed.scheme or not parsed.netloc:
            log.error("Alias %s points to a non-absolute URL: %r", alias, destination)
            return PlainTextResponse("Invalid destination", status_code=500)
        return RedirectResponse(destination, status_code=307)

    return app


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Alias Platform URL shortener")
    parser.add_argument("--host", help="listen address (ALIAS_HOST)")
    parser.add_argument("--port", type=int, help="listen port (ALIAS_PORT)")
    parser.add_argument("--db-path", help="snapshot file (ALIAS_DB_PATH)")
    parser.add_argument("--persist-interval", type=float, help="seconds between snapshots (ALIAS_PERSIST_INTERVAL)")
    parser.add_argument(
        "--log-level", type=str.upper, choices=LOG_LEVELS,
        help="logging level (ALIAS_LOG_LEVEL)",
    )
    parser.add_argument(
        "--flush-on-shutdown", action="store_true", default=None,
        help="write a final snapshot on graceful shutdown (ALIAS_FLUSH_ON_SHUTDOWN)",
    )
    args = parser.parse_args(argv)

    if args.persist_interval is not None and args.persist_interval <= 0:
        parser.error("--persist-interval must be positive")

    settings = load_settings().with_overrides(
        host=args.host,
        port=args.port,
        db_path=args.db_path,
        persist_interval=args.persist_interval,
        log_level=args.log_level,
        flush_on_shutdown=args.flush_on_shutdown,
    )

    try:
        app = create_app(settings=settings)
    except CorruptSnapshot as exc:
        logging.getLogger("alias_platform").critical("Refusing to start: %s", exc)
        return 1

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
