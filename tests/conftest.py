"""
Global pytest fixtures for the Alias Platform test suite.

Responsibilities:
    - Provide an isolated AliasStore whose snapshot lives under tmp_path
    - Provide a fresh FastAPI TestClient via the app factory, wired to that store
    - Keep the background persister off unless a test asks for it

Why an app factory?
    Using `create_app()` gives every test fresh in-memory state and lets the
    test hand in its own store and settings, eliminating cross-test flakiness.
"""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from alias_platform.config import Settings
from alias_platform.storage.base import AliasRecord
from alias_platform.storage.storage import AliasStore


@pytest.fixture
def db_path(tmp_path) -> str:
    """Snapshot location inside the per-test temporary directory."""
    return str(tmp_path / "db.json")


@pytest.fixture
def settings(db_path, tmp_path) -> Settings:
    """Settings pointing every file at tmp_path, with a short persist interval."""
    return Settings(
        db_path=db_path,
        persist_interval=0.05,
        favicon_path=str(tmp_path / "favicon.ico"),
    )


@pytest.fixture
def store(db_path) -> AliasStore:
    """Fresh, empty in-memory store."""
    return AliasStore(path=db_path)


@pytest.fixture
def seeded_store(db_path) -> AliasStore:
    """Store holding the single record {"test": ("https://google.com", 4)}."""
    return AliasStore(
        path=db_path,
        table={"test": AliasRecord(alias="test", destination="https://google.com", visit_count=4)},
    )


@pytest.fixture
def client(store, settings) -> TestClient:
    """
    Provide a TestClient over a new app instance using the `store` fixture.

    Notes:
        - Not entered as a context manager, so the lifespan (and with it the
          persister thread) does not run.
    """
    app = create_app(store=store, settings=settings, start_persister=False)
    return TestClient(app)
