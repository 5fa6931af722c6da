"""
PURPOSE: Pytest fixtures for Signal Ledger tests.

Provides shared stores and application clients including:
- File-backed stores in a per-test temporary directory
- Relational stores on an on-disk SQLite database (aiosqlite)
- Settings with rate limiting disabled
- A factory for FastAPI TestClients bound to a given store
"""

from contextlib import contextmanager

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from signal_ledger.config.constants import SchemaVariant, StorageBackend
from signal_ledger.config.settings import Settings
from signal_ledger.db.engine import create_engine_for_url
from signal_ledger.main import create_app
from signal_ledger.storage import FileEventStore, SqlEventStore


def sqlite_url(tmp_path, name: str = "events.db") -> str:
    """SQLAlchemy URL for an aiosqlite database file under tmp_path."""
    return f"sqlite+aiosqlite:///{tmp_path / name}"


def build_store(backend: str, tmp_path, variant: SchemaVariant = SchemaVariant.MINIMAL):
    """
    PURPOSE: Construct an uninitialized store of the requested backend.

    Args:
        backend: "file" or "database".
        tmp_path: Directory holding the data file or SQLite database.
        variant: Field set for the store.
    """
    if backend == "file":
        return FileEventStore(tmp_path / "webhook_events.json", variant=variant)
    return SqlEventStore(create_engine_for_url(sqlite_url(tmp_path)), variant=variant)


@pytest_asyncio.fixture
async def file_store(tmp_path):
    """
    PURPOSE: Initialized minimal file store in a temporary directory.

    Returns:
        FileEventStore: Store whose data file holds an empty array.
    """
    store = FileEventStore(tmp_path / "webhook_events.json")
    await store.initialize()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def sql_store(tmp_path):
    """
    PURPOSE: Initialized minimal relational store on a SQLite file.

    Returns:
        SqlEventStore: Store with its events table created.
    """
    store = SqlEventStore(create_engine_for_url(sqlite_url(tmp_path)))
    await store.initialize()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def extended_sql_store(tmp_path):
    """
    PURPOSE: Initialized extended relational store on a SQLite file.

    Returns:
        SqlEventStore: Store with price/volume/interval columns.
    """
    store = SqlEventStore(
        create_engine_for_url(sqlite_url(tmp_path)),
        variant=SchemaVariant.EXTENDED,
    )
    await store.initialize()
    yield store
    await store.close()


@pytest_asyncio.fixture(params=["file", "database"])
async def any_store(request, tmp_path):
    """
    PURPOSE: Initialized minimal store, once per backend.

    Returns:
        EventStore: File or relational store.
    """
    store = build_store(request.param, tmp_path)
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def test_settings(tmp_path):
    """
    PURPOSE: Settings override with test values.

    Provides a Settings object with:
    - A data file under tmp_path
    - Rate limiting disabled
    - No .env file lookup

    Returns:
        Settings: Configuration object with test values.
    """
    return Settings(
        _env_file=None,
        STORAGE_BACKEND=StorageBackend.FILE,
        SCHEMA_VARIANT=SchemaVariant.MINIMAL,
        DATA_FILE=str(tmp_path / "webhook_events.json"),
        DATABASE_URL=sqlite_url(tmp_path),
        RATE_LIMIT_ENABLED=False,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def make_client(test_settings):
    """
    PURPOSE: Factory yielding a TestClient for an app serving the given store.

    The app's lifespan runs on enter, so the store is initialized, and its
    shutdown runs on exit.

    Usage:
        with make_client(store) as client:
            client.get("/api/events")
    """

    @contextmanager
    def _make(store, **overrides):
        app_settings = test_settings.model_copy(update=overrides)
        app = create_app(app_settings, store=store)
        with TestClient(app) as client:
            yield client

    return _make
