"""
PURPOSE: Async SQLAlchemy engine construction for the relational event store.

The engine owns the process-wide connection pool: a fixed number of
connections, no overflow, and callers wait without a deadline for a free
connection. SQLite URLs (used by the test suite) keep the dialect's own pool.
"""

from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from signal_ledger.config.settings import Settings


def build_engine(app_settings: Settings) -> AsyncEngine:
    """
    PURPOSE: Create the async engine for the configured database.

    CALLED BY: signal_ledger.storage.create_event_store

    Args:
        app_settings: Settings carrying the URL pieces and pool size.

    Returns:
        AsyncEngine: Engine with a pool of DB_POOL_SIZE connections.
    """
    url = app_settings.database_url()
    return create_engine_for_url(url, pool_size=app_settings.DB_POOL_SIZE, echo=app_settings.DEBUG)


def create_engine_for_url(url: "URL | str", pool_size: int = 10, echo: bool = False) -> AsyncEngine:
    """
    PURPOSE: Create an async engine with bounded pool settings for a URL.

    Args:
        url: SQLAlchemy database URL.
        pool_size: Maximum number of pooled connections.
        echo: Log emitted SQL.

    Returns:
        AsyncEngine: Configured engine; no connection is opened yet.
    """
    url = make_url(url)

    if url.get_backend_name() == "sqlite":
        return create_async_engine(url, echo=echo)

    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=pool_size,
        max_overflow=0,
        pool_timeout=None,
    )
