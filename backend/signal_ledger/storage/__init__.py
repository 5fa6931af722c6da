"""
PURPOSE: Storage backends for webhook events and the factory that picks one.

CALLED BY: signal_ledger.main.create_app
"""

from signal_ledger.config.constants import StorageBackend
from signal_ledger.config.settings import Settings
from signal_ledger.db.engine import build_engine
from signal_ledger.storage.base import EventRecord, EventStore
from signal_ledger.storage.file_store import FileEventStore
from signal_ledger.storage.sql_store import SqlEventStore


def create_event_store(app_settings: Settings) -> EventStore:
    """
    PURPOSE: Build the event store selected by STORAGE_BACKEND.

    Args:
        app_settings: Application settings.

    Returns:
        EventStore: Uninitialized store; call initialize() before use.
    """
    if app_settings.STORAGE_BACKEND is StorageBackend.DATABASE:
        return SqlEventStore(
            build_engine(app_settings),
            variant=app_settings.SCHEMA_VARIANT,
            table_name=app_settings.EVENTS_TABLE,
        )

    return FileEventStore(
        app_settings.DATA_FILE,
        variant=app_settings.SCHEMA_VARIANT,
        locking=app_settings.FILE_STORE_LOCKING,
    )


__all__ = [
    "EventRecord",
    "EventStore",
    "FileEventStore",
    "SqlEventStore",
    "create_event_store",
]
