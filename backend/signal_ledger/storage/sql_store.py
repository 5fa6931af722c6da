"""
PURPOSE: Relational event store backed by an async SQLAlchemy engine.

One table holds every event; ids come from the database's auto-increment.
Reads are ordered by the timestamp column descending in SQL, with id as the
tie-breaker, so EventService returns them unchanged. Every statement checks a
connection out of the engine's pool inside `async with`, so it is returned on
success and on failure alike.

CALLED BY: signal_ledger.storage.create_event_store
"""

from datetime import datetime, timezone
from typing import List

from sqlalchemy import MetaData, Select, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from signal_ledger.config.constants import SchemaVariant
from signal_ledger.core.exceptions import InitializationError, StorageError
from signal_ledger.db.tables import build_events_table
from signal_ledger.schemas.event import EventCreate
from signal_ledger.storage.base import EventRecord, EventStore
from signal_ledger.utils.logger import get_logger
from signal_ledger.utils.time_utils import ensure_utc, get_utc_now, parse_timestamp

logger = get_logger(__name__)


class SqlEventStore(EventStore):
    """
    PURPOSE: Event store persisting one row per event in a relational table.

    Attributes:
        engine: Async engine owning the connection pool.
        table: Events table for this variant.
    """

    sorted_reads = True

    def __init__(
        self,
        engine: AsyncEngine,
        variant: SchemaVariant = SchemaVariant.MINIMAL,
        table_name: str = "webhook_events",
    ) -> None:
        super().__init__(variant)
        self.engine = engine
        self._metadata = MetaData()
        self.table = build_events_table(self._metadata, variant, table_name)

    # ════════════════════════════════════════════════════════════════
    # Public API
    # ════════════════════════════════════════════════════════════════

    async def initialize(self) -> None:
        """
        PURPOSE: Create the events table and its ticker index if absent.

        Raises:
            InitializationError: If the database is unreachable or DDL fails.
        """
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(self._metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            logger.error("events_table_init_failed", table=self.table.name, error=str(e))
            raise InitializationError(f"Cannot prepare table {self.table.name}: {e}") from e

        logger.info("events_table_ready", table=self.table.name, variant=self.variant.value)

    async def append(self, event: EventCreate) -> int:
        """
        PURPOSE: Insert one event row and return the database-assigned id.

        Args:
            event: Accepted event.

        Returns:
            int: Auto-increment id of the new row.

        Raises:
            StorageError: If the timestamp cannot be stored or the insert fails.
        """
        values = self.event_values(event)

        timestamp = parse_timestamp(values[self.timestamp_field])
        if timestamp is None:
            raise StorageError(
                f"Cannot store {self.timestamp_field} {values[self.timestamp_field]!r} as a date-time"
            )
        values[self.timestamp_field] = timestamp.astimezone(timezone.utc)
        values["created_at"] = get_utc_now()

        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(insert(self.table).values(**values))
                return int(result.inserted_primary_key[0])
        except (SQLAlchemyError, OSError) as e:
            raise StorageError(f"Insert into {self.table.name} failed: {e}") from e

    async def list_events(self) -> List[EventRecord]:
        """Return every event, newest signal time first."""
        return await self._fetch(self._ordered_select())

    async def list_by_ticker(self, ticker: str) -> List[EventRecord]:
        """Return events for one ticker, newest signal time first."""
        return await self._fetch(self._ordered_select().where(self.table.c.ticker == ticker))

    async def close(self) -> None:
        """Drain and close the connection pool."""
        await self.engine.dispose()
        logger.info("event_store_pool_disposed", table=self.table.name)

    # ════════════════════════════════════════════════════════════════
    # Internal Helpers
    # ════════════════════════════════════════════════════════════════

    def _ordered_select(self) -> Select:
        columns = self.table.c
        return select(self.table).order_by(
            columns[self.timestamp_field].desc(),
            columns.id.asc(),
        )

    async def _fetch(self, stmt: Select) -> List[EventRecord]:
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(stmt)
                rows = result.mappings().all()
        except (SQLAlchemyError, OSError) as e:
            raise StorageError(f"Query on {self.table.name} failed: {e}") from e

        return [self._to_record(row) for row in rows]

    @staticmethod
    def _to_record(row) -> EventRecord:
        record = dict(row)
        for key, value in record.items():
            if isinstance(value, datetime):
                record[key] = ensure_utc(value)
        return record
