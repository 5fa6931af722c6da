"""
PURPOSE: Tests for the relational event store.

Runs against an on-disk SQLite database through aiosqlite:
- Table creation per schema variant
- Auto-increment ids
- Ordering done in SQL (timestamp desc, id asc on ties)
- Ticker filtering
- Storage and initialization errors
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import Text, inspect

from signal_ledger.config.constants import SchemaVariant
from signal_ledger.core.exceptions import InitializationError, StorageError
from signal_ledger.db.engine import create_engine_for_url
from signal_ledger.schemas.event import EventCreate
from signal_ledger.storage import SqlEventStore
from signal_ledger.utils.validators import validate_webhook_payload


def _event(ticker: str, timestamp: str, **fields) -> EventCreate:
    return EventCreate(ticker=ticker, timestamp=timestamp, **fields)


async def _columns(store: SqlEventStore) -> set:
    async with store.engine.connect() as conn:
        return await conn.run_sync(
            lambda sync_conn: {c["name"] for c in inspect(sync_conn).get_columns(store.table.name)}
        )


class TestInitialize:
    """Test table creation."""

    @pytest.mark.asyncio
    async def test_minimal_columns(self, sql_store):
        """Test the minimal column set."""
        assert await _columns(sql_store) == {
            "id", "ticker", "timestamp", "message",
            "open", "high", "low", "close", "created_at",
        }

    @pytest.mark.asyncio
    async def test_extended_columns(self, extended_sql_store):
        """Test the extended column set with timenow."""
        columns = await _columns(extended_sql_store)
        assert {"timenow", "price", "volume", "interval"} <= columns
        assert "timestamp" not in columns

    @pytest.mark.asyncio
    async def test_initialize_idempotent(self, sql_store):
        """Test that a second initialize keeps existing rows."""
        await sql_store.append(_event("AAPL", "2024-01-01T00:00:00Z"))
        await sql_store.initialize()
        assert len(await sql_store.list_events()) == 1

    @pytest.mark.asyncio
    async def test_unreachable_database(self, tmp_path):
        """Test that an unopenable database raises InitializationError."""
        engine = create_engine_for_url(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'events.db'}")
        store = SqlEventStore(engine)
        with pytest.raises(InitializationError):
            await store.initialize()
        await store.close()


class TestAppend:
    """Test inserts."""

    @pytest.mark.asyncio
    async def test_autoincrement_ids(self, sql_store):
        """Test that ids come from the database and are unique."""
        first = await sql_store.append(_event("AAPL", "2024-01-01T00:00:00Z"))
        second = await sql_store.append(_event("AAPL", "2024-01-01T00:00:00Z"))
        assert first == 1
        assert second == 2

    @pytest.mark.asyncio
    async def test_round_trip_fields(self, sql_store):
        """Test that stored values come back with matching types."""
        await sql_store.append(_event("AAPL", "2024-01-01T00:00:00Z", close=150.5, message="buy"))
        [record] = await sql_store.list_events()
        assert record["ticker"] == "AAPL"
        assert record["timestamp"] == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert record["close"] == 150.5
        assert record["message"] == "buy"
        assert record["open"] is None
        assert record["created_at"].tzinfo is not None

    @pytest.mark.asyncio
    async def test_offsets_normalized_to_utc(self, sql_store):
        """Test that non-UTC offsets are stored as the same instant."""
        await sql_store.append(_event("AAPL", "2024-01-01T09:00:00+09:00"))
        [record] = await sql_store.list_events()
        assert record["timestamp"] == datetime(2024, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_unstorable_timestamp(self, sql_store):
        """Test that a free-text timestamp cannot be stored in a date-time column."""
        with pytest.raises(StorageError):
            await sql_store.append(_event("AAPL", "yesterday"))
        assert await sql_store.list_events() == []

    @pytest.mark.asyncio
    async def test_extended_round_trip(self, extended_sql_store):
        """Test price, volume and interval persistence."""
        event = validate_webhook_payload(
            {
                "ticker": "BTCUSD",
                "timenow": "2024-05-01T12:00:00Z",
                "price": "64000.5",
                "volume": 12,
                "interval": "4h",
            },
            SchemaVariant.EXTENDED,
        )
        await extended_sql_store.append(event)
        [record] = await extended_sql_store.list_by_ticker("BTCUSD")
        assert record["timenow"] == datetime(2024, 5, 1, 12, tzinfo=timezone.utc)
        assert record["price"] == 64000.5
        assert record["volume"] == 12
        assert record["interval"] == "4h"

    @pytest.mark.asyncio
    async def test_epoch_millisecond_timestamp(self, sql_store):
        """Test that a numeric timestamp is stored as its instant."""
        event = validate_webhook_payload({"ticker": "AAPL", "timestamp": 1704067200000})
        await sql_store.append(event)
        [record] = await sql_store.list_events()
        assert record["timestamp"] == datetime(2024, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_unbounded_ticker_and_prices(self, sql_store):
        """Test that columns impose no length or scale the validator does not check."""
        assert isinstance(sql_store.table.c.ticker.type, Text)
        assert sql_store.table.c.close.type.precision is None
        assert sql_store.table.c.close.type.scale is None

        ticker = "X" * 100
        await sql_store.append(_event(ticker, "2024-01-01T00:00:00Z", close=1e15))
        [record] = await sql_store.list_by_ticker(ticker)
        assert record["ticker"] == ticker
        assert record["close"] == 1e15

    @pytest.mark.asyncio
    async def test_insert_failure_raises_storage_error(self, sql_store):
        """Test that a failing statement surfaces as StorageError."""
        async with sql_store.engine.begin() as conn:
            await conn.run_sync(sql_store.table.drop)
        with pytest.raises(StorageError):
            await sql_store.append(_event("AAPL", "2024-01-01T00:00:00Z"))


class TestRead:
    """Test ordered queries."""

    @pytest.mark.asyncio
    async def test_sorted_by_timestamp_desc(self, sql_store):
        """Test that SQL returns newest signal time first."""
        await sql_store.append(_event("AAPL", "2024-01-01T00:00:00Z"))
        await sql_store.append(_event("MSFT", "2024-03-01T00:00:00Z"))
        await sql_store.append(_event("AAPL", "2024-02-01T00:00:00Z"))
        records = await sql_store.list_events()
        assert [r["id"] for r in records] == [2, 3, 1]
        assert sql_store.sorted_reads is True

    @pytest.mark.asyncio
    async def test_ties_keep_insertion_order(self, sql_store):
        """Test that equal timestamps are ordered by id."""
        for ticker in ("A", "B", "C"):
            await sql_store.append(_event(ticker, "2024-01-01T00:00:00Z"))
        assert [r["ticker"] for r in await sql_store.list_events()] == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_list_by_ticker(self, sql_store):
        """Test ticker filtering in SQL."""
        await sql_store.append(_event("AAPL", "2024-01-01T00:00:00Z"))
        await sql_store.append(_event("MSFT", "2024-01-02T00:00:00Z"))
        await sql_store.append(_event("AAPL", "2024-01-03T00:00:00Z"))
        records = await sql_store.list_by_ticker("AAPL")
        assert [r["id"] for r in records] == [3, 1]
        assert await sql_store.list_by_ticker("TSLA") == []

    @pytest.mark.asyncio
    async def test_query_failure_raises_storage_error(self, sql_store):
        """Test that read failures are not turned into empty results."""
        async with sql_store.engine.begin() as conn:
            await conn.run_sync(sql_store.table.drop)
        with pytest.raises(StorageError):
            await sql_store.list_events()
