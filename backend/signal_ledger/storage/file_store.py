"""
PURPOSE: File-backed event store.

The whole collection lives in one JSON array in a single file. Appending
reads the array, assigns the next id, appends and rewrites the file; reads
parse the whole file and filter in memory. Records come back in insertion
order, so EventService sorts them.

A process-wide asyncio.Lock serializes the read-modify-write cycle. With
locking disabled two concurrent appends can both read the same array and the
later write silently drops the other's event. Each write goes to a temporary
file in the same directory that then replaces the data file, so reads never
see a half-written array and a crash mid-write leaves the old array intact.

CALLED BY: signal_ledger.storage.create_event_store
"""

import asyncio
import contextlib
import json
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, List, Union

from signal_ledger.config.constants import SchemaVariant
from signal_ledger.core.exceptions import InitializationError, StorageError
from signal_ledger.schemas.event import EventCreate
from signal_ledger.storage.base import EventRecord, EventStore
from signal_ledger.utils.logger import get_logger
from signal_ledger.utils.time_utils import get_utc_now

logger = get_logger(__name__)


def _json_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class FileEventStore(EventStore):
    """
    PURPOSE: Event store persisting a JSON array to one file.

    Attributes:
        path: Location of the JSON file.
        locking: Serialize appends behind an asyncio.Lock.
    """

    sorted_reads = False

    def __init__(
        self,
        path: Union[str, Path],
        variant: SchemaVariant = SchemaVariant.MINIMAL,
        locking: bool = True,
    ) -> None:
        super().__init__(variant)
        self.path = Path(path)
        self.locking = locking
        self._lock = asyncio.Lock()

    # ════════════════════════════════════════════════════════════════
    # Public API
    # ════════════════════════════════════════════════════════════════

    async def initialize(self) -> None:
        """
        PURPOSE: Create the data file holding an empty array if it is missing.

        Idempotent: an existing file is left untouched.

        Raises:
            InitializationError: If the file cannot be created.
        """
        try:
            created = await asyncio.to_thread(self._create_if_missing)
        except OSError as e:
            logger.error("data_file_init_failed", path=str(self.path), error=str(e))
            raise InitializationError(f"Cannot create data file {self.path}: {e}") from e

        if created:
            logger.info("data_file_initialized", path=str(self.path))

    async def append(self, event: EventCreate) -> int:
        """
        PURPOSE: Append one event, assigning id = number of stored events + 1.

        If that id is already taken (the file was edited by hand) the next id
        after the current maximum is used instead.

        Args:
            event: Accepted event.

        Returns:
            int: Assigned id.

        Raises:
            StorageError: On read, decode or write failure.
        """
        if not self.locking:
            return await self._append(event)

        async with self._lock:
            return await self._append(event)

    async def list_events(self) -> List[EventRecord]:
        """Return all stored events in insertion order."""
        return await self._read()

    async def list_by_ticker(self, ticker: str) -> List[EventRecord]:
        """Return stored events for one ticker in insertion order."""
        events = await self._read()
        return [event for event in events if event.get("ticker") == ticker]

    # ════════════════════════════════════════════════════════════════
    # Internal Helpers
    # ════════════════════════════════════════════════════════════════

    async def _append(self, event: EventCreate) -> int:
        events = await self._read()

        event_id = len(events) + 1
        used_ids = {record.get("id") for record in events}
        if event_id in used_ids:
            event_id = max(i for i in used_ids if isinstance(i, int)) + 1

        record: EventRecord = {"id": event_id}
        record.update({k: _json_value(v) for k, v in self.event_values(event).items()})
        record["created_at"] = get_utc_now().isoformat()

        events.append(record)
        await self._write(events)
        return event_id

    async def _read(self) -> List[EventRecord]:
        try:
            data = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
            events = json.loads(data)
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read {self.path}: {e}") from e

        if not isinstance(events, list):
            raise StorageError(f"{self.path} does not contain a JSON array")
        return events

    async def _write(self, events: List[EventRecord]) -> None:
        try:
            payload = json.dumps(events, indent=2)
            await asyncio.to_thread(self._replace_file, payload)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write {self.path}: {e}") from e

    def _replace_file(self, payload: str) -> None:
        # Readers only ever see the old or the new array, never a partial one
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise

    def _create_if_missing(self) -> bool:
        if self.path.exists():
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("[]", encoding="utf-8")
        return True
