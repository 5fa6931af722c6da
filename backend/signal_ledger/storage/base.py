"""
PURPOSE: Abstract storage interface for webhook events.

Every backend offers the same capability set: prepare itself, append an
accepted event and return its id, and list stored events (all, or for one
ticker). Records are plain dicts keyed by the variant's column names plus
`id` and `created_at`.

CALLED BY: EventService
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from signal_ledger.config.constants import EVENT_FIELDS, TIMESTAMP_FIELDS, SchemaVariant
from signal_ledger.schemas.event import EventCreate

EventRecord = Dict[str, Any]


class EventStore(ABC):
    """
    PURPOSE: Durable append + read over event records.

    Attributes:
        variant: Field set the store persists.
        sorted_reads: True when list methods already return records ordered by
            timestamp descending; otherwise EventService sorts them.
    """

    sorted_reads: bool = False

    def __init__(self, variant: SchemaVariant) -> None:
        self.variant = variant
        self.timestamp_field = TIMESTAMP_FIELDS[variant]

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the backend before serving traffic. Raises InitializationError."""

    @abstractmethod
    async def append(self, event: EventCreate) -> int:
        """Persist one event and return its assigned id. Raises StorageError."""

    @abstractmethod
    async def list_events(self) -> List[EventRecord]:
        """Return every stored event. Raises StorageError."""

    @abstractmethod
    async def list_by_ticker(self, ticker: str) -> List[EventRecord]:
        """Return stored events whose ticker equals `ticker`. Raises StorageError."""

    async def close(self) -> None:
        """Release backend resources. No-op by default."""

    def event_values(self, event: EventCreate) -> EventRecord:
        """
        PURPOSE: Map an EventCreate onto this variant's column names.

        Args:
            event: Accepted event.

        Returns:
            EventRecord: Column -> value, without id and created_at.
        """
        values: EventRecord = {}
        for field in EVENT_FIELDS[self.variant]:
            if field == self.timestamp_field:
                values[field] = event.timestamp
            else:
                values[field] = getattr(event, field)
        return values
