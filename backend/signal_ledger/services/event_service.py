"""
Event service for the Signal Ledger webhook system.

PURPOSE: Validate and persist inbound webhook events, and serve stored events
newest-first, either all of them or for a single ticker.

CALLED BY: signal_ledger.api.routes_webhook, signal_ledger.api.routes_events
"""

from typing import Any, List, Mapping

from signal_ledger.config.constants import ACK_MESSAGE, SchemaVariant
from signal_ledger.core.exceptions import EventValidationError, StorageError
from signal_ledger.schemas.event import WebhookAck
from signal_ledger.storage.base import EventRecord, EventStore
from signal_ledger.utils.logger import get_logger
from signal_ledger.utils.time_utils import timestamp_sort_key
from signal_ledger.utils.validators import validate_webhook_payload


logger = get_logger("services.event")


def sort_by_timestamp_desc(records: List[EventRecord], timestamp_field: str) -> List[EventRecord]:
    """
    PURPOSE: Order records by signal time, newest first.

    The sort is stable, so records with equal timestamps keep their
    insertion order. Unparseable timestamps sort last.

    Args:
        records: Stored records.
        timestamp_field: Name of the signal-time key.

    Returns:
        List[EventRecord]: New list in timestamp-descending order.
    """
    return sorted(
        records,
        key=lambda record: timestamp_sort_key(record.get(timestamp_field)),
        reverse=True,
    )


class EventService:
    """
    Service for ingesting and querying webhook events.

    PURPOSE: Orchestrate validate -> persist -> acknowledge for inbound
    webhooks, and read -> filter -> sort for queries. Holds no state of its
    own beyond the store it wraps.

    CALLED BY: API routes for webhook and event endpoints
    """

    def __init__(self, store: EventStore) -> None:
        self.store = store
        self.variant: SchemaVariant = store.variant

    async def ingest(self, payload: Mapping[str, Any]) -> WebhookAck:
        """
        Validate a webhook payload and store it as a new event.

        PURPOSE: Persist an accepted signal. Rejected payloads never reach
        the store.

        CALLED BY: POST /api/webhook endpoint

        Args:
            payload: Decoded JSON object from the request body

        Returns:
            WebhookAck: Acknowledgment; carries the new id in the extended variant

        Raises:
            EventValidationError: If the payload fails validation
            StorageError: If the store could not persist the event
        """
        try:
            event = validate_webhook_payload(payload, self.variant)
        except EventValidationError as e:
            logger.warning(
                "webhook_rejected",
                reason=e.reason,
                ticker=payload.get("ticker"),
            )
            raise

        try:
            event_id = await self.store.append(event)
        except StorageError as e:
            logger.error("event_store_failed", operation="append", ticker=event.ticker, error=str(e))
            raise

        logger.info(
            "webhook_event_stored",
            event_id=event_id,
            ticker=event.ticker,
            variant=self.variant.value,
        )

        if self.variant is SchemaVariant.EXTENDED:
            return WebhookAck(message=ACK_MESSAGE, id=event_id)
        return WebhookAck(message=ACK_MESSAGE)

    async def list_all(self) -> List[EventRecord]:
        """
        Retrieve every stored event, newest signal time first.

        CALLED BY: GET /api/events endpoint

        Returns:
            List[EventRecord]: Possibly empty list of records

        Raises:
            StorageError: If the store could not be read
        """
        try:
            records = await self.store.list_events()
        except StorageError as e:
            logger.error("event_store_failed", operation="list_events", error=str(e))
            raise

        records = self._ordered(records)
        logger.info("events_listed", count=len(records))
        return records

    async def list_by_ticker(self, ticker: str) -> List[EventRecord]:
        """
        Retrieve stored events for one ticker, newest signal time first.

        CALLED BY: GET /api/events/{ticker} endpoint

        Args:
            ticker: Exact ticker symbol to match

        Returns:
            List[EventRecord]: Possibly empty list of records

        Raises:
            StorageError: If the store could not be read
        """
        try:
            records = await self.store.list_by_ticker(ticker)
        except StorageError as e:
            logger.error("event_store_failed", operation="list_by_ticker", ticker=ticker, error=str(e))
            raise

        records = self._ordered(records)
        logger.info("events_listed", ticker=ticker, count=len(records))
        return records

    def _ordered(self, records: List[EventRecord]) -> List[EventRecord]:
        if self.store.sorted_reads:
            return records
        return sort_by_timestamp_desc(records, self.store.timestamp_field)
