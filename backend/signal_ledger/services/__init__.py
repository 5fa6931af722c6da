"""Business logic services for Signal Ledger."""

from signal_ledger.services.event_service import EventService, sort_by_timestamp_desc

__all__ = ["EventService", "sort_by_timestamp_desc"]
