"""Pydantic schemas for request and response bodies."""

from signal_ledger.schemas.event import EventCreate, WebhookAck

__all__ = ["EventCreate", "WebhookAck"]
