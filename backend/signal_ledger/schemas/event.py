"""
Event-related Pydantic schemas for the Signal Ledger API.

Handles the typed form of an accepted webhook payload and the
acknowledgment returned to the sender.
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class EventCreate(BaseModel):
    """
    Accepted webhook payload, ready for persistence.

    Produced only by validate_webhook_payload; the union of both schema
    variants' fields. Fields outside the deployment's variant stay None.

    Attributes:
        ticker: Instrument symbol (e.g. 'AAPL')
        timestamp: Signal time; a parsed datetime in the extended variant,
            the sender's raw string or epoch-millisecond number in the
            minimal variant
        message: Optional free-text annotation
        open: Optional bar open price
        high: Optional bar high price
        low: Optional bar low price
        close: Optional bar close price
        price: Optional price snapshot (extended)
        volume: Optional trade volume (extended)
        interval: Optional bar duration such as '5m' (extended)
    """

    model_config = ConfigDict(frozen=True)

    ticker: str
    timestamp: Union[datetime, str, int, float]
    message: Optional[str] = None
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    close: Optional[float] = None
    price: Optional[float] = None
    volume: Optional[int] = None
    interval: Optional[str] = None


class WebhookAck(BaseModel):
    """
    Response body for an accepted webhook.

    Attributes:
        message: Fixed acknowledgment text
        id: Assigned event id (extended variant only)
    """

    message: str
    id: Optional[int] = None
