"""
PURPOSE: Event query routes for the Signal Ledger service.

Provides read access to stored webhook events, newest signal time first,
either all events or those for a single ticker.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request

from signal_ledger.api.dependencies import get_event_service
from signal_ledger.core.rate_limit import READ_LIMIT, limiter
from signal_ledger.services.event_service import EventService

router = APIRouter(prefix="/events", tags=["events"])


@router.get("")
@limiter.limit(READ_LIMIT)
async def list_events(
    request: Request,
    service: EventService = Depends(get_event_service),
) -> List[Dict[str, Any]]:
    """
    PURPOSE: Return every stored event sorted by timestamp descending.

    Raises:
        HTTP 500: Storage failure.
    """
    return await service.list_all()


@router.get("/{ticker}")
@limiter.limit(READ_LIMIT)
async def list_events_by_ticker(
    request: Request,
    ticker: str,
    service: EventService = Depends(get_event_service),
) -> List[Dict[str, Any]]:
    """
    PURPOSE: Return stored events for one ticker sorted by timestamp descending.

    An unknown ticker yields an empty list.

    Raises:
        HTTP 500: Storage failure.
    """
    return await service.list_by_ticker(ticker)
