"""
PURPOSE: Inbound webhook route for the Signal Ledger service.

Receives alert payloads (e.g. TradingView Pine Script alerts) and stores them
as events. The endpoint is public: alerting sources cannot attach credentials
to their outbound calls.

CALLED BY:
    - External alerting sources (POST, public)
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from signal_ledger.api.dependencies import get_event_service
from signal_ledger.config.constants import INVALID_BODY_MESSAGE
from signal_ledger.core.exceptions import EventValidationError
from signal_ledger.core.rate_limit import WEBHOOK_LIMIT, limiter
from signal_ledger.schemas.event import WebhookAck
from signal_ledger.services.event_service import EventService
from signal_ledger.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/webhook", tags=["webhook"])


async def _read_json_object(request: Request) -> Dict[str, Any]:
    """
    PURPOSE: Decode the request body as a JSON object.

    Raises:
        EventValidationError: If the body is not valid JSON or not an object.
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    if not isinstance(payload, dict):
        logger.warning("webhook_body_invalid", content_type=request.headers.get("content-type"))
        raise EventValidationError(INVALID_BODY_MESSAGE)
    return payload


@router.post("", response_model=WebhookAck, response_model_exclude_none=True)
@limiter.limit(WEBHOOK_LIMIT)
async def receive_webhook(
    request: Request,
    service: EventService = Depends(get_event_service),
) -> WebhookAck:
    """
    PURPOSE: Validate and store one inbound webhook event.

    Args:
        request: FastAPI Request (required by slowapi rate limiter).
        service: EventService for this application.

    Returns:
        WebhookAck: {"message": "Webhook data received successfully"[, "id"]}

    Raises:
        HTTP 400: Invalid body or failed validation ({"error": reason}).
        HTTP 429: Rate limit exceeded (only with RATE_LIMIT_ENABLED).
        HTTP 500: Storage failure ({"error": "Internal server error"}).
    """
    payload = await _read_json_object(request)
    return await service.ingest(payload)
