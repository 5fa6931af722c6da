"""
PURPOSE: API router initialization and exports for Signal Ledger.

This module aggregates the webhook and event routers into a single
api_router that is included in the main FastAPI application.
"""

from fastapi import APIRouter

from signal_ledger.api.routes_events import router as events_router
from signal_ledger.api.routes_webhook import router as webhook_router

# Create the main API router
api_router = APIRouter(prefix="/api")

# Include all sub-routers
api_router.include_router(webhook_router, tags=["webhook"])
api_router.include_router(events_router, tags=["events"])

__all__ = ["api_router"]
