"""
PURPOSE: FastAPI dependencies shared by the API routers.
"""

from fastapi import Request

from signal_ledger.services.event_service import EventService


def get_event_service(request: Request) -> EventService:
    """
    PURPOSE: Return the EventService built for this application instance.

    CALLED BY: Route handlers via Depends(get_event_service)
    """
    return request.app.state.event_service
