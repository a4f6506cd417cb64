"""Dependency injection for FastAPI endpoints.

The lifespan puts the EventService on ``app.state``; controllers receive it
through these dependencies instead of importing a module-level global.

Usage in controllers:
    from meetsync.dependencies import Events

    @router.get("/events/{event_id}")
    async def get_event(event_id: str, events: Events) -> Event:
        return await events.get_event(event_id)
"""

from typing import Annotated

from fastapi import Depends, Request

from meetsync.errors import ServiceUnavailableError
from meetsync.service import EventService


def get_event_service(request: Request) -> EventService:
    """Get the EventService.

    Raises:
        ServiceUnavailableError: If the application hasn't finished starting.
    """
    service = getattr(request.app.state, "event_service", None)
    if service is None:
        raise ServiceUnavailableError(detail="Event store not initialized")
    return service


def get_optional_event_service(request: Request) -> EventService | None:
    return getattr(request.app.state, "event_service", None)


Events = Annotated[EventService, Depends(get_event_service)]
OptionalEvents = Annotated[EventService | None, Depends(get_optional_event_service)]
