from meetsync.db.base import EventStore
from meetsync.errors import ConflictError
from meetsync.models.events import Event


class InMemoryEventStore(EventStore):
    """Process-local store. Hands out copies so callers can't mutate it."""

    def __init__(self) -> None:
        self._events: dict[str, Event] = {}

    async def create(self, event: Event) -> Event:
        if event.id in self._events:
            raise ConflictError(detail="Event ID already in use", event_id=event.id)
        self._events[event.id] = event.model_copy(deep=True)
        return event

    async def get(self, event_id: str) -> Event | None:
        event = self._events.get(event_id)
        return event.model_copy(deep=True) if event else None

    async def update(self, event: Event) -> bool:
        if event.id not in self._events:
            return False
        self._events[event.id] = event.model_copy(deep=True)
        return True

    async def delete(self, event_id: str) -> bool:
        return self._events.pop(event_id, None) is not None

    async def list_events(self) -> list[Event]:
        events = sorted(self._events.values(), key=lambda e: e.created_at)
        return [e.model_copy(deep=True) for e in events]
