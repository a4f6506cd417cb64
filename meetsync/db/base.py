"""Event repository interface shared by every storage backend."""

from abc import ABC, abstractmethod

from meetsync.models.events import Event


class EventStore(ABC):
    """Create, read, update and delete events by ID."""

    @abstractmethod
    async def create(self, event: Event) -> Event:
        """Store a new event. Raises ConflictError if the ID is taken."""

    @abstractmethod
    async def get(self, event_id: str) -> Event | None:
        ...

    @abstractmethod
    async def update(self, event: Event) -> bool:
        """Replace a stored event. Returns False if it doesn't exist."""

    @abstractmethod
    async def delete(self, event_id: str) -> bool:
        ...

    @abstractmethod
    async def list_events(self) -> list[Event]:
        """All events, oldest first."""

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return
