"""Event service: the only writer of events.

Every read-modify-write of an event runs under that event's lock, so a
response submission and the best-time recomputation that follows it can't
interleave with another write to the same event in this process.
"""

import asyncio
import logging
import secrets
import string
import weakref
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from meetsync import aggregator
from meetsync.db.base import EventStore
from meetsync.errors import BadRequestError, ConflictError, DatabaseError, NotFoundError
from meetsync.models.events import (
    Availability,
    Event,
    Participant,
    ParticipantStatus,
    PollSummaryResponse,
    SlotResponse,
    TimeSlot,
)

logger = logging.getLogger("meetsync.service")

ID_ATTEMPTS = 10


def _generate_event_id(length: int = 10) -> str:
    chars = string.ascii_lowercase + string.digits
    return "".join(secrets.choice(chars) for _ in range(length))


def _unique(user_ids: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(user_ids))


class EventService:
    def __init__(self, store: EventStore, keep_stale_best_time: bool = True) -> None:
        self.store = store
        self.keep_stale_best_time = keep_stale_best_time
        # entries disappear once no write holds or awaits the lock
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock(self, event_id: str) -> asyncio.Lock:
        lock = self._locks.get(event_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[event_id] = lock
        return lock

    async def _load(self, event_id: str) -> Event:
        event = await self.store.get(event_id)
        if event is None:
            raise NotFoundError(detail="Event not found", event_id=event_id)
        return event

    async def _save(self, event: Event) -> Event:
        event.updated_at = datetime.now(UTC)
        if not await self.store.update(event):
            raise NotFoundError(detail="Event not found", event_id=event.id)
        return event

    def _refresh_best_time(self, event: Event) -> None:
        event.best_time = aggregator.resolve_best_time(
            event.best_time,
            event.time_slots,
            event.availability,
            keep_stale=self.keep_stale_best_time,
        )

    async def create_event(
        self,
        *,
        title: str,
        start_time: datetime,
        end_time: datetime,
        created_by: str,
        description: str = "",
        participant_ids: Iterable[str] = (),
        time_slots: Iterable[TimeSlot] = (),
    ) -> Event:
        now = datetime.now(UTC)
        for _ in range(ID_ATTEMPTS):
            event = Event(
                id=_generate_event_id(),
                title=title,
                description=description,
                start_time=start_time,
                end_time=end_time,
                created_by=created_by,
                participants=[Participant(user_id=u) for u in _unique(participant_ids)],
                time_slots=list(time_slots),
                created_at=now,
                updated_at=now,
            )
            try:
                await self.store.create(event)
            except ConflictError:
                continue
            logger.info("Created event id=%s slots=%d", event.id, len(event.time_slots))
            return event
        raise DatabaseError(detail="Failed to generate unique event ID")

    async def get_event(self, event_id: str) -> Event:
        return await self._load(event_id)

    async def list_events(
        self,
        participant: str | None = None,
        status: ParticipantStatus | None = None,
        created_by: str | None = None,
    ) -> list[Event]:
        """List events, optionally only those a user is invited to or created.

        ``status`` narrows ``participant`` to invitations in that state.
        """
        events = await self.store.list_events()
        if created_by is not None:
            events = [e for e in events if e.created_by == created_by]
        if participant is not None:
            matching = []
            for e in events:
                p = e.find_participant(participant)
                if p is not None and (status is None or p.status == status):
                    matching.append(e)
            events = matching
        return events

    async def upcoming_events(self, limit: int = 3, now: datetime | None = None) -> list[Event]:
        now = now or datetime.now(UTC)
        events = [e for e in await self.store.list_events() if e.start_time > now]
        events.sort(key=lambda e: e.start_time)
        return events[:limit]

    async def update_event(self, event_id: str, changes: Mapping[str, Any]) -> Event:
        """Apply a partial update.

        ``participant_ids`` replaces the invitation list; users who stay
        invited keep their status. Changing ``time_slots`` recomputes the best
        time against the new slot list.
        """
        async with self._lock(event_id):
            event = await self._load(event_id)
            for field in ("title", "description", "start_time", "end_time"):
                if field in changes:
                    setattr(event, field, changes[field])
            if event.end_time < event.start_time:
                raise BadRequestError(detail="end_time must not be before start_time")
            if "participant_ids" in changes:
                existing = {p.user_id: p for p in event.participants}
                event.participants = [
                    existing.get(u) or Participant(user_id=u)
                    for u in _unique(changes["participant_ids"])
                ]
            if "time_slots" in changes:
                event.time_slots = list(changes["time_slots"])
                self._refresh_best_time(event)
            await self._save(event)
        logger.info("Updated event id=%s fields=%s", event_id, sorted(changes))
        return event

    async def delete_event(self, event_id: str) -> None:
        async with self._lock(event_id):
            if not await self.store.delete(event_id):
                raise NotFoundError(detail="Event not found", event_id=event_id)
        logger.info("Deleted event id=%s", event_id)

    async def record_response(
        self,
        event_id: str,
        user_id: str,
        responses: Mapping[int, SlotResponse],
    ) -> Event:
        """Replace ``user_id``'s availability and recompute the best time."""
        if not responses:
            raise BadRequestError(detail="Select availability for at least one time slot")
        async with self._lock(event_id):
            event = await self._load(event_id)
            event.availability = aggregator.record_response(event.availability, user_id, responses)
            self._refresh_best_time(event)
            await self._save(event)
        logger.info(
            "Recorded availability event=%s user=%s slots=%d best=%s",
            event_id,
            user_id,
            len(responses),
            event.best_time.day if event.best_time else None,
        )
        return event

    async def get_response(self, event_id: str, user_id: str) -> Availability:
        event = await self._load(event_id)
        record = event.find_availability(user_id)
        if record is None:
            raise NotFoundError(
                detail="No availability recorded for user", event_id=event_id, user_id=user_id
            )
        return record

    async def recalculate_best_time(self, event_id: str) -> Event:
        async with self._lock(event_id):
            event = await self._load(event_id)
            self._refresh_best_time(event)
            await self._save(event)
        return event

    async def poll_summary(self, event_id: str) -> PollSummaryResponse:
        event = await self._load(event_id)
        return PollSummaryResponse(
            event_id=event.id,
            participant_count=len(event.participants),
            slots=aggregator.score_slots(event.time_slots, event.availability),
            best_time=aggregator.select_best_slot(event.time_slots, event.availability),
        )

    async def set_participant_status(
        self,
        event_id: str,
        user_id: str,
        status: ParticipantStatus,
    ) -> Event:
        async with self._lock(event_id):
            event = await self._load(event_id)
            participant = event.find_participant(user_id)
            if participant is None:
                raise NotFoundError(
                    detail="User is not invited to this event", event_id=event_id, user_id=user_id
                )
            participant.status = status
            await self._save(event)
        logger.info("Participant %s is %s for event %s", user_id, status, event_id)
        return event
