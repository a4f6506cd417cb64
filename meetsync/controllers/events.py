import logging
from datetime import datetime

from fastapi import APIRouter, Query, Response
from pydantic import BaseModel, field_validator, model_validator

from meetsync.dependencies import Events
from meetsync.models.events import (
    Availability,
    Event,
    ParticipantStatus,
    PollSummaryResponse,
    SlotResponse,
    TimeSlot,
    as_utc,
)

logger = logging.getLogger("meetsync.events")
router = APIRouter(prefix="/events", tags=["events"])


def _validate_title(v: str) -> str:
    v = v.strip()
    if not v or len(v) > 200:
        raise ValueError("title must be 1-200 characters")
    return v


class CreateEventRequest(BaseModel):
    title: str
    description: str = ""
    start_time: datetime
    end_time: datetime
    created_by: str
    participant_ids: list[str] = []
    time_slots: list[TimeSlot] = []

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _validate_title(v)

    @field_validator("created_by")
    @classmethod
    def validate_created_by(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("created_by must not be empty")
        return v

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_tz(cls, v: datetime) -> datetime:
        return as_utc(v)

    @model_validator(mode="after")
    def check_times(self) -> "CreateEventRequest":
        if self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        return self


class UpdateEventRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    participant_ids: list[str] | None = None
    time_slots: list[TimeSlot] | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        return _validate_title(v) if v is not None else v

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_tz(cls, v: datetime | None) -> datetime | None:
        return as_utc(v) if v is not None else v


class AvailabilityRequest(BaseModel):
    responses: dict[int, SlotResponse]


class ParticipantStatusRequest(BaseModel):
    status: ParticipantStatus


@router.post("", status_code=201)
async def create_event(req: CreateEventRequest, events: Events) -> Event:
    logger.info("POST /events title=%s slots=%d participants=%d",
                req.title, len(req.time_slots), len(req.participant_ids))
    return await events.create_event(
        title=req.title,
        description=req.description,
        start_time=req.start_time,
        end_time=req.end_time,
        created_by=req.created_by,
        participant_ids=req.participant_ids,
        time_slots=req.time_slots,
    )


@router.get("")
async def list_events(
    events: Events,
    participant: str | None = Query(None, description="Only events this user is invited to"),
    status: ParticipantStatus | None = Query(None, description="Invitation status of `participant`"),
    created_by: str | None = Query(None, description="Only events created by this user"),
) -> list[Event]:
    logger.info("GET /events participant=%s status=%s created_by=%s", participant, status, created_by)
    return await events.list_events(participant=participant, status=status, created_by=created_by)


@router.get("/upcoming")
async def upcoming_events(
    events: Events,
    limit: int = Query(3, ge=1, le=50, description="Maximum number of events to return"),
) -> list[Event]:
    return await events.upcoming_events(limit=limit)


@router.get("/{event_id}")
async def get_event(event_id: str, events: Events) -> Event:
    logger.info("GET /events/%s", event_id)
    return await events.get_event(event_id)


@router.patch("/{event_id}")
async def update_event(event_id: str, req: UpdateEventRequest, events: Events) -> Event:
    changes = req.model_dump(exclude_none=True, exclude_unset=True)
    # keep TimeSlot instances rather than their dict dumps
    if "time_slots" in changes:
        changes["time_slots"] = req.time_slots
    logger.info("PATCH /events/%s fields=%s", event_id, sorted(changes))
    return await events.update_event(event_id, changes)


@router.delete("/{event_id}", status_code=204)
async def delete_event(event_id: str, events: Events) -> Response:
    logger.info("DELETE /events/%s", event_id)
    await events.delete_event(event_id)
    return Response(status_code=204)


@router.put("/{event_id}/availability/{user_id}")
async def submit_availability(
    event_id: str,
    user_id: str,
    req: AvailabilityRequest,
    events: Events,
) -> Event:
    logger.info("PUT /events/%s/availability/%s slots=%d", event_id, user_id, len(req.responses))
    return await events.record_response(event_id, user_id, req.responses)


@router.get("/{event_id}/availability/{user_id}")
async def get_availability(event_id: str, user_id: str, events: Events) -> Availability:
    return await events.get_response(event_id, user_id)


@router.get("/{event_id}/summary")
async def poll_summary(event_id: str, events: Events) -> PollSummaryResponse:
    logger.info("GET /events/%s/summary", event_id)
    return await events.poll_summary(event_id)


@router.post("/{event_id}/best-time")
async def recalculate_best_time(event_id: str, events: Events) -> Event:
    logger.info("POST /events/%s/best-time", event_id)
    return await events.recalculate_best_time(event_id)


@router.put("/{event_id}/participants/{user_id}")
async def set_participant_status(
    event_id: str,
    user_id: str,
    req: ParticipantStatusRequest,
    events: Events,
) -> Event:
    logger.info("PUT /events/%s/participants/%s status=%s", event_id, user_id, req.status)
    return await events.set_participant_status(event_id, user_id, req.status)
