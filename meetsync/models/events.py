from datetime import UTC, date, datetime, time
from enum import StrEnum

from pydantic import BaseModel, field_serializer, field_validator, model_validator


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class SlotResponse(StrEnum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    MAYBE = "maybe"


class ParticipantStatus(StrEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class TimeSlot(BaseModel):
    day: date
    start_time: time
    end_time: time

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_minutes(cls, v: time) -> time:
        # slots are stored as HH:MM wall-clock times
        if v.second or v.microsecond:
            raise ValueError("slot times must be whole minutes (HH:MM)")
        if v.tzinfo is not None:
            raise ValueError("slot times must not carry a timezone")
        return v

    @model_validator(mode="after")
    def check_order(self) -> "TimeSlot":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    @field_serializer("start_time", "end_time")
    def serialize_time(self, value: time) -> str:
        return value.strftime("%H:%M")


class BestTime(BaseModel):
    day: date
    start_time: time
    end_time: time
    attendees: int

    @field_serializer("start_time", "end_time")
    def serialize_time(self, value: time) -> str:
        return value.strftime("%H:%M")


class Availability(BaseModel):
    user_id: str
    responses: dict[int, SlotResponse]


class Participant(BaseModel):
    user_id: str
    status: ParticipantStatus = ParticipantStatus.PENDING


class Event(BaseModel):
    id: str
    title: str
    description: str = ""
    start_time: datetime
    end_time: datetime
    created_by: str
    participants: list[Participant] = []
    time_slots: list[TimeSlot] = []
    availability: list[Availability] = []
    best_time: BestTime | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("start_time", "end_time", "created_at", "updated_at")
    @classmethod
    def normalize_tz(cls, v: datetime) -> datetime:
        return as_utc(v)

    def find_participant(self, user_id: str) -> Participant | None:
        return next((p for p in self.participants if p.user_id == user_id), None)

    def find_availability(self, user_id: str) -> Availability | None:
        return next((a for a in self.availability if a.user_id == user_id), None)


class SlotScore(BaseModel):
    index: int
    day: date
    start_time: time
    end_time: time
    available_count: int
    maybe_count: int
    response_count: int
    score: float

    @field_serializer("start_time", "end_time")
    def serialize_time(self, value: time) -> str:
        return value.strftime("%H:%M")


class PollSummaryResponse(BaseModel):
    event_id: str
    participant_count: int
    slots: list[SlotScore]
    best_time: BestTime | None = None
