from meetsync.models.events import (
    Availability,
    BestTime,
    Event,
    Participant,
    ParticipantStatus,
    PollSummaryResponse,
    SlotResponse,
    SlotScore,
    TimeSlot,
)

__all__ = [
    "Availability",
    "BestTime",
    "Event",
    "Participant",
    "ParticipantStatus",
    "PollSummaryResponse",
    "SlotResponse",
    "SlotScore",
    "TimeSlot",
]
