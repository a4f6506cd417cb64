"""Availability aggregation and best-time selection.

Slots are scored by how many participants can make them: an ``available``
response counts 1, ``maybe`` counts 0.5, anything else counts nothing.
The slot with the highest score becomes the event's best time.

Usage:
    from meetsync.aggregator import select_best_slot
    best = select_best_slot(event.time_slots, event.availability)
"""

import math
from collections.abc import Iterable, Mapping, Sequence

from meetsync.models.events import (
    Availability,
    BestTime,
    SlotResponse,
    SlotScore,
    TimeSlot,
)

AVAILABLE_WEIGHT = 1.0
MAYBE_WEIGHT = 0.5


def round_half_up(score: float) -> int:
    """Round to the nearest integer, halves going up (0.5 -> 1, 2.5 -> 3).

    Scores are never negative, so this is also round-half-away-from-zero.
    """
    return int(math.floor(score + 0.5))


def record_response(
    availabilities: Sequence[Availability],
    user_id: str,
    responses: Mapping[int, SlotResponse],
) -> list[Availability]:
    """Return a copy of ``availabilities`` with ``user_id``'s record replaced.

    The new responses replace the old ones wholesale. An existing record keeps
    its position; a new record is appended.
    """
    record = Availability(user_id=user_id, responses=dict(responses))
    result = list(availabilities)
    for i, existing in enumerate(result):
        if existing.user_id == user_id:
            result[i] = record
            return result
    result.append(record)
    return result


def score_slots(
    slots: Sequence[TimeSlot],
    availabilities: Iterable[Availability],
) -> list[SlotScore]:
    """Compute the weighted score of every slot.

    Response indices that don't address a slot are ignored.
    """
    available = [0] * len(slots)
    maybe = [0] * len(slots)
    responded = [0] * len(slots)
    for record in availabilities:
        for index, response in record.responses.items():
            if not 0 <= index < len(slots):
                continue
            responded[index] += 1
            if response == SlotResponse.AVAILABLE:
                available[index] += 1
            elif response == SlotResponse.MAYBE:
                maybe[index] += 1

    return [
        SlotScore(
            index=i,
            day=slot.day,
            start_time=slot.start_time,
            end_time=slot.end_time,
            available_count=available[i],
            maybe_count=maybe[i],
            response_count=responded[i],
            score=available[i] * AVAILABLE_WEIGHT + maybe[i] * MAYBE_WEIGHT,
        )
        for i, slot in enumerate(slots)
    ]


def select_best_slot(
    slots: Sequence[TimeSlot],
    availabilities: Iterable[Availability],
) -> BestTime | None:
    """Pick the highest scoring slot, or None if no slot scores above zero.

    Ties go to the slot that comes first.
    """
    scores = score_slots(slots, availabilities)
    if not scores:
        return None
    # max() keeps the first of equal elements
    best = max(scores, key=lambda s: s.score)
    if best.score <= 0:
        return None
    return BestTime(
        day=best.day,
        start_time=best.start_time,
        end_time=best.end_time,
        attendees=round_half_up(best.score),
    )


def resolve_best_time(
    current: BestTime | None,
    slots: Sequence[TimeSlot],
    availabilities: Iterable[Availability],
    keep_stale: bool = True,
) -> BestTime | None:
    """Recompute the best time for an event that currently has ``current``.

    When nothing scores above zero the previous best time is kept if
    ``keep_stale`` is set and cleared otherwise.
    """
    best = select_best_slot(slots, availabilities)
    if best is None and keep_stale:
        return current
    return best
