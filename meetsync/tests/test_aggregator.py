"""Tests for slot scoring and best-time selection."""

from datetime import date, time

import pytest

from meetsync.aggregator import (
    record_response,
    resolve_best_time,
    round_half_up,
    score_slots,
    select_best_slot,
)
from meetsync.models.events import Availability, BestTime, SlotResponse

A = SlotResponse.AVAILABLE
U = SlotResponse.UNAVAILABLE
M = SlotResponse.MAYBE


def _records(**by_user):
    return [Availability(user_id=u, responses=r) for u, r in by_user.items()]


class TestSelectBestSlot:

    def test_empty_slots_has_no_best_time(self):
        assert select_best_slot([], _records(u1={0: A})) is None

    def test_no_responses_has_no_best_time(self, slots):
        assert select_best_slot(slots, []) is None

    def test_all_unavailable_has_no_best_time(self, slots):
        records = _records(u1={0: U, 1: U}, u2={0: U, 2: U})
        assert select_best_slot(slots, records) is None

    def test_available_beats_maybe(self, slots):
        records = _records(
            u1={0: A, 1: U},
            u2={0: A, 1: M},
        )
        best = select_best_slot(slots[:2], records)

        assert best == BestTime(
            day=date(2025, 3, 10), start_time=time(10, 0), end_time=time(11, 0), attendees=2
        )

    def test_two_maybes_outscore_one(self, slots):
        records = _records(u1={0: M}, u2={1: M, 0: M})

        scores = score_slots(slots[:2], records)
        best = select_best_slot(slots[:2], records)

        assert [s.score for s in scores] == [1.0, 0.5]
        assert best.day == date(2025, 3, 10)
        assert best.attendees == 1

    def test_tie_goes_to_first_slot(self, slots):
        records = _records(u1={0: A, 1: A}, u2={0: A, 1: A})
        best = select_best_slot(slots, records)
        assert best.day == slots[0].day

    def test_tie_goes_to_first_slot_not_at_index_zero(self, slots):
        records = _records(u1={1: A, 2: A}, u2={0: M})
        best = select_best_slot(slots, records)
        assert best.day == slots[1].day

    def test_single_maybe_rounds_up(self, slots):
        best = select_best_slot(slots, _records(u1={2: M}))
        assert best.day == slots[2].day
        assert best.attendees == 1

    def test_out_of_range_indices_are_ignored(self, slots):
        records = _records(u1={7: A, -1: A}, u2={1: M})
        best = select_best_slot(slots, records)
        assert best.day == slots[1].day
        assert best.attendees == 1


class TestScoreSlots:

    def test_counts_per_slot(self, slots):
        records = _records(
            u1={0: A, 1: M, 2: U},
            u2={0: M},
            u3={0: A, 2: A},
        )
        scores = score_slots(slots, records)

        assert [s.available_count for s in scores] == [2, 0, 1]
        assert [s.maybe_count for s in scores] == [1, 1, 0]
        assert [s.response_count for s in scores] == [3, 1, 2]
        assert [s.score for s in scores] == [2.5, 0.5, 1.0]
        assert [s.index for s in scores] == [0, 1, 2]

    def test_missing_responses_count_for_nothing(self, slots):
        scores = score_slots(slots, _records(u1={}))
        assert all(s.score == 0 and s.response_count == 0 for s in scores)

    @pytest.mark.parametrize("extra", [A, M])
    def test_score_never_drops_when_responses_are_added(self, slots, extra):
        records = _records(u1={0: A}, u2={0: U})
        before = score_slots(slots, records)[0].score

        records.append(Availability(user_id="u3", responses={0: extra}))
        after = score_slots(slots, records)[0].score

        assert after > before

    def test_scores_carry_slot_times(self, slots):
        scores = score_slots(slots, [])
        assert [(s.day, s.start_time, s.end_time) for s in scores] == [
            (s.day, s.start_time, s.end_time) for s in slots
        ]


class TestRecordResponse:

    def test_appends_new_user(self):
        result = record_response(_records(u1={0: A}), "u2", {1: M})
        assert [r.user_id for r in result] == ["u1", "u2"]
        assert result[1].responses == {1: M}

    def test_replaces_without_merging(self):
        existing = _records(u1={0: A, 1: A}, u2={0: U})
        result = record_response(existing, "u1", {2: M})

        assert [r.user_id for r in result] == ["u1", "u2"]
        assert result[0].responses == {2: M}

    def test_reads_back_exactly(self):
        responses = {0: U, 3: M, 1: A}
        result = record_response([], "u1", responses)
        assert result[0].responses == responses

    def test_input_list_is_untouched(self):
        existing = _records(u1={0: A})
        record_response(existing, "u1", {0: U})
        assert existing[0].responses == {0: A}


class TestResolveBestTime:

    @pytest.fixture
    def stale(self):
        return BestTime(day=date(2025, 1, 1), start_time=time(8, 0), end_time=time(9, 0), attendees=3)

    def test_keeps_stale_best_time_by_default(self, slots, stale):
        assert resolve_best_time(stale, slots, _records(u1={0: U})) is stale

    def test_clears_stale_best_time_when_configured(self, slots, stale):
        assert resolve_best_time(stale, slots, _records(u1={0: U}), keep_stale=False) is None

    def test_new_best_time_replaces_old(self, slots, stale):
        best = resolve_best_time(stale, slots, _records(u1={1: A}))
        assert best.day == slots[1].day
        assert best.attendees == 1


class TestRoundHalfUp:

    @pytest.mark.parametrize(
        "score,expected",
        [(0.5, 1), (1.0, 1), (1.5, 2), (2.5, 3), (3.0, 3), (0.0, 0)],
    )
    def test_halves_round_up(self, score, expected):
        assert round_half_up(score) == expected
