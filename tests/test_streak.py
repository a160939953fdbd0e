import pytest

from discipline_tracker.errors import ValidationError
from discipline_tracker.logic.streak import record_completion
from discipline_tracker.models import StreakState


def test_consecutive_day_extends_streak():
    state = StreakState(3, 5, "2024-01-04")
    assert record_completion(state, "2024-01-05") == StreakState(4, 5, "2024-01-05")


def test_extending_past_longest_updates_longest():
    state = StreakState(5, 5, "2024-01-04")
    assert record_completion(state, "2024-01-05") == StreakState(6, 6, "2024-01-05")


def test_gap_resets_to_one():
    state = StreakState(3, 5, "2024-01-02")
    assert record_completion(state, "2024-01-05") == StreakState(1, 5, "2024-01-05")


def test_same_day_is_not_counted_twice():
    state = StreakState(3, 5, "2024-01-05")
    assert record_completion(state, "2024-01-05") == StreakState(3, 5, "2024-01-05")


def test_first_completion_starts_at_one():
    assert record_completion(StreakState(), "2024-01-05") == StreakState(1, 1, "2024-01-05")


def test_month_boundary_counts_as_consecutive():
    state = StreakState(2, 2, "2024-02-29")
    assert record_completion(state, "2024-03-01").current_streak == 3


def test_record_completion_does_not_mutate_input():
    state = StreakState(3, 5, "2024-01-04")
    record_completion(state, "2024-01-05")
    assert state == StreakState(3, 5, "2024-01-04")


def test_tracker_starts_empty(streak):
    assert streak.current_state() == StreakState(0, 0, None)


def test_tracker_persists_updates(streak, store):
    streak.update(True, "2024-01-04")
    streak.update(True, "2024-01-05")
    assert store.get_streak() == StreakState(2, 2, "2024-01-05")


def test_tracker_ignores_incomplete_day(streak):
    streak.update(True, "2024-01-04")
    state = streak.update(False, "2024-01-05")
    assert state == StreakState(1, 1, "2024-01-04")


def test_longest_never_below_current(streak):
    for day in ("2024-01-01", "2024-01-02", "2024-01-04", "2024-01-05", "2024-01-06"):
        state = streak.update(True, day)
        assert state.longest_streak >= state.current_streak
    assert state == StreakState(3, 3, "2024-01-06")


@pytest.mark.parametrize("bad_date", ["bad", "2024-13-01", "2024/01/05"])
def test_tracker_rejects_malformed_date(streak, store, bad_date):
    with pytest.raises(ValidationError):
        streak.update(True, bad_date)
    with pytest.raises(ValidationError):
        streak.record_completion(bad_date)
    assert store.get_streak() == StreakState()
