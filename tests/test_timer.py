import pytest

from discipline_tracker.errors import NotFoundError
from discipline_tracker.models import TaskStatus
from discipline_tracker.utils.dates import format_duration


@pytest.fixture
def task(planner):
    return planner.create_task({"title": "Write report", "date": "2024-01-05"})


def test_start_then_stop_after_125_seconds(timer, clock, task, store):
    timer.start(task.id)
    clock.advance(125)
    log = timer.stop(task.id)

    assert log.duration == 125
    assert log.end_time == "2024-01-05T09:02:05"
    assert store.get_time_logs(task.id)[0].duration == 125


def test_immediate_stop_gives_zero_duration(timer, task):
    timer.start(task.id)
    assert timer.stop(task.id).duration == 0


def test_start_marks_task_in_progress_and_sets_actual_start(timer, clock, task, store):
    timer.start(task.id)
    started = store.get_task(task.id)
    assert started.status == TaskStatus.IN_PROGRESS
    assert started.actual_start == "2024-01-05T09:00:00"

    timer.stop(task.id)
    clock.advance(600)
    timer.start(task.id)
    assert store.get_task(task.id).actual_start == "2024-01-05T09:00:00"


def test_second_start_returns_the_open_log(timer, clock, task, store):
    first = timer.start(task.id)
    clock.advance(30)
    second = timer.start(task.id)

    assert second.id == first.id
    assert len([log for log in store.get_time_logs(task.id) if log.is_open]) == 1


def test_stop_without_open_log_returns_none(timer, task):
    assert timer.stop(task.id) is None


def test_start_for_missing_task(timer):
    with pytest.raises(NotFoundError):
        timer.start("missing")


def test_elapsed_and_formatting(timer, clock, task):
    timer.start(task.id)
    clock.advance(3725)
    assert timer.elapsed(task.id) == 3725
    assert timer.get_formatted_time(task.id) == "01:02:05"


def test_format_duration():
    assert format_duration(0) == "00:00:00"
    assert format_duration(125) == "00:02:05"
