import pytest

from discipline_tracker.errors import NotFoundError, ValidationError
from discipline_tracker.models import Category, Priority, TaskStatus


def test_create_task_defaults(planner):
    task = planner.create_task({"title": "  Read  ", "date": "2024-01-05"})
    assert task.id
    assert task.title == "Read"
    assert task.category == Category.WORK
    assert task.priority == Priority.MEDIUM
    assert task.status == TaskStatus.PENDING
    assert task.order_index == 0
    assert task.created_at == "2024-01-05T09:00:00"


def test_create_ignores_requested_status(planner):
    task = planner.create_task({"title": "a", "date": "2024-01-05", "status": "completed"})
    assert task.status == TaskStatus.PENDING


def test_new_tasks_go_to_the_end(planner):
    first = planner.create_task({"title": "a", "date": "2024-01-05"})
    second = planner.create_task({"title": "b", "date": "2024-01-05"})
    other_day = planner.create_task({"title": "c", "date": "2024-01-06"})
    assert (first.order_index, second.order_index, other_day.order_index) == (0, 1, 0)


@pytest.mark.parametrize("payload", [
    {"date": "2024-01-05"},
    {"title": "   ", "date": "2024-01-05"},
    {"title": "a"},
    {"title": "a", "date": "2024/01/05"},
    {"title": "a", "date": "2024-02-30"},
    {"title": "a", "date": "2024-01-05", "category": "sleep"},
    {"title": "a", "date": "2024-01-05", "priority": "urgent"},
    {"title": "a", "date": "2024-01-05", "planned_start": "25:00"},
    {"title": "a", "date": "2024-01-05", "planned_start": "10:00", "planned_end": "09:30"},
])
def test_invalid_task_is_rejected(planner, payload):
    with pytest.raises(ValidationError):
        planner.create_task(payload)


def test_tasks_listed_in_order(planner):
    for title in ("a", "b", "c"):
        planner.create_task({"title": title, "date": "2024-01-05"})
    assert [t.title for t in planner.list_tasks("2024-01-05")] == ["a", "b", "c"]


def test_update_fields(planner):
    task = planner.create_task({"title": "a", "date": "2024-01-05"})
    updated = planner.update_task(task.id, {
        "title": "b", "category": "health", "planned_start": "08:00", "planned_end": "09:00",
    })
    assert updated.title == "b"
    assert planner.get_task(task.id).category == Category.HEALTH
    assert planner.get_task(task.id).planned_end == "09:00"


def test_date_cannot_change(planner):
    task = planner.create_task({"title": "a", "date": "2024-01-05"})
    with pytest.raises(ValidationError):
        planner.update_task(task.id, {"date": "2024-01-06"})
    # 同じ日付ならそのまま通る
    planner.update_task(task.id, {"date": "2024-01-05", "title": "b"})
    assert planner.get_task(task.id).date == "2024-01-05"


def test_status_transitions(planner):
    task = planner.create_task({"title": "a", "date": "2024-01-05"})
    assert planner.update_task(task.id, {"status": "completed"}).is_completed
    with pytest.raises(ValidationError):
        planner.update_task(task.id, {"status": "in_progress"})
    assert planner.update_task(task.id, {"status": "pending"}).status == TaskStatus.PENDING


def test_update_cannot_invert_planned_times(planner):
    task = planner.create_task({
        "title": "a", "date": "2024-01-05", "planned_start": "09:00", "planned_end": "10:00",
    })
    with pytest.raises(ValidationError):
        planner.update_task(task.id, {"planned_start": "11:00"})


def test_update_and_delete_missing_task(planner):
    with pytest.raises(NotFoundError):
        planner.update_task("missing", {"title": "x"})
    with pytest.raises(NotFoundError):
        planner.delete_task("missing")


def test_delete_removes_task(planner):
    task = planner.create_task({"title": "a", "date": "2024-01-05"})
    planner.delete_task(task.id)
    assert planner.list_tasks("2024-01-05") == []


def test_reorder(planner):
    ids = [planner.create_task({"title": t, "date": "2024-01-05"}).id for t in "abc"]
    planner.reorder_tasks([ids[2], ids[0], ids[1]])
    assert [t.title for t in planner.list_tasks("2024-01-05")] == ["c", "a", "b"]


def test_distraction_requires_existing_task(planner):
    with pytest.raises(NotFoundError):
        planner.log_distraction({"task_id": "missing", "description": "phone"})


def test_distraction_validation(planner):
    task = planner.create_task({"title": "a", "date": "2024-01-05"})
    with pytest.raises(ValidationError):
        planner.log_distraction({"task_id": task.id, "description": ""})
    with pytest.raises(ValidationError):
        planner.log_distraction({"task_id": task.id, "description": "x", "duration": -1})


def test_energy_levels(planner):
    planner.log_energy({"level": 4, "note": "coffee"})
    for level in (0, 6, True, "high"):
        with pytest.raises(ValidationError):
            planner.log_energy({"level": level})
    logs = planner.list_energy("2024-01-05")
    assert [(log.level, log.note) for log in logs] == [(4, "coffee")]
    assert planner.list_energy("2024-01-04") == []


def test_reflection_upsert_keeps_identity(planner, clock):
    first = planner.save_reflection({"date": "2024-01-05", "what_worked": "focus"})
    clock.advance(3600)
    second = planner.save_reflection({
        "date": "2024-01-05", "what_worked": "more focus", "discipline_score": 4,
    })

    assert second.id == first.id
    assert second.created_at == first.created_at
    saved = planner.get_reflection("2024-01-05")
    assert saved.what_worked == "more focus"
    assert saved.discipline_score == 4
    assert planner.get_reflection("2024-01-04") is None


def test_reflection_score_range(planner):
    with pytest.raises(ValidationError):
        planner.save_reflection({"date": "2024-01-05", "discipline_score": 6})


def test_motivation_newest_first(planner, clock):
    planner.add_motivation({"content": "first"})
    clock.advance(1)
    planner.add_motivation({"content": "second", "type": "reason"})
    items = planner.list_motivation()
    assert [i.content for i in items] == ["second", "first"]
    assert items[0].type == "reason"

    planner.delete_motivation(items[0].id)
    assert [i.content for i in planner.list_motivation()] == ["first"]
    with pytest.raises(NotFoundError):
        planner.delete_motivation(items[0].id)


def test_apply_template_appends_pending_tasks(planner):
    planner.create_task({"title": "existing", "date": "2024-01-06"})
    template = planner.add_template({
        "name": "Workday",
        "tasks": [
            {"title": "Plan", "category": "work", "planned_start": "09:00"},
            {"title": "Gym", "category": "health", "status": "completed"},
        ],
    })

    created = planner.apply_template(template.id, "2024-01-06")

    assert [t.title for t in created] == ["Plan", "Gym"]
    assert all(t.status == TaskStatus.PENDING for t in created)
    assert [t.order_index for t in created] == [1, 2]
    assert [t.title for t in planner.list_tasks("2024-01-06")] == ["existing", "Plan", "Gym"]
    assert created[1].category == Category.HEALTH


def test_template_validation_and_delete(planner):
    with pytest.raises(ValidationError):
        planner.add_template({"name": "x", "tasks": [{"category": "work"}]})
    template = planner.add_template({"name": "Rest", "type": "weekend", "tasks": []})
    assert [t.name for t in planner.list_templates()] == ["Rest"]
    planner.delete_template(template.id)
    with pytest.raises(NotFoundError):
        planner.apply_template(template.id, "2024-01-05")
