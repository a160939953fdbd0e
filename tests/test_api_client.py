import httpx
import pytest

from discipline_tracker.cloud.api_client import TrackerClient
from discipline_tracker.errors import NotFoundError, StorageError, TrackerError, ValidationError


@pytest.fixture
def api(app):
    client = TrackerClient("http://testserver", transport=httpx.WSGITransport(app=app))
    yield client
    client.close()


def test_task_lifecycle(api):
    task = api.create_task(title="Write", date="2024-01-05")
    assert api.get_tasks("2024-01-05")[0]["id"] == task["id"]

    updated = api.update_task(task["id"], status="completed")
    assert updated["status"] == "completed"
    assert api.daily_summary("2024-01-05")["disciplineScore"] == 100

    assert api.delete_task(task["id"]) == {"success": True}
    assert api.get_tasks() == []


def test_errors_are_mapped(api):
    with pytest.raises(ValidationError):
        api.create_task(title="")
    with pytest.raises(NotFoundError):
        api.get_task("missing")


def test_timer_and_streak(api, clock):
    task = api.create_task(title="Focus")
    api.start_timer(task["id"])
    clock.advance(60)
    assert api.stop_timer(task["id"])["log"]["duration"] == 60

    api.update_streak(True, "2024-01-04")
    assert api.update_streak(True)["current_streak"] == 2
    assert api.get_streak()["longest_streak"] == 2
    assert len(api.weekly()) == 7
    assert len(api.heatmap()) == 30


def test_templates_and_motivation(api):
    template = api.add_template("Workday", [{"title": "Plan"}])
    assert [t["title"] for t in api.apply_template(template["id"], "2024-01-06")] == ["Plan"]
    item = api.add_motivation("Keep going")
    assert api.get_motivation()[0]["content"] == "Keep going"
    api.delete_motivation(item["id"])
    assert api.get_motivation() == []


def _client_for(handler):
    return TrackerClient("http://testserver", transport=httpx.MockTransport(handler))


def test_server_error_maps_to_storage_error():
    client = _client_for(lambda request: httpx.Response(500, json={"error": "disk full"}))
    with pytest.raises(StorageError, match="disk full"):
        client.get_streak()


def test_connection_failure_maps_to_tracker_error():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TrackerError):
        _client_for(refuse).health()
