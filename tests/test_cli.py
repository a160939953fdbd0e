import httpx
import pytest

from discipline_tracker import cli
from discipline_tracker.cloud.api_client import TrackerClient
from discipline_tracker.local_store import LocalStore
from discipline_tracker.models import StreakState, Task, TaskStatus
from discipline_tracker.utils.dates import today_str


@pytest.fixture
def local_env(tmp_path, monkeypatch):
    path = tmp_path / "discipline.json"
    monkeypatch.setenv("TRACKER_BACKEND", "local")
    monkeypatch.setenv("TRACKER_LOCAL_PATH", str(path))
    return LocalStore(str(path))


def test_summary_local(local_env, capsys):
    local_env.add_task(Task(title="a", date="2024-01-05", status=TaskStatus.COMPLETED))
    local_env.add_task(Task(title="b", date="2024-01-05"))

    assert cli.main(["--local", "summary", "--date", "2024-01-05"]) == 0
    out = capsys.readouterr().out
    assert "50%" in out
    assert "1/2" in out


def test_complete_day_and_streak_local(local_env, capsys):
    assert cli.main(["--local", "complete-day", "--date", "2024-01-04"]) == 0
    assert cli.main(["--local", "complete-day", "--date", "2024-01-05"]) == 0
    assert local_env.get_streak() == StreakState(2, 2, "2024-01-05")

    assert cli.main(["--local", "complete-day", "--missed"]) == 0
    assert local_env.get_streak().last_completed_date == "2024-01-05"

    assert cli.main(["--local", "streak"]) == 0
    assert "Current streak: 2" in capsys.readouterr().out


def test_week_local(local_env, capsys):
    local_env.add_task(Task(title="a", date=today_str(), status=TaskStatus.COMPLETED))
    assert cli.main(["--local", "week"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 7
    assert lines[-1].startswith(today_str())
    assert "100%" in lines[-1]


def test_invalid_store_file_reports_error(local_env, capsys):
    local_env.path.write_text("{broken", encoding="utf-8")
    assert cli.main(["--local", "streak"]) == 1
    assert "❌" in capsys.readouterr().err


@pytest.fixture
def http_clients(app, monkeypatch):
    """cli が作る TrackerClient を WSGI 経由でテスト用アプリにつなぐ"""
    created = []

    def make_client(base_url):
        client = TrackerClient(base_url, transport=httpx.WSGITransport(app=app))
        created.append(client)
        return client

    monkeypatch.setattr(cli, "TrackerClient", make_client)
    return created


def test_commands_over_http(http_clients, store, capsys):
    store.add_task(Task(title="a", date="2024-01-05", status=TaskStatus.COMPLETED))

    assert cli.main(["--api-url", "http://testserver", "summary", "--date", "2024-01-05"]) == 0
    assert "100%" in capsys.readouterr().out

    assert cli.main(["--api-url", "http://testserver", "complete-day"]) == 0
    assert store.get_streak() == StreakState(1, 1, "2024-01-05")

    assert len(http_clients) == 2
    assert all(client._client.is_closed for client in http_clients)


def test_http_error_is_reported(http_clients, capsys):
    assert cli.main(["--api-url", "http://testserver", "summary", "--date", "bad"]) == 1
    assert "❌" in capsys.readouterr().err
    assert http_clients[0]._client.is_closed
