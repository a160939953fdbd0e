from datetime import date, datetime, timedelta

import pytest

from discipline_tracker.config import Config
from discipline_tracker.database import Database
from discipline_tracker.local_store import LocalStore
from discipline_tracker.logic.analytics import AnalyticsEngine
from discipline_tracker.logic.planner import Planner
from discipline_tracker.logic.streak import StreakTracker
from discipline_tracker.logic.timer_logic import TimeTracker
from discipline_tracker.server import create_app

TODAY = date(2024, 1, 5)
TODAY_STR = "2024-01-05"


class FakeClock:
    """テスト用の時計（advanceで進める）"""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 5, 9, 0, 0))


@pytest.fixture(params=["sqlite", "local"])
def store(request, tmp_path):
    if request.param == "sqlite":
        return Database(str(tmp_path / "discipline.db"))
    return LocalStore(str(tmp_path / "data" / "discipline.json"))


@pytest.fixture
def planner(store, clock):
    return Planner(store, clock=clock)


@pytest.fixture
def timer(store, clock):
    return TimeTracker(store, clock=clock)


@pytest.fixture
def analytics(store):
    return AnalyticsEngine(store, today=lambda: TODAY)


@pytest.fixture
def streak(store):
    return StreakTracker(store)


@pytest.fixture
def app(store, clock):
    app = create_app(store=store, config=Config(), today=lambda: TODAY, clock=clock)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
