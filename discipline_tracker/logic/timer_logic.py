"""
作業時間計測ロジック（開始・停止）
"""
import logging
from datetime import datetime
from typing import Callable, Optional

from ..errors import NotFoundError
from ..models import TimeLog, TaskStatus
from ..store import Store
from ..utils.dates import now_iso, seconds_between, format_duration

logger = logging.getLogger(__name__)


class TimeTracker:
    """タスクごとの計測を管理するクラス（1タスクにつき計測中ログは1件まで）"""

    def __init__(self, store: Store, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.clock = clock or datetime.now

    def _now(self) -> str:
        return now_iso(self.clock())

    def start(self, task_id: str) -> TimeLog:
        """計測を開始"""
        task = self.store.get_task(task_id)
        if task is None:
            raise NotFoundError(f"タスクが見つかりません: {task_id}")

        # 既に計測中ならそのログを返す
        open_log = self.store.get_open_time_log(task_id)
        if open_log:
            return open_log

        start_time = self._now()
        log = self.store.add_time_log(TimeLog(task_id=task_id, start_time=start_time))

        if task.actual_start is None:
            task.actual_start = start_time
        if task.status == TaskStatus.PENDING:
            task.status = TaskStatus.IN_PROGRESS
        self.store.update_task(task)

        logger.info("Timer started for task %s", task_id)
        return log

    def stop(self, task_id: str) -> Optional[TimeLog]:
        """計測を停止（計測中でなければNone）"""
        log = self.store.get_open_time_log(task_id)
        if log is None:
            return None

        log.end_time = self._now()
        log.duration = seconds_between(log.start_time, log.end_time)
        self.store.close_time_log(log)

        logger.info("Timer stopped for task %s after %ds", task_id, log.duration)
        return log

    def elapsed(self, task_id: str) -> int:
        """計測中ログの経過秒数"""
        log = self.store.get_open_time_log(task_id)
        if log is None:
            return 0
        return seconds_between(log.start_time, self._now())

    def get_formatted_time(self, task_id: str) -> str:
        """経過時間を整形（HH:MM:SS）"""
        return format_duration(self.elapsed(task_id))
