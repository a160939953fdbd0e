"""
ローカルファイル版ストア

ネットワークを介さず、1つのJSONファイルにキーごとのレコード一覧を保存する。
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import StorageError
from .models import (
    Task, TimeLog, Distraction, EnergyLog, Reflection, StreakState,
    MotivationItem, DayTemplate,
)
from .store import Store, new_id
from .utils.dates import now_iso, date_of

logger = logging.getLogger(__name__)

STORAGE_KEYS = {
    "TASKS": "discipline_tasks",
    "TIME_LOGS": "discipline_timelogs",
    "DISTRACTIONS": "discipline_distractions",
    "ENERGY_LOGS": "discipline_energy",
    "REFLECTIONS": "discipline_reflections",
    "STREAK": "discipline_streak",
    "MOTIVATION": "discipline_motivation",
    "TEMPLATES": "discipline_templates",
}


class LocalStore(Store):
    """JSONファイルを保存先とするストア"""

    name = "local"

    def __init__(self, path: str = "data/discipline.json"):
        self.path = Path(path)

    # ===== 読み書き =====

    def _load(self) -> Dict[str, Any]:
        """ファイル全体を読み込む（存在しなければ空）"""
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error("Corrupted store file %s: %s", self.path, e)
            raise StorageError(f"保存データを読み込めません: {e}") from e
        except OSError as e:
            logger.error("Cannot read store file %s: %s", self.path, e)
            raise StorageError(f"保存データを読み込めません: {e}") from e
        if not isinstance(data, dict):
            logger.error("Store file %s is not a JSON object", self.path)
            raise StorageError("保存データの形式が不正です")
        return data

    def _save(self, data: Dict[str, Any]):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            logger.debug("Saved store file %s", self.path)
        except OSError as e:
            logger.error("Cannot write store file %s: %s", self.path, e)
            raise StorageError(f"保存に失敗しました: {e}") from e

    def _get_items(self, key: str) -> List[Dict[str, Any]]:
        return list(self._load().get(STORAGE_KEYS[key], []))

    def _set_items(self, key: str, items):
        data = self._load()
        data[STORAGE_KEYS[key]] = items
        self._save(data)

    def _append(self, key: str, record: Dict[str, Any]):
        items = self._get_items(key)
        items.append(record)
        self._set_items(key, items)

    def _remove(self, key: str, record_id: str) -> bool:
        items = self._get_items(key)
        remaining = [item for item in items if item.get("id") != record_id]
        if len(remaining) == len(items):
            return False
        self._set_items(key, remaining)
        return True

    def _replace(self, key: str, record: Dict[str, Any]):
        items = self._get_items(key)
        self._set_items(key, [
            record if item.get("id") == record["id"] else item
            for item in items
        ])

    # ===== Task操作 =====

    def get_tasks(self, date: str) -> List[Task]:
        tasks = [t for t in self._get_items("TASKS") if t.get("date") == date]
        # sortedは安定ソートなので同じorder_indexは追加順のまま
        tasks = sorted(tasks, key=lambda t: t.get("order_index") or 0)
        return [Task.from_dict(t) for t in tasks]

    def get_task(self, task_id: str) -> Optional[Task]:
        for item in self._get_items("TASKS"):
            if item.get("id") == task_id:
                return Task.from_dict(item)
        return None

    def add_task(self, task: Task) -> Task:
        task.id = task.id or new_id()
        task.created_at = task.created_at or now_iso()
        self._append("TASKS", task.to_dict())
        return task

    def update_task(self, task: Task) -> Task:
        current = self.get_task(task.id)
        if current is not None:
            # 日付は作成時のものを維持
            task.date = current.date
            self._replace("TASKS", task.to_dict())
        return task

    def delete_task(self, task_id: str) -> bool:
        return self._remove("TASKS", task_id)

    def set_task_order(self, task_id: str, order_index: int):
        items = self._get_items("TASKS")
        for item in items:
            if item.get("id") == task_id:
                item["order_index"] = order_index
        self._set_items("TASKS", items)

    # ===== TimeLog操作 =====

    def add_time_log(self, log: TimeLog) -> TimeLog:
        log.id = log.id or new_id()
        self._append("TIME_LOGS", log.to_dict())
        return log

    def get_open_time_log(self, task_id: str) -> Optional[TimeLog]:
        open_logs = [
            (log.get("start_time") or "", position, log)
            for position, log in enumerate(self._get_items("TIME_LOGS"))
            if log.get("task_id") == task_id and log.get("end_time") is None
        ]
        if not open_logs:
            return None
        _, _, latest = max(open_logs, key=lambda entry: (entry[0], entry[1]))
        return TimeLog.from_dict(latest)

    def close_time_log(self, log: TimeLog) -> TimeLog:
        self._replace("TIME_LOGS", log.to_dict())
        return log

    def get_time_logs(self, task_id: str) -> List[TimeLog]:
        logs = [l for l in self._get_items("TIME_LOGS") if l.get("task_id") == task_id]
        logs = sorted(logs, key=lambda l: l.get("start_time") or "")
        return [TimeLog.from_dict(l) for l in logs]

    # ===== Distraction操作 =====

    def add_distraction(self, distraction: Distraction) -> Distraction:
        distraction.id = distraction.id or new_id()
        distraction.timestamp = distraction.timestamp or now_iso()
        self._append("DISTRACTIONS", distraction.to_dict())
        return distraction

    def get_task_distractions(self, task_id: str) -> List[Distraction]:
        items = [d for d in self._get_items("DISTRACTIONS") if d.get("task_id") == task_id]
        items = sorted(items, key=lambda d: d.get("timestamp") or "")
        return [Distraction.from_dict(d) for d in items]

    # ===== EnergyLog操作 =====

    def add_energy_log(self, log: EnergyLog) -> EnergyLog:
        log.id = log.id or new_id()
        log.timestamp = log.timestamp or now_iso()
        self._append("ENERGY_LOGS", log.to_dict())
        return log

    def get_energy_logs(self, date: str) -> List[EnergyLog]:
        logs = [
            l for l in self._get_items("ENERGY_LOGS")
            if date_of(l.get("timestamp") or "") == date
        ]
        logs = sorted(logs, key=lambda l: l["timestamp"])
        return [EnergyLog.from_dict(l) for l in logs]

    # ===== Reflection操作 =====

    def save_reflection(self, reflection: Reflection) -> Reflection:
        items = self._get_items("REFLECTIONS")
        for item in items:
            if item.get("date") == reflection.date:
                reflection.id = item["id"]
                reflection.created_at = item.get("created_at")
                item.update(reflection.to_dict())
                self._set_items("REFLECTIONS", items)
                return reflection

        reflection.id = reflection.id or new_id()
        reflection.created_at = reflection.created_at or now_iso()
        items.append(reflection.to_dict())
        self._set_items("REFLECTIONS", items)
        return reflection

    def get_reflection(self, date: str) -> Optional[Reflection]:
        for item in self._get_items("REFLECTIONS"):
            if item.get("date") == date:
                return Reflection.from_dict(item)
        return None

    # ===== Streak操作 =====

    def get_streak(self) -> StreakState:
        data = self._load().get(STORAGE_KEYS["STREAK"])
        if not data:
            return StreakState()
        return StreakState.from_dict(data)

    def save_streak(self, state: StreakState):
        self._set_items("STREAK", state.to_dict())

    # ===== モチベーションバンク =====

    def get_motivation(self) -> List[MotivationItem]:
        # 同時刻のものは後から追加した方を先に
        items = sorted(
            reversed(self._get_items("MOTIVATION")),
            key=lambda i: i.get("created_at") or "",
            reverse=True,
        )
        return [MotivationItem.from_dict(i) for i in items]

    def add_motivation(self, item: MotivationItem) -> MotivationItem:
        item.id = item.id or new_id()
        item.created_at = item.created_at or now_iso()
        self._append("MOTIVATION", item.to_dict())
        return item

    def delete_motivation(self, item_id: str) -> bool:
        return self._remove("MOTIVATION", item_id)

    # ===== テンプレート =====

    def get_templates(self) -> List[DayTemplate]:
        items = sorted(self._get_items("TEMPLATES"), key=lambda t: t.get("created_at") or "")
        return [DayTemplate.from_dict(t) for t in items]

    def get_template(self, template_id: str) -> Optional[DayTemplate]:
        for item in self._get_items("TEMPLATES"):
            if item.get("id") == template_id:
                return DayTemplate.from_dict(item)
        return None

    def add_template(self, template: DayTemplate) -> DayTemplate:
        template.id = template.id or new_id()
        template.created_at = template.created_at or now_iso()
        self._append("TEMPLATES", template.to_dict())
        return template

    def delete_template(self, template_id: str) -> bool:
        return self._remove("TEMPLATES", template_id)
