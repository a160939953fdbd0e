"""
データベース操作クラス
"""
import json
import logging
import sqlite3
from contextlib import contextmanager
from typing import List, Optional

from .errors import StorageError
from .models import (
    Task, TimeLog, Distraction, EnergyLog, Reflection, StreakState,
    MotivationItem, DayTemplate,
)
from .store import Store, new_id
from .utils.dates import now_iso

logger = logging.getLogger(__name__)


class Database(Store):
    """SQLiteデータベース管理クラス"""

    name = "sqlite"

    def __init__(self, db_path: str = "discipline.db"):
        self.db_path = db_path
        self.init_database()

    def get_connection(self):
        """データベース接続を取得"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _cursor(self):
        """カーソルを取得し、終了時にコミットして閉じる"""
        try:
            conn = self.get_connection()
        except sqlite3.Error as e:
            logger.error("Cannot open database %s: %s", self.db_path, e)
            raise StorageError(f"データベースを開けません: {e}") from e
        try:
            yield conn.cursor()
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("Database error on %s: %s", self.db_path, e)
            raise StorageError(f"データベースエラー: {e}") from e
        finally:
            conn.close()

    def init_database(self):
        """データベースとテーブルの初期化"""
        with self._cursor() as cursor:
            # tasksテーブル
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    description TEXT,
                    category TEXT DEFAULT 'work',
                    priority TEXT DEFAULT 'medium',
                    planned_start TEXT,
                    planned_end TEXT,
                    actual_start TEXT,
                    status TEXT DEFAULT 'pending',
                    date TEXT NOT NULL,
                    order_index INTEGER DEFAULT 0,
                    created_at TEXT
                )
            """)

            # time_logsテーブル
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS time_logs (
                    id TEXT PRIMARY KEY,
                    task_id TEXT,
                    start_time TEXT NOT NULL,
                    end_time TEXT,
                    duration INTEGER DEFAULT 0
                )
            """)

            # distractionsテーブル
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS distractions (
                    id TEXT PRIMARY KEY,
                    task_id TEXT,
                    description TEXT,
                    duration INTEGER DEFAULT 0,
                    timestamp TEXT
                )
            """)

            # energy_logsテーブル
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS energy_logs (
                    id TEXT PRIMARY KEY,
                    level INTEGER CHECK(level >= 1 AND level <= 5),
                    timestamp TEXT,
                    note TEXT
                )
            """)

            # reflectionsテーブル（1日1件）
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS reflections (
                    id TEXT PRIMARY KEY,
                    date TEXT NOT NULL UNIQUE,
                    what_worked TEXT,
                    what_derailed TEXT,
                    tomorrow_priorities TEXT,
                    discipline_score INTEGER,
                    created_at TEXT
                )
            """)

            # streaksテーブル（id=1の1行のみ）
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS streaks (
                    id INTEGER PRIMARY KEY,
                    current_streak INTEGER DEFAULT 0,
                    longest_streak INTEGER DEFAULT 0,
                    last_completed_date TEXT
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS motivation_bank (
                    id TEXT PRIMARY KEY,
                    content TEXT NOT NULL,
                    type TEXT DEFAULT 'quote',
                    created_at TEXT
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS templates (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    type TEXT DEFAULT 'workday',
                    tasks TEXT NOT NULL,
                    created_at TEXT
                )
            """)

            cursor.execute("""
                INSERT OR IGNORE INTO streaks (id, current_streak, longest_streak)
                VALUES (1, 0, 0)
            """)

        logger.debug("Database initialized at %s", self.db_path)

    # ===== Task操作 =====

    def _row_to_task(self, row) -> Task:
        """データベース行をTaskモデルに変換"""
        return Task.from_dict(dict(row))

    def get_tasks(self, date: str) -> List[Task]:
        """指定日のタスクを取得"""
        with self._cursor() as cursor:
            cursor.execute(
                "SELECT * FROM tasks WHERE date = ? ORDER BY order_index, rowid",
                (date,)
            )
            rows = cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    def get_task(self, task_id: str) -> Optional[Task]:
        with self._cursor() as cursor:
            cursor.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
            row = cursor.fetchone()
        if row:
            return self._row_to_task(row)
        return None

    def add_task(self, task: Task) -> Task:
        """タスクを作成"""
        task.id = task.id or new_id()
        task.created_at = task.created_at or now_iso()
        with self._cursor() as cursor:
            cursor.execute("""
                INSERT INTO tasks (id, title, description, category, priority,
                                   planned_start, planned_end, actual_start,
                                   status, date, order_index, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (task.id, task.title, task.description, task.category.value,
                  task.priority.value, task.planned_start, task.planned_end,
                  task.actual_start, task.status.value, task.date,
                  task.order_index, task.created_at))
        return task

    def update_task(self, task: Task) -> Task:
        """タスクを更新（dateは変更しない）"""
        with self._cursor() as cursor:
            cursor.execute("""
                UPDATE tasks
                SET title = ?, description = ?, category = ?, priority = ?,
                    planned_start = ?, planned_end = ?, actual_start = ?,
                    status = ?, order_index = ?
                WHERE id = ?
            """, (task.title, task.description, task.category.value,
                  task.priority.value, task.planned_start, task.planned_end,
                  task.actual_start, task.status.value, task.order_index,
                  task.id))
        return task

    def delete_task(self, task_id: str) -> bool:
        """タスクを削除"""
        with self._cursor() as cursor:
            cursor.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            deleted = cursor.rowcount > 0
        return deleted

    def set_task_order(self, task_id: str, order_index: int):
        with self._cursor() as cursor:
            cursor.execute(
                "UPDATE tasks SET order_index = ? WHERE id = ?",
                (order_index, task_id)
            )

    # ===== TimeLog操作 =====

    def add_time_log(self, log: TimeLog) -> TimeLog:
        log.id = log.id or new_id()
        with self._cursor() as cursor:
            cursor.execute("""
                INSERT INTO time_logs (id, task_id, start_time, end_time, duration)
                VALUES (?, ?, ?, ?, ?)
            """, (log.id, log.task_id, log.start_time, log.end_time, log.duration))
        return log

    def get_open_time_log(self, task_id: str) -> Optional[TimeLog]:
        with self._cursor() as cursor:
            cursor.execute("""
                SELECT * FROM time_logs
                WHERE task_id = ? AND end_time IS NULL
                ORDER BY start_time DESC, rowid DESC LIMIT 1
            """, (task_id,))
            row = cursor.fetchone()
        if row:
            return TimeLog.from_dict(dict(row))
        return None

    def close_time_log(self, log: TimeLog) -> TimeLog:
        with self._cursor() as cursor:
            cursor.execute(
                "UPDATE time_logs SET end_time = ?, duration = ? WHERE id = ?",
                (log.end_time, log.duration, log.id)
            )
        return log

    def get_time_logs(self, task_id: str) -> List[TimeLog]:
        with self._cursor() as cursor:
            cursor.execute(
                "SELECT * FROM time_logs WHERE task_id = ? ORDER BY start_time, rowid",
                (task_id,)
            )
            rows = cursor.fetchall()
        return [TimeLog.from_dict(dict(row)) for row in rows]

    # ===== Distraction操作 =====

    def add_distraction(self, distraction: Distraction) -> Distraction:
        distraction.id = distraction.id or new_id()
        distraction.timestamp = distraction.timestamp or now_iso()
        with self._cursor() as cursor:
            cursor.execute("""
                INSERT INTO distractions (id, task_id, description, duration, timestamp)
                VALUES (?, ?, ?, ?, ?)
            """, (distraction.id, distraction.task_id, distraction.description,
                  distraction.duration, distraction.timestamp))
        return distraction

    def get_task_distractions(self, task_id: str) -> List[Distraction]:
        with self._cursor() as cursor:
            cursor.execute(
                "SELECT * FROM distractions WHERE task_id = ? ORDER BY timestamp, rowid",
                (task_id,)
            )
            rows = cursor.fetchall()
        return [Distraction.from_dict(dict(row)) for row in rows]

    # ===== EnergyLog操作 =====

    def add_energy_log(self, log: EnergyLog) -> EnergyLog:
        log.id = log.id or new_id()
        log.timestamp = log.timestamp or now_iso()
        with self._cursor() as cursor:
            cursor.execute("""
                INSERT INTO energy_logs (id, level, timestamp, note)
                VALUES (?, ?, ?, ?)
            """, (log.id, log.level, log.timestamp, log.note))
        return log

    def get_energy_logs(self, date: str) -> List[EnergyLog]:
        with self._cursor() as cursor:
            cursor.execute("""
                SELECT * FROM energy_logs
                WHERE substr(timestamp, 1, 10) = ?
                ORDER BY timestamp, rowid
            """, (date,))
            rows = cursor.fetchall()
        return [EnergyLog.from_dict(dict(row)) for row in rows]

    # ===== Reflection操作 =====

    def save_reflection(self, reflection: Reflection) -> Reflection:
        """振り返りを保存（同じ日付があれば上書き）"""
        with self._cursor() as cursor:
            cursor.execute(
                "SELECT id, created_at FROM reflections WHERE date = ?",
                (reflection.date,)
            )
            existing = cursor.fetchone()
            if existing:
                reflection.id = existing["id"]
                reflection.created_at = existing["created_at"]
                cursor.execute("""
                    UPDATE reflections
                    SET what_worked = ?, what_derailed = ?,
                        tomorrow_priorities = ?, discipline_score = ?
                    WHERE id = ?
                """, (reflection.what_worked, reflection.what_derailed,
                      reflection.tomorrow_priorities, reflection.discipline_score,
                      reflection.id))
            else:
                reflection.id = reflection.id or new_id()
                reflection.created_at = reflection.created_at or now_iso()
                cursor.execute("""
                    INSERT INTO reflections (id, date, what_worked, what_derailed,
                                             tomorrow_priorities, discipline_score,
                                             created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                """, (reflection.id, reflection.date, reflection.what_worked,
                      reflection.what_derailed, reflection.tomorrow_priorities,
                      reflection.discipline_score, reflection.created_at))
        return reflection

    def get_reflection(self, date: str) -> Optional[Reflection]:
        with self._cursor() as cursor:
            cursor.execute("SELECT * FROM reflections WHERE date = ?", (date,))
            row = cursor.fetchone()
        if row:
            return Reflection.from_dict(dict(row))
        return None

    # ===== Streak操作 =====

    def get_streak(self) -> StreakState:
        with self._cursor() as cursor:
            cursor.execute("SELECT * FROM streaks WHERE id = 1")
            row = cursor.fetchone()
        if not row:
            return StreakState()
        return StreakState.from_dict(dict(row))

    def save_streak(self, state: StreakState):
        with self._cursor() as cursor:
            cursor.execute("""
                INSERT OR REPLACE INTO streaks
                    (id, current_streak, longest_streak, last_completed_date)
                VALUES (1, ?, ?, ?)
            """, (state.current_streak, state.longest_streak,
                  state.last_completed_date))

    # ===== モチベーションバンク =====

    def get_motivation(self) -> List[MotivationItem]:
        with self._cursor() as cursor:
            cursor.execute(
                "SELECT * FROM motivation_bank ORDER BY created_at DESC, rowid DESC"
            )
            rows = cursor.fetchall()
        return [MotivationItem.from_dict(dict(row)) for row in rows]

    def add_motivation(self, item: MotivationItem) -> MotivationItem:
        item.id = item.id or new_id()
        item.created_at = item.created_at or now_iso()
        with self._cursor() as cursor:
            cursor.execute("""
                INSERT INTO motivation_bank (id, content, type, created_at)
                VALUES (?, ?, ?, ?)
            """, (item.id, item.content, item.type, item.created_at))
        return item

    def delete_motivation(self, item_id: str) -> bool:
        with self._cursor() as cursor:
            cursor.execute("DELETE FROM motivation_bank WHERE id = ?", (item_id,))
            deleted = cursor.rowcount > 0
        return deleted

    # ===== テンプレート =====

    def _row_to_template(self, row) -> DayTemplate:
        data = dict(row)
        data["tasks"] = json.loads(data["tasks"])
        return DayTemplate.from_dict(data)

    def get_templates(self) -> List[DayTemplate]:
        with self._cursor() as cursor:
            cursor.execute("SELECT * FROM templates ORDER BY created_at, rowid")
            rows = cursor.fetchall()
        return [self._row_to_template(row) for row in rows]

    def get_template(self, template_id: str) -> Optional[DayTemplate]:
        with self._cursor() as cursor:
            cursor.execute("SELECT * FROM templates WHERE id = ?", (template_id,))
            row = cursor.fetchone()
        if row:
            return self._row_to_template(row)
        return None

    def add_template(self, template: DayTemplate) -> DayTemplate:
        template.id = template.id or new_id()
        template.created_at = template.created_at or now_iso()
        with self._cursor() as cursor:
            cursor.execute("""
                INSERT INTO templates (id, name, type, tasks, created_at)
                VALUES (?, ?, ?, ?, ?)
            """, (template.id, template.name, template.type,
                  json.dumps(template.tasks, ensure_ascii=False),
                  template.created_at))
        return template

    def delete_template(self, template_id: str) -> bool:
        with self._cursor() as cursor:
            cursor.execute("DELETE FROM templates WHERE id = ?", (template_id,))
            deleted = cursor.rowcount > 0
        return deleted

