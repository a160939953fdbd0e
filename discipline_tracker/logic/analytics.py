"""
規律スコア・週間推移・ヒートマップの集計ロジック

すべて呼び出し時点のストアを毎回走査する（キャッシュなし）。
データがない日は 0 の集計を返し、例外は出さない。
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, List, Optional

from ..models import Task
from ..store import Store
from ..utils.dates import date_window

WEEK_DAYS = 7
HEATMAP_DAYS = 30


def discipline_score(completed: int, total: int) -> int:
    """完了率（%）を四捨五入した整数。タスクがなければ0"""
    if total <= 0:
        return 0
    # round()は偶数丸めなので整数演算で四捨五入する
    return (200 * completed + total) // (2 * total)


def heatmap_level(completed: int, total: int) -> int:
    """
    ヒートマップの濃さ（0-4）

    0: タスクなし / 1: 半分以下 / 2: 半分超 / 3: 75%超 / 4: 全完了
    """
    if total == 0:
        return 0
    if completed == total:
        return 4
    if 4 * completed > 3 * total:
        return 3
    if 2 * completed > total:
        return 2
    return 1


@dataclass
class DailySummary:
    discipline_score: int = 0
    completed_tasks: int = 0
    total_tasks: int = 0
    total_focus_time: int = 0
    category_time: Dict[str, int] = field(default_factory=dict)
    distraction_count: int = 0

    def to_dict(self) -> dict:
        return {
            "disciplineScore": self.discipline_score,
            "completedTasks": self.completed_tasks,
            "totalTasks": self.total_tasks,
            "totalFocusTime": self.total_focus_time,
            "categoryTime": dict(self.category_time),
            "distractionCount": self.distraction_count,
        }


@dataclass
class WeeklyEntry:
    date: str
    score: int
    completed: int
    total: int

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "score": self.score,
            "completed": self.completed,
            "total": self.total,
        }


@dataclass
class HeatmapEntry:
    date: str
    score: int
    level: int

    def to_dict(self) -> dict:
        return {"date": self.date, "score": self.score, "level": self.level}


class AnalyticsEngine:
    """ストアの内容を集計する読み取り専用クラス"""

    def __init__(self, store: Store, today: Optional[Callable[[], date]] = None):
        self.store = store
        self.today = today or date.today

    def _completion(self, day: str):
        """(完了数, 総数, タスク一覧)"""
        tasks: List[Task] = self.store.get_tasks(day)
        completed = len([t for t in tasks if t.is_completed])
        return completed, len(tasks), tasks

    def daily(self, day: str) -> DailySummary:
        """指定日の集計"""
        completed, total, tasks = self._completion(day)

        # 時間ログはタスク経由で集める（削除済みタスクのログは対象外）
        total_focus = 0
        category_time: Dict[str, int] = {}
        distraction_count = 0
        for task in tasks:
            for log in self.store.get_time_logs(task.id):
                seconds = log.duration if not log.is_open else 0
                total_focus += seconds
                key = task.category.value
                category_time[key] = category_time.get(key, 0) + seconds
            distraction_count += len(self.store.get_task_distractions(task.id))

        return DailySummary(
            discipline_score=discipline_score(completed, total),
            completed_tasks=completed,
            total_tasks=total,
            total_focus_time=total_focus,
            category_time=category_time,
            distraction_count=distraction_count,
        )

    def weekly(self) -> List[WeeklyEntry]:
        """今日を含む直近7日間（古い順）"""
        entries = []
        for day in date_window(self.today(), WEEK_DAYS):
            completed, total, _ = self._completion(day)
            entries.append(WeeklyEntry(
                date=day,
                score=discipline_score(completed, total),
                completed=completed,
                total=total,
            ))
        return entries

    def heatmap(self) -> List[HeatmapEntry]:
        """今日を含む直近30日間（古い順）"""
        entries = []
        for day in date_window(self.today(), HEATMAP_DAYS):
            completed, total, _ = self._completion(day)
            entries.append(HeatmapEntry(
                date=day,
                score=discipline_score(completed, total),
                level=heatmap_level(completed, total),
            ))
        return entries
