"""
ストア共通インターフェース

SQLite版（Database）とローカルファイル版（LocalStore）が同じ操作を実装する。
分析・ストリーク処理はこのインターフェースだけを使う。
"""
import uuid
from abc import ABC, abstractmethod
from typing import List, Optional

from .models import (
    Task, TimeLog, Distraction, EnergyLog, Reflection, StreakState,
    MotivationItem, DayTemplate,
)


def new_id() -> str:
    """レコードIDを生成"""
    return uuid.uuid4().hex


class Store(ABC):
    """ストアの抽象基底クラス"""

    name = "abstract"

    # ===== Task =====

    @abstractmethod
    def get_tasks(self, date: str) -> List[Task]:
        """指定日のタスクを order_index 順に取得（同値は追加順）"""

    @abstractmethod
    def get_task(self, task_id: str) -> Optional[Task]:
        pass

    @abstractmethod
    def add_task(self, task: Task) -> Task:
        """タスクを追加し、IDを付与したタスクを返す"""

    @abstractmethod
    def update_task(self, task: Task) -> Task:
        pass

    @abstractmethod
    def delete_task(self, task_id: str) -> bool:
        """タスクを削除（関連ログは残る）"""

    @abstractmethod
    def set_task_order(self, task_id: str, order_index: int):
        pass

    # ===== TimeLog =====

    @abstractmethod
    def add_time_log(self, log: TimeLog) -> TimeLog:
        pass

    @abstractmethod
    def get_open_time_log(self, task_id: str) -> Optional[TimeLog]:
        """計測中（end_timeなし）の最新ログを取得"""

    @abstractmethod
    def close_time_log(self, log: TimeLog) -> TimeLog:
        """end_time と duration を確定して保存"""

    @abstractmethod
    def get_time_logs(self, task_id: str) -> List[TimeLog]:
        pass

    # ===== Distraction =====

    @abstractmethod
    def add_distraction(self, distraction: Distraction) -> Distraction:
        pass

    @abstractmethod
    def get_task_distractions(self, task_id: str) -> List[Distraction]:
        pass

    # ===== EnergyLog =====

    @abstractmethod
    def add_energy_log(self, log: EnergyLog) -> EnergyLog:
        pass

    @abstractmethod
    def get_energy_logs(self, date: str) -> List[EnergyLog]:
        """タイムスタンプの日付が一致するログを時刻順に取得"""

    # ===== Reflection =====

    @abstractmethod
    def save_reflection(self, reflection: Reflection) -> Reflection:
        """日付単位で保存（既存があれば内容を上書きし、IDは維持）"""

    @abstractmethod
    def get_reflection(self, date: str) -> Optional[Reflection]:
        pass

    # ===== Streak =====

    @abstractmethod
    def get_streak(self) -> StreakState:
        pass

    @abstractmethod
    def save_streak(self, state: StreakState):
        pass

    # ===== モチベーションバンク =====

    @abstractmethod
    def get_motivation(self) -> List[MotivationItem]:
        """新しい順に取得"""

    @abstractmethod
    def add_motivation(self, item: MotivationItem) -> MotivationItem:
        pass

    @abstractmethod
    def delete_motivation(self, item_id: str) -> bool:
        pass

    # ===== テンプレート =====

    @abstractmethod
    def get_templates(self) -> List[DayTemplate]:
        pass

    @abstractmethod
    def get_template(self, template_id: str) -> Optional[DayTemplate]:
        pass

    @abstractmethod
    def add_template(self, template: DayTemplate) -> DayTemplate:
        pass

    @abstractmethod
    def delete_template(self, template_id: str) -> bool:
        pass

    # ===== 共通処理 =====

    def get_distractions(self, date: str) -> List[Distraction]:
        """指定日のタスクに紐づく中断記録（削除済みタスクの分は含まない）"""
        distractions = []
        for task in self.get_tasks(date):
            distractions.extend(self.get_task_distractions(task.id))
        return distractions

    def next_order_index(self, date: str) -> int:
        """指定日の末尾に追加する際の order_index"""
        tasks = self.get_tasks(date)
        if not tasks:
            return 0
        return max(t.order_index for t in tasks) + 1

    def reorder_tasks(self, task_ids: List[str]):
        """渡された順に order_index を振り直す"""
        for index, task_id in enumerate(task_ids):
            self.set_task_order(task_id, index)
