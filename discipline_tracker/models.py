"""
データモデル定義
"""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, List, Dict, Any


class Category(str, Enum):
    """タスクのカテゴリ"""
    WORK = "work"
    LEARNING = "learning"
    HEALTH = "health"
    LEISURE = "leisure"
    CHORES = "chores"


class Priority(str, Enum):
    """タスクの優先度"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TaskStatus(str, Enum):
    """タスクの状態"""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# 許可される状態遷移（完了→未着手はチェックボックスの付け外し）
STATUS_TRANSITIONS = {
    TaskStatus.PENDING: {TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED},
    TaskStatus.IN_PROGRESS: {TaskStatus.COMPLETED, TaskStatus.PENDING},
    TaskStatus.COMPLETED: {TaskStatus.PENDING},
}


@dataclass
class Task:
    """タスクモデル"""
    id: Optional[str] = None
    title: str = ""
    description: str = ""
    category: Category = Category.WORK
    priority: Priority = Priority.MEDIUM
    planned_start: Optional[str] = None  # HH:MM
    planned_end: Optional[str] = None    # HH:MM
    actual_start: Optional[str] = None   # 最初にタイマーを開始した時刻
    status: TaskStatus = TaskStatus.PENDING
    date: str = ""                       # YYYY-MM-DD（作成後は変更不可）
    order_index: int = 0
    created_at: Optional[str] = None

    def can_transition(self, new_status: TaskStatus) -> bool:
        """状態遷移が許可されているか"""
        if new_status == self.status:
            return True
        return new_status in STATUS_TRANSITIONS[self.status]

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["category"] = self.category.value
        data["priority"] = self.priority.value
        data["status"] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        return cls(
            id=data.get("id"),
            title=data.get("title") or "",
            description=data.get("description") or "",
            category=Category(data.get("category") or Category.WORK.value),
            priority=Priority(data.get("priority") or Priority.MEDIUM.value),
            planned_start=data.get("planned_start"),
            planned_end=data.get("planned_end"),
            actual_start=data.get("actual_start"),
            status=TaskStatus(data.get("status") or TaskStatus.PENDING.value),
            date=data.get("date") or "",
            order_index=int(data.get("order_index") or 0),
            created_at=data.get("created_at"),
        )


@dataclass
class TimeLog:
    """作業時間の記録（開始〜停止）"""
    id: Optional[str] = None
    task_id: Optional[str] = None
    start_time: str = ""
    end_time: Optional[str] = None  # 計測中はNone
    duration: int = 0               # 秒単位（停止時に確定）

    @property
    def is_open(self) -> bool:
        return self.end_time is None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimeLog":
        return cls(
            id=data.get("id"),
            task_id=data.get("task_id"),
            start_time=data.get("start_time") or "",
            end_time=data.get("end_time"),
            duration=int(data.get("duration") or 0),
        )


@dataclass
class Distraction:
    """集中を妨げた出来事"""
    id: Optional[str] = None
    task_id: Optional[str] = None
    description: str = ""
    duration: int = 0  # 失った時間（秒）
    timestamp: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Distraction":
        return cls(
            id=data.get("id"),
            task_id=data.get("task_id"),
            description=data.get("description") or "",
            duration=int(data.get("duration") or 0),
            timestamp=data.get("timestamp"),
        )


@dataclass
class EnergyLog:
    """エネルギーレベルの自己申告"""
    id: Optional[str] = None
    level: int = 3  # 1-5
    timestamp: Optional[str] = None
    note: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EnergyLog":
        return cls(
            id=data.get("id"),
            level=int(data.get("level") or 3),
            timestamp=data.get("timestamp"),
            note=data.get("note"),
        )


@dataclass
class Reflection:
    """一日の振り返り（1日1件）"""
    id: Optional[str] = None
    date: str = ""
    what_worked: str = ""
    what_derailed: str = ""
    tomorrow_priorities: str = ""
    discipline_score: Optional[int] = None  # 1-5
    created_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Reflection":
        score = data.get("discipline_score")
        return cls(
            id=data.get("id"),
            date=data.get("date") or "",
            what_worked=data.get("what_worked") or "",
            what_derailed=data.get("what_derailed") or "",
            tomorrow_priorities=data.get("tomorrow_priorities") or "",
            discipline_score=int(score) if score is not None else None,
            created_at=data.get("created_at"),
        )


@dataclass
class StreakState:
    """連続達成ストリーク"""
    current_streak: int = 0
    longest_streak: int = 0
    last_completed_date: Optional[str] = None  # YYYY-MM-DD

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StreakState":
        return cls(
            current_streak=int(data.get("current_streak") or 0),
            longest_streak=int(data.get("longest_streak") or 0),
            last_completed_date=data.get("last_completed_date"),
        )


@dataclass
class MotivationItem:
    """モチベーションバンクの項目"""
    id: Optional[str] = None
    content: str = ""
    type: str = "quote"
    created_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MotivationItem":
        return cls(
            id=data.get("id"),
            content=data.get("content") or "",
            type=data.get("type") or "quote",
            created_at=data.get("created_at"),
        )


@dataclass
class DayTemplate:
    """一日の予定テンプレート"""
    id: Optional[str] = None
    name: str = ""
    type: str = "workday"
    tasks: List[Dict[str, Any]] = field(default_factory=list)  # タスクの下書き
    created_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DayTemplate":
        return cls(
            id=data.get("id"),
            name=data.get("name") or "",
            type=data.get("type") or "workday",
            tasks=list(data.get("tasks") or []),
            created_at=data.get("created_at"),
        )
