"""
タスク・記録の作成/更新ロジック
"""
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from ..errors import NotFoundError, ValidationError
from ..models import (
    Task, TaskStatus, Category, Priority, Distraction, EnergyLog, Reflection,
    MotivationItem, DayTemplate,
)
from ..store import Store
from ..utils.dates import now_iso
from .. import validation

logger = logging.getLogger(__name__)


class Planner:
    """ストアへの書き込みをまとめるクラス"""

    def __init__(self, store: Store, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.clock = clock or datetime.now

    def _now(self) -> str:
        return now_iso(self.clock())

    # ===== タスク =====

    def list_tasks(self, date: str) -> List[Task]:
        return self.store.get_tasks(validation.check_date(date))

    def get_task(self, task_id: str) -> Task:
        task = self.store.get_task(task_id)
        if task is None:
            raise NotFoundError(f"タスクが見つかりません: {task_id}")
        return task

    def create_task(self, payload: Dict) -> Task:
        """タスクを作成（指定日の末尾に、未着手で追加）"""
        fields = validation.validate_task(payload)
        task = Task(
            title=fields["title"],
            description=fields.get("description", ""),
            category=fields.get("category", Category.WORK),
            priority=fields.get("priority", Priority.MEDIUM),
            planned_start=fields.get("planned_start"),
            planned_end=fields.get("planned_end"),
            status=TaskStatus.PENDING,
            date=fields["date"],
            order_index=self.store.next_order_index(fields["date"]),
            created_at=self._now(),
        )
        task = self.store.add_task(task)
        logger.info("Task created: %s (%s)", task.id, task.date)
        return task

    def update_task(self, task_id: str, payload: Dict) -> Task:
        """タスクを更新（日付は変更不可）"""
        task = self.get_task(task_id)
        fields = validation.validate_task(payload, partial=True)

        if "date" in fields and fields["date"] != task.date:
            raise ValidationError("作成後にタスクの日付は変更できません")

        new_status = fields.get("status")
        if new_status is not None and not task.can_transition(new_status):
            raise ValidationError(
                f"状態を {task.status.value} から {new_status.value} に変更できません"
            )

        for name in ("title", "description", "category", "priority",
                     "planned_start", "planned_end", "status"):
            if name in fields:
                setattr(task, name, fields[name])

        if task.planned_start and task.planned_end and task.planned_end <= task.planned_start:
            raise ValidationError("planned_end は planned_start より後にしてください")

        if "order_index" in payload:
            task.order_index = validation.check_int(payload["order_index"], "order_index")

        self.store.update_task(task)
        logger.info("Task updated: %s", task.id)
        return task

    def delete_task(self, task_id: str):
        """タスクを削除（時間ログ・中断記録は残し、集計から外れるだけ）"""
        if not self.store.delete_task(task_id):
            raise NotFoundError(f"タスクが見つかりません: {task_id}")
        logger.info("Task deleted: %s", task_id)

    def reorder_tasks(self, task_ids: List[str]):
        if not isinstance(task_ids, list) or not all(isinstance(i, str) for i in task_ids):
            raise ValidationError("タスクIDのリストを指定してください")
        self.store.reorder_tasks(task_ids)

    # ===== 中断記録 =====

    def log_distraction(self, payload: Dict) -> Distraction:
        fields = validation.validate_distraction(payload)
        self.get_task(fields["task_id"])
        distraction = Distraction(timestamp=self._now(), **fields)
        return self.store.add_distraction(distraction)

    def list_distractions(self, date: str) -> List[Distraction]:
        return self.store.get_distractions(validation.check_date(date))

    # ===== エネルギー =====

    def log_energy(self, payload: Dict) -> EnergyLog:
        fields = validation.validate_energy(payload)
        return self.store.add_energy_log(EnergyLog(timestamp=self._now(), **fields))

    def list_energy(self, date: str) -> List[EnergyLog]:
        return self.store.get_energy_logs(validation.check_date(date))

    # ===== 振り返り =====

    def save_reflection(self, payload: Dict) -> Reflection:
        fields = validation.validate_reflection(payload)
        reflection = self.store.save_reflection(Reflection(created_at=self._now(), **fields))
        logger.info("Reflection saved for %s", reflection.date)
        return reflection

    def get_reflection(self, date: str) -> Optional[Reflection]:
        return self.store.get_reflection(validation.check_date(date))

    # ===== モチベーションバンク =====

    def list_motivation(self) -> List[MotivationItem]:
        return self.store.get_motivation()

    def add_motivation(self, payload: Dict) -> MotivationItem:
        fields = validation.validate_motivation(payload)
        return self.store.add_motivation(MotivationItem(created_at=self._now(), **fields))

    def delete_motivation(self, item_id: str):
        if not self.store.delete_motivation(item_id):
            raise NotFoundError(f"項目が見つかりません: {item_id}")

    # ===== テンプレート =====

    def list_templates(self) -> List[DayTemplate]:
        return self.store.get_templates()

    def add_template(self, payload: Dict) -> DayTemplate:
        fields = validation.validate_template(payload)
        return self.store.add_template(DayTemplate(created_at=self._now(), **fields))

    def delete_template(self, template_id: str):
        if not self.store.delete_template(template_id):
            raise NotFoundError(f"テンプレートが見つかりません: {template_id}")

    def apply_template(self, template_id: str, date: str) -> List[Task]:
        """テンプレートのタスクを指定日に追加（既存タスクの後ろ）"""
        validation.check_date(date)
        template = self.store.get_template(template_id)
        if template is None:
            raise NotFoundError(f"テンプレートが見つかりません: {template_id}")

        base_index = self.store.next_order_index(date)
        created = []
        for offset, draft in enumerate(template.tasks):
            task = Task.from_dict({**draft, "date": date, "status": TaskStatus.PENDING.value})
            task.order_index = base_index + offset
            task.created_at = self._now()
            created.append(self.store.add_task(task))

        logger.info("Template %s applied to %s (%d tasks)", template_id, date, len(created))
        return created
