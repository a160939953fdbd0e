"""
入力値チェック
"""
from typing import Any, Dict, Optional, Type
from enum import Enum

from .errors import ValidationError
from .models import Category, Priority, TaskStatus
from .utils.dates import is_valid_date, is_valid_time


def require_payload(data) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError("JSONオブジェクトを送信してください")
    return data


def check_date(value, field_name: str = "date") -> str:
    if not is_valid_date(value):
        raise ValidationError(f"{field_name} は YYYY-MM-DD 形式で指定してください")
    return value


def check_enum(enum_cls: Type[Enum], value, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"{field_name} は {allowed} のいずれかです") from None


def check_int(value, field_name: str, minimum: Optional[int] = None,
              maximum: Optional[int] = None) -> int:
    # boolはintのサブクラスなので除外
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValidationError(f"{field_name} は整数で指定してください")
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        # Infinity / NaN もここで弾く
        raise ValidationError(f"{field_name} は整数で指定してください") from None
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field_name} は {minimum} 以上です")
    if maximum is not None and number > maximum:
        raise ValidationError(f"{field_name} は {maximum} 以下です")
    return number


def _optional_time(value, field_name: str) -> Optional[str]:
    if value in (None, ""):
        return None
    if not is_valid_time(value):
        raise ValidationError(f"{field_name} は HH:MM（24時間表記）で指定してください")
    return value


def validate_task(data, partial: bool = False) -> Dict[str, Any]:
    """
    タスクの入力値を検証して整形済みのdictを返す

    partial=True の場合は送られてきた項目だけを検証する（更新用）
    """
    data = require_payload(data)
    cleaned: Dict[str, Any] = {}

    if not partial or "title" in data:
        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("タイトルは必須です")
        cleaned["title"] = title.strip()

    if "description" in data:
        cleaned["description"] = str(data.get("description") or "").strip()

    if data.get("category") is not None:
        cleaned["category"] = check_enum(Category, data["category"], "category")
    if data.get("priority") is not None:
        cleaned["priority"] = check_enum(Priority, data["priority"], "priority")
    if data.get("status") is not None:
        cleaned["status"] = check_enum(TaskStatus, data["status"], "status")

    for field_name in ("planned_start", "planned_end"):
        if field_name in data:
            cleaned[field_name] = _optional_time(data.get(field_name), field_name)

    start, end = cleaned.get("planned_start"), cleaned.get("planned_end")
    if start and end and end <= start:
        raise ValidationError("planned_end は planned_start より後にしてください")

    if not partial or "date" in data:
        cleaned["date"] = check_date(data.get("date"))

    return cleaned


def validate_distraction(data) -> Dict[str, Any]:
    data = require_payload(data)
    task_id = data.get("task_id")
    if not task_id:
        raise ValidationError("task_id は必須です")
    description = data.get("description")
    if not isinstance(description, str) or not description.strip():
        raise ValidationError("内容は必須です")
    duration = data.get("duration")
    return {
        "task_id": str(task_id),
        "description": description.strip(),
        "duration": 0 if duration in (None, "") else check_int(duration, "duration", minimum=0),
    }


def validate_energy(data) -> Dict[str, Any]:
    data = require_payload(data)
    if data.get("level") is None:
        raise ValidationError("level は必須です")
    note = data.get("note")
    return {
        "level": check_int(data["level"], "level", minimum=1, maximum=5),
        "note": str(note) if note not in (None, "") else None,
    }


def validate_reflection(data) -> Dict[str, Any]:
    data = require_payload(data)
    score = data.get("discipline_score")
    return {
        "date": check_date(data.get("date")),
        "what_worked": str(data.get("what_worked") or ""),
        "what_derailed": str(data.get("what_derailed") or ""),
        "tomorrow_priorities": str(data.get("tomorrow_priorities") or ""),
        "discipline_score": None if score in (None, "") else check_int(
            score, "discipline_score", minimum=1, maximum=5
        ),
    }


def validate_motivation(data) -> Dict[str, Any]:
    data = require_payload(data)
    content = data.get("content")
    if not isinstance(content, str) or not content.strip():
        raise ValidationError("内容は必須です")
    return {"content": content.strip(), "type": str(data.get("type") or "quote")}


def validate_template(data) -> Dict[str, Any]:
    data = require_payload(data)
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("テンプレート名は必須です")
    tasks = data.get("tasks")
    if not isinstance(tasks, list):
        raise ValidationError("tasks はリストで指定してください")

    drafts = []
    for entry in tasks:
        # テンプレートのタスクは日付を持たない
        draft = validate_task({k: v for k, v in require_payload(entry).items() if k != "date"},
                              partial=True)
        if "title" not in draft:
            raise ValidationError("タイトルは必須です")
        drafts.append({
            key: value.value if isinstance(value, Enum) else value
            for key, value in draft.items()
        })
    return {"name": name.strip(), "type": str(data.get("type") or "workday"), "tasks": drafts}
