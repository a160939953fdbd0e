"""
Discipline Tracker API クライアント（HTTP API版）
サーバーのREST APIをhttpxで呼び出す
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..errors import NotFoundError, StorageError, TrackerError, ValidationError

logger = logging.getLogger(__name__)


class TrackerClient:
    """REST APIを呼び出すクラス"""

    def __init__(self, base_url: str = "http://localhost:3001", timeout: float = 10.0,
                 transport: Optional[httpx.BaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=f"{self.base_url}/api",
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        """リクエストを送り、エラーは例外に変換する"""
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Request %s %s failed: %s", method, path, e)
            raise TrackerError(f"サーバーに接続できません: {e}") from e

        if response.is_success:
            return response.json()

        try:
            message = response.json().get("error", response.text)
        except (ValueError, AttributeError):
            message = response.text

        if response.status_code == 400:
            raise ValidationError(message)
        if response.status_code == 404:
            raise NotFoundError(message)
        if response.status_code >= 500:
            raise StorageError(message)
        raise TrackerError(f"HTTP {response.status_code}: {message}")

    @staticmethod
    def _date_params(date: Optional[str]) -> Dict[str, str]:
        return {"date": date} if date else {}

    # ===== タスク =====

    def health(self) -> Dict:
        return self._request("GET", "/health")

    def get_tasks(self, date: Optional[str] = None) -> List[Dict]:
        return self._request("GET", "/tasks", params=self._date_params(date))

    def get_task(self, task_id: str) -> Dict:
        return self._request("GET", f"/tasks/{task_id}")

    def create_task(self, **fields) -> Dict:
        return self._request("POST", "/tasks", json=fields)

    def update_task(self, task_id: str, **fields) -> Dict:
        return self._request("PUT", f"/tasks/{task_id}", json=fields)

    def delete_task(self, task_id: str) -> Dict:
        return self._request("DELETE", f"/tasks/{task_id}")

    def reorder_tasks(self, task_ids: List[str]) -> Dict:
        return self._request("PUT", "/tasks/reorder", json={"ids": task_ids})

    # ===== 時間計測 =====

    def start_timer(self, task_id: str) -> Dict:
        return self._request("POST", "/timelogs/start", json={"task_id": task_id})

    def stop_timer(self, task_id: str) -> Dict:
        return self._request("POST", "/timelogs/stop", json={"task_id": task_id})

    def get_time_logs(self, task_id: str) -> List[Dict]:
        return self._request("GET", f"/timelogs/{task_id}")

    # ===== 記録 =====

    def log_distraction(self, task_id: str, description: str, duration: int = 0) -> Dict:
        return self._request("POST", "/distractions", json={
            "task_id": task_id, "description": description, "duration": duration,
        })

    def get_distractions(self, date: Optional[str] = None) -> List[Dict]:
        return self._request("GET", "/distractions", params=self._date_params(date))

    def log_energy(self, level: int, note: Optional[str] = None) -> Dict:
        return self._request("POST", "/energy", json={"level": level, "note": note})

    def get_energy(self, date: Optional[str] = None) -> List[Dict]:
        return self._request("GET", "/energy", params=self._date_params(date))

    def save_reflection(self, **fields) -> Dict:
        return self._request("POST", "/reflections", json=fields)

    def get_reflection(self, date: str) -> Optional[Dict]:
        return self._request("GET", f"/reflections/{date}")

    # ===== ストリーク・分析 =====

    def get_streak(self) -> Dict:
        return self._request("GET", "/streak")

    def update_streak(self, completed: bool, date: Optional[str] = None) -> Dict:
        payload: Dict[str, Any] = {"completed": completed}
        if date:
            payload["date"] = date
        return self._request("POST", "/streak/update", json=payload)

    def daily_summary(self, date: Optional[str] = None) -> Dict:
        return self._request("GET", "/analytics/daily", params=self._date_params(date))

    def weekly(self) -> List[Dict]:
        return self._request("GET", "/analytics/weekly")

    def heatmap(self) -> List[Dict]:
        return self._request("GET", "/analytics/heatmap")

    # ===== モチベーション・テンプレート =====

    def get_motivation(self) -> List[Dict]:
        return self._request("GET", "/motivation")

    def add_motivation(self, content: str, type: str = "quote") -> Dict:
        return self._request("POST", "/motivation", json={"content": content, "type": type})

    def delete_motivation(self, item_id: str) -> Dict:
        return self._request("DELETE", f"/motivation/{item_id}")

    def get_templates(self) -> List[Dict]:
        return self._request("GET", "/templates")

    def add_template(self, name: str, tasks: List[Dict], type: str = "workday") -> Dict:
        return self._request("POST", "/templates", json={"name": name, "type": type, "tasks": tasks})

    def delete_template(self, template_id: str) -> Dict:
        return self._request("DELETE", f"/templates/{template_id}")

    def apply_template(self, template_id: str, date: Optional[str] = None) -> List[Dict]:
        return self._request("POST", f"/templates/{template_id}/apply",
                             json=self._date_params(date))
