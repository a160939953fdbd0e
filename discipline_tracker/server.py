"""
Discipline Tracker - Flask JSON API
"""
import logging
from datetime import date, datetime
from typing import Callable, Optional

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS

from .config import Config
from .errors import NotFoundError, StorageError, ValidationError
from .logic.analytics import AnalyticsEngine
from .logic.planner import Planner
from .logic.streak import StreakTracker
from .logic.timer_logic import TimeTracker
from .store import Store
from .utils.dates import today_str
from .validation import check_date, require_payload

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__, url_prefix="/api")


class Services:
    """リクエスト処理で使うロジック一式"""

    def __init__(self, store: Store, today: Callable[[], date],
                 clock: Callable[[], datetime]):
        self.store = store
        self.today = today
        self.planner = Planner(store, clock=clock)
        self.timer = TimeTracker(store, clock=clock)
        self.streak = StreakTracker(store)
        self.analytics = AnalyticsEngine(store, today=today)


def _services() -> Services:
    return current_app.extensions["discipline_tracker"]


def _body() -> dict:
    return require_payload(request.get_json(silent=True))


def _date_arg() -> str:
    """?date= の値（省略時は今日）"""
    value = request.args.get("date")
    if not value:
        return today_str(_services().today())
    return check_date(value)


# ============ ROUTES ============

@api.route("/health")
def health():
    return jsonify({"status": "ok", "backend": _services().store.name})


# ----- タスク -----

@api.route("/tasks", methods=["GET"])
def list_tasks():
    """指定日のタスク一覧"""
    tasks = _services().planner.list_tasks(_date_arg())
    return jsonify([t.to_dict() for t in tasks])


@api.route("/tasks", methods=["POST"])
def create_task():
    """タスク作成"""
    payload = _body()
    if not payload.get("date"):
        payload = {**payload, "date": today_str(_services().today())}
    task = _services().planner.create_task(payload)
    return jsonify(task.to_dict()), 201


@api.route("/tasks/reorder", methods=["PUT"])
def reorder_tasks():
    """タスクの並び替え"""
    payload = _body()
    if "ids" in payload:
        task_ids = payload["ids"]
    else:
        tasks = payload.get("tasks")
        if not isinstance(tasks, list) or not all(isinstance(t, dict) for t in tasks):
            raise ValidationError("tasks は {id} のリストで指定してください")
        task_ids = [t.get("id") for t in tasks]
    _services().planner.reorder_tasks(task_ids)
    return jsonify({"success": True})


@api.route("/tasks/<task_id>", methods=["GET"])
def get_task(task_id):
    return jsonify(_services().planner.get_task(task_id).to_dict())


@api.route("/tasks/<task_id>", methods=["PUT"])
def update_task(task_id):
    """タスク更新（編集・完了の切り替え）"""
    task = _services().planner.update_task(task_id, _body())
    return jsonify(task.to_dict())


@api.route("/tasks/<task_id>", methods=["DELETE"])
def delete_task(task_id):
    """タスク削除"""
    _services().planner.delete_task(task_id)
    return jsonify({"success": True})


# ----- 時間計測 -----

@api.route("/timelogs/start", methods=["POST"])
def start_timer():
    task_id = _body().get("task_id")
    if not task_id:
        raise ValidationError("task_id は必須です")
    log = _services().timer.start(task_id)
    return jsonify(log.to_dict())


@api.route("/timelogs/stop", methods=["POST"])
def stop_timer():
    task_id = _body().get("task_id")
    if not task_id:
        raise ValidationError("task_id は必須です")
    log = _services().timer.stop(task_id)
    return jsonify({
        "success": True,
        "end_time": log.end_time if log else None,
        "log": log.to_dict() if log else None,
    })


@api.route("/timelogs/<task_id>", methods=["GET"])
def list_time_logs(task_id):
    logs = _services().store.get_time_logs(task_id)
    return jsonify([log.to_dict() for log in logs])


# ----- 中断記録 -----

@api.route("/distractions", methods=["POST"])
def log_distraction():
    distraction = _services().planner.log_distraction(_body())
    return jsonify(distraction.to_dict()), 201


@api.route("/distractions", methods=["GET"])
def list_distractions():
    distractions = _services().planner.list_distractions(_date_arg())
    return jsonify([d.to_dict() for d in distractions])


# ----- エネルギー -----

@api.route("/energy", methods=["POST"])
def log_energy():
    log = _services().planner.log_energy(_body())
    return jsonify(log.to_dict()), 201


@api.route("/energy", methods=["GET"])
def list_energy():
    logs = _services().planner.list_energy(_date_arg())
    return jsonify([log.to_dict() for log in logs])


# ----- 振り返り -----

@api.route("/reflections", methods=["POST"])
def save_reflection():
    reflection = _services().planner.save_reflection(_body())
    return jsonify(reflection.to_dict())


@api.route("/reflections/<date_str>", methods=["GET"])
def get_reflection(date_str):
    reflection = _services().planner.get_reflection(date_str)
    return jsonify(reflection.to_dict() if reflection else None)


# ----- ストリーク -----

@api.route("/streak", methods=["GET"])
def get_streak():
    return jsonify(_services().streak.current_state().to_dict())


@api.route("/streak/update", methods=["POST"])
def update_streak():
    """一日完了の記録（タスク完了では自動で呼ばれない）"""
    payload = _body()
    day = payload.get("date") or today_str(_services().today())
    state = _services().streak.update(bool(payload.get("completed")), check_date(day))
    return jsonify(state.to_dict())


# ----- 分析 -----

@api.route("/analytics/daily", methods=["GET"])
def daily_analytics():
    return jsonify(_services().analytics.daily(_date_arg()).to_dict())


@api.route("/analytics/weekly", methods=["GET"])
def weekly_analytics():
    return jsonify([entry.to_dict() for entry in _services().analytics.weekly()])


@api.route("/analytics/heatmap", methods=["GET"])
def heatmap_analytics():
    return jsonify([entry.to_dict() for entry in _services().analytics.heatmap()])


# ----- モチベーションバンク -----

@api.route("/motivation", methods=["GET"])
def list_motivation():
    return jsonify([item.to_dict() for item in _services().planner.list_motivation()])


@api.route("/motivation", methods=["POST"])
def add_motivation():
    item = _services().planner.add_motivation(_body())
    return jsonify(item.to_dict()), 201


@api.route("/motivation/<item_id>", methods=["DELETE"])
def delete_motivation(item_id):
    _services().planner.delete_motivation(item_id)
    return jsonify({"success": True})


# ----- テンプレート -----

@api.route("/templates", methods=["GET"])
def list_templates():
    return jsonify([t.to_dict() for t in _services().planner.list_templates()])


@api.route("/templates", methods=["POST"])
def add_template():
    template = _services().planner.add_template(_body())
    return jsonify(template.to_dict()), 201


@api.route("/templates/<template_id>", methods=["DELETE"])
def delete_template(template_id):
    _services().planner.delete_template(template_id)
    return jsonify({"success": True})


@api.route("/templates/<template_id>/apply", methods=["POST"])
def apply_template(template_id):
    """テンプレートから指定日のタスクを作成"""
    payload = request.get_json(silent=True) or {}
    day = payload.get("date") or today_str(_services().today())
    tasks = _services().planner.apply_template(template_id, day)
    return jsonify([t.to_dict() for t in tasks]), 201


# ============ ERROR HANDLERS ============

def _error(message: str, status: int):
    return jsonify({"error": message}), status


def _register_error_handlers(app: Flask):
    @app.errorhandler(ValidationError)
    def validation_failed(e):
        return _error(str(e), 400)

    @app.errorhandler(NotFoundError)
    def not_found_record(e):
        return _error(str(e), 404)

    @app.errorhandler(StorageError)
    def storage_failed(e):
        logger.error("Storage failure: %s", e)
        return _error(str(e), 500)

    @app.errorhandler(404)
    def not_found(e):
        return _error("Not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return _error("Method not allowed", 405)

    @app.errorhandler(500)
    def server_error(e):
        logger.error("Unhandled error: %s", getattr(e, "original_exception", e))
        return _error("Internal server error", 500)


# ============ APP FACTORY ============

def create_app(store: Optional[Store] = None, config: Optional[Config] = None,
               today: Optional[Callable[[], date]] = None,
               clock: Optional[Callable[[], datetime]] = None) -> Flask:
    """Flaskアプリケーションを作成"""
    config = config or Config()
    store = store or config.make_store()

    app = Flask(__name__)
    app.secret_key = config.SECRET_KEY
    app.config["DEBUG"] = config.DEBUG
    CORS(app, resources={r"/api/*": {"origins": "*"}})

    app.extensions["discipline_tracker"] = Services(
        store, today=today or date.today, clock=clock or datetime.now
    )
    app.register_blueprint(api)
    _register_error_handlers(app)

    logger.info("Discipline Tracker API ready (backend=%s)", store.name)
    return app
