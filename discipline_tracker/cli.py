"""
Discipline Tracker - コマンドライン
"""
import argparse
import logging
import sys
from typing import Dict, List, Optional

from .config import Config, setup_logging
from .errors import TrackerError
from .logic.analytics import AnalyticsEngine
from .logic.streak import StreakTracker
from .utils.dates import format_duration, today_str
from .validation import check_date
from .cloud.api_client import TrackerClient

logger = logging.getLogger(__name__)


class LocalSource:
    """ストアを直接読むデータ取得元（--local）"""

    def __init__(self, config: Config):
        store = config.make_store()
        self.analytics = AnalyticsEngine(store)
        self.streak = StreakTracker(store)

    def daily_summary(self, date: Optional[str]) -> Dict:
        return self.analytics.daily(check_date(date or today_str())).to_dict()

    def weekly(self) -> List[Dict]:
        return [entry.to_dict() for entry in self.analytics.weekly()]

    def get_streak(self) -> Dict:
        return self.streak.current_state().to_dict()

    def update_streak(self, completed: bool, date: Optional[str]) -> Dict:
        return self.streak.update(completed, check_date(date or today_str())).to_dict()


def _print_summary(summary: Dict, date: str):
    print(f"📅 {date}")
    print(f"  Discipline score : {summary['disciplineScore']}%")
    print(f"  Tasks            : {summary['completedTasks']}/{summary['totalTasks']}")
    print(f"  Focus time       : {format_duration(summary['totalFocusTime'])}")
    for category, seconds in sorted(summary["categoryTime"].items()):
        print(f"    {category:<10} {format_duration(seconds)}")
    print(f"  Distractions     : {summary['distractionCount']}")


def _print_streak(state: Dict):
    print(f"🔥 Current streak: {state['current_streak']} days")
    print(f"🏆 Longest streak: {state['longest_streak']} days")
    print(f"   Last completed: {state['last_completed_date'] or '-'}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="discipline-tracker",
                                     description="Discipline Tracker")
    parser.add_argument("--local", action="store_true",
                        help="サーバーを経由せずローカルのストアを直接読む")
    parser.add_argument("--api-url", help="APIサーバーのURL（既定: TRACKER_API_URL）")
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="APIサーバーを起動")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, help="ポート番号（既定: PORT）")

    summary = commands.add_parser("summary", help="一日の集計を表示")
    summary.add_argument("--date", help="YYYY-MM-DD（既定: 今日）")

    commands.add_parser("week", help="直近7日間のスコアを表示")

    complete = commands.add_parser("complete-day", help="一日の完了をストリークに記録")
    complete.add_argument("--date", help="YYYY-MM-DD（既定: 今日）")
    complete.add_argument("--missed", action="store_true", help="未達成として記録")

    commands.add_parser("streak", help="ストリークを表示")
    return parser


def _serve(config: Config, args) -> int:
    from .server import create_app

    app = create_app(config=config)
    app.run(host=args.host, port=args.port or config.PORT, debug=config.DEBUG)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = Config()
    setup_logging(config.LOG_LEVEL)

    if args.command == "serve":
        return _serve(config, args)
    if args.local:
        return _run(LocalSource(config), args)
    with TrackerClient(args.api_url or config.API_URL) as client:
        return _run(client, args)


def _run(source, args) -> int:
    """サブコマンドを実行（LocalSource / TrackerClient 共通）"""
    try:
        if args.command == "summary":
            _print_summary(source.daily_summary(args.date), args.date or today_str())
        elif args.command == "week":
            for entry in source.weekly():
                bar = "█" * (entry["score"] // 10)
                print(f"{entry['date']}  {entry['score']:>3}%  {bar}")
        elif args.command == "complete-day":
            _print_streak(source.update_streak(not args.missed, args.date))
        elif args.command == "streak":
            _print_streak(source.get_streak())
    except TrackerError as e:
        logger.error("Command %s failed: %s", args.command, e)
        print(f"❌ {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
