"""
日付・時刻ユーティリティ

日付は常に YYYY-MM-DD の文字列キーで扱う（時刻によるずれを避けるため）。
"""
import re
from datetime import date, datetime, timedelta
from typing import List, Optional

DATE_FORMAT = "%Y-%m-%d"
TIME_PATTERN = re.compile(r"([01][0-9]|2[0-3]):[0-5][0-9]")


def today_str(today: Optional[date] = None) -> str:
    """今日の日付文字列"""
    return (today or date.today()).strftime(DATE_FORMAT)


def now_iso(now: Optional[datetime] = None) -> str:
    """現在時刻のISO文字列（ローカル時刻、秒単位）"""
    return (now or datetime.now()).isoformat(timespec="seconds")


def parse_date(date_str: str) -> date:
    return datetime.strptime(date_str, DATE_FORMAT).date()


def is_valid_date(date_str) -> bool:
    if not isinstance(date_str, str):
        return False
    try:
        parse_date(date_str)
    except ValueError:
        return False
    return True


def is_valid_time(time_str) -> bool:
    """HH:MM（24時間表記）かどうか"""
    return isinstance(time_str, str) and bool(TIME_PATTERN.fullmatch(time_str))


def shift_date(date_str: str, days: int) -> str:
    """日付文字列をdays日ずらす"""
    return (parse_date(date_str) + timedelta(days=days)).strftime(DATE_FORMAT)


def date_window(end: date, days: int) -> List[str]:
    """endを含むdays日分の日付（古い順）"""
    return [
        (end - timedelta(days=offset)).strftime(DATE_FORMAT)
        for offset in range(days - 1, -1, -1)
    ]


def seconds_between(start_iso: str, end_iso: str) -> int:
    """2つのISO時刻の差（秒、切り捨て）"""
    delta = datetime.fromisoformat(end_iso) - datetime.fromisoformat(start_iso)
    return max(0, int(delta.total_seconds()))


def date_of(timestamp: str) -> str:
    """タイムスタンプの日付部分"""
    return timestamp[:10]


def format_duration(seconds: int) -> str:
    """経過秒数を整形（HH:MM:SS）"""
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
