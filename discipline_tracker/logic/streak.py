"""
連続達成ストリークの計算ロジック
"""
import logging
from typing import Optional

from ..models import StreakState
from ..store import Store
from ..utils.dates import shift_date, today_str
from ..validation import check_date

logger = logging.getLogger(__name__)


def record_completion(state: StreakState, date: str) -> StreakState:
    """
    dateの「一日完了」を記録した新しい状態を返す（stateは変更しない）

    - 前回完了日が昨日なら +1
    - 前回完了日が同じ日なら据え置き（同じ日の二重カウントなし）
    - それ以外（2日以上空いた、または初回）は 1 から数え直し
    """
    yesterday = shift_date(date, -1)
    current = state.current_streak

    if state.last_completed_date in (yesterday, date):
        if state.last_completed_date != date:
            current += 1
    else:
        current = 1

    return StreakState(
        current_streak=current,
        longest_streak=max(state.longest_streak, current),
        last_completed_date=date,
    )


class StreakTracker:
    """ストリークの読み込み・更新・保存"""

    def __init__(self, store: Store):
        self.store = store

    def current_state(self) -> StreakState:
        """現在のストリーク（未記録なら 0, 0, None）"""
        return self.store.get_streak()

    def record_completion(self, date: str) -> StreakState:
        """一日完了を記録して保存"""
        new_state = record_completion(self.store.get_streak(), check_date(date))
        self.store.save_streak(new_state)
        logger.info(
            "Streak updated for %s: current=%d longest=%d",
            date, new_state.current_streak, new_state.longest_streak
        )
        return new_state

    def update(self, completed: bool, date: Optional[str] = None) -> StreakState:
        """完了フラグが立っている場合のみ記録する"""
        if not completed:
            return self.current_state()
        return self.record_completion(date or today_str())
