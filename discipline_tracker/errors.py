"""
例外定義
"""


class TrackerError(Exception):
    """トラッカー共通の基底例外"""


class NotFoundError(TrackerError):
    """指定したID・日付のレコードが存在しない"""


class ValidationError(TrackerError):
    """入力値が不正"""


class StorageError(TrackerError):
    """ストレージの読み書きに失敗"""
