"""
設定（環境変数 / .env から読み込み）
"""
import logging
import os

from dotenv import load_dotenv

from .database import Database
from .local_store import LocalStore
from .store import Store

# 環境変数を読み込み
load_dotenv()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Config:
    """アプリケーション設定"""

    def __init__(self, **overrides):
        self.BACKEND = os.getenv("TRACKER_BACKEND", "sqlite")  # sqlite / local
        self.DB_PATH = os.getenv("TRACKER_DB_PATH", "discipline.db")
        self.LOCAL_PATH = os.getenv("TRACKER_LOCAL_PATH", "data/discipline.json")
        self.API_URL = os.getenv("TRACKER_API_URL", "http://localhost:3001")
        self.PORT = int(os.getenv("PORT", 3001))
        self.DEBUG = os.getenv("FLASK_DEBUG", "false").lower() == "true"
        self.SECRET_KEY = os.getenv("SECRET_KEY", "discipline-tracker-dev-key")
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        for key, value in overrides.items():
            setattr(self, key, value)

    def make_store(self) -> Store:
        """設定されたバックエンドのストアを作成"""
        if self.BACKEND == "local":
            return LocalStore(self.LOCAL_PATH)
        if self.BACKEND == "sqlite":
            return Database(self.DB_PATH)
        raise ValueError(f"Unknown TRACKER_BACKEND: {self.BACKEND}")


def setup_logging(level: str = "INFO"):
    """ログ出力の設定"""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
