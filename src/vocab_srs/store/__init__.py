from __future__ import annotations

from ..config import Settings, settings as default_settings
from ..logging import logger
from .base import ReviewStore, ReviewUpdater
from .memory import InMemoryReviewStore
from .sqlite import SQLiteReviewStore


def create_review_store(settings: Settings | None = None) -> ReviewStore:
    """設定値に応じた復習ストアを生成する。

    - sqlite: SRS_DB_PATH のファイルへ永続化
    - memory: プロセス内のみ（テスト/デモ用）
    """

    cfg = settings or default_settings
    if cfg.srs_store_backend == "memory":
        logger.info("review_store_initialized", backend="memory")
        return InMemoryReviewStore()
    return SQLiteReviewStore(db_path=cfg.srs_db_path)


__all__ = [
    "InMemoryReviewStore",
    "ReviewStore",
    "ReviewUpdater",
    "SQLiteReviewStore",
    "create_review_store",
]
