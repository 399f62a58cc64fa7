"""Logging utilities.

構造化ログの初期化をまとめて提供する。スケジューラの各操作は
`review_recorded` などのイベント名とキーワード引数で JSON 1 行を出力する。
"""

import logging

import structlog
from structlog import contextvars as structlog_contextvars

from .config import settings


def configure_logging(level: str | None = None) -> None:
    """Configure structlog for application-wide logging.

    標準 logging を設定値のレベルで初期化し、structlog で ISO タイムスタンプと
    JSON 形式の出力を有効化する。
    """
    level_name = (level or settings.log_level).strip().upper()
    if level_name not in logging.getLevelNamesMapping():
        raise ValueError(f"unknown log level: {level_name!r}")
    # stdlib 側の出力に "INFO:logger:" などのプレフィックスを付けない
    logging.basicConfig(
        level=logging.getLevelNamesMapping()[level_name],
        format="%(message)s",
        handlers=[logging.StreamHandler()],
        force=True,
    )
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog_contextvars.merge_contextvars,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


logger = structlog.get_logger()
