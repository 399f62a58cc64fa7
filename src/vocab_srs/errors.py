"""Scheduler error types.

呼び出し側へ伝搬させる例外のみを定義する。スケジューラ内部では再試行や
自己修復を行わないため、ここに無い失敗は発生しない（ストレージ例外を除く）。
"""

from __future__ import annotations


class SRSError(Exception):
    """Base class for all scheduler errors."""


class NotFoundError(SRSError, LookupError):
    """Raised when a review item has not been seeded yet.

    未シードの item_id に対する採点・参照。呼び出し側で seed→record の順に
    直すか、プログラミングエラーとして扱うこと。
    """

    def __init__(self, item_id: str) -> None:
        super().__init__(f"review item not found: {item_id}")
        self.item_id = item_id


class InvalidArgumentError(SRSError, ValueError):
    """Raised for out-of-domain input such as a quality outside [0, 5]."""
