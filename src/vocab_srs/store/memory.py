from __future__ import annotations

import threading
from collections.abc import Iterator
from dataclasses import replace
from datetime import datetime

from ..errors import NotFoundError
from ..srs import ReviewItem, ReviewLog, as_utc
from .base import ReviewUpdater


def _copy(item: ReviewItem) -> ReviewItem:
    # 呼び出し側の変更がストア内部に波及しないよう content も複製する
    return replace(item, content=dict(item.content))


class InMemoryReviewStore:
    """Process-local review store.

    item_id -> ReviewItem の dict と履歴リストを 1 本のロックで保護する。
    テストや単一プロセスの学習セッション向け。
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: dict[str, ReviewItem] = {}
        self._logs: list[ReviewLog] = []

    def get(self, item_id: str) -> ReviewItem | None:
        with self._lock:
            item = self._items.get(item_id)
            return _copy(item) if item is not None else None

    def add_if_absent(self, item: ReviewItem) -> tuple[ReviewItem, bool]:
        with self._lock:
            existing = self._items.get(item.item_id)
            if existing is not None:
                return _copy(existing), False
            # 直接追加された naive な時刻も UTC として揃える
            stored = replace(item, content=dict(item.content), next_review_at=as_utc(item.next_review_at))
            self._items[item.item_id] = stored
            return _copy(stored), True

    def update(self, item_id: str, fn: ReviewUpdater) -> ReviewItem:
        with self._lock:
            current = self._items.get(item_id)
            if current is None:
                raise NotFoundError(item_id)
            updated, log = fn(_copy(current))
            self._items[item_id] = _copy(updated)
            self._logs.append(replace(log, id=len(self._logs) + 1))
            return _copy(updated)

    def iter_due(self, now: datetime) -> Iterator[ReviewItem]:
        ts = as_utc(now)
        with self._lock:
            due = [_copy(it) for it in self._items.values() if it.is_due(ts)]
        yield from due

    def count(self) -> int:
        with self._lock:
            return len(self._items)

    def count_due(self, now: datetime) -> int:
        ts = as_utc(now)
        with self._lock:
            return sum(1 for it in self._items.values() if it.is_due(ts))

    def count_scheduled_between(self, start: datetime, end: datetime) -> int:
        lo, hi = as_utc(start), as_utc(end)
        with self._lock:
            return sum(1 for it in self._items.values() if lo <= it.next_review_at < hi)

    def recent_reviews(self, limit: int) -> list[ReviewLog]:
        with self._lock:
            ordered = sorted(self._logs, key=lambda lg: (lg.reviewed_at, lg.id or 0), reverse=True)
        return ordered[:limit]

    def count_reviews_since(self, since: datetime) -> int:
        ts = as_utc(since)
        with self._lock:
            return sum(1 for lg in self._logs if lg.reviewed_at >= ts)
