from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Protocol

if TYPE_CHECKING:
    from ..srs import ReviewItem, ReviewLog


ReviewUpdater = Callable[["ReviewItem"], tuple["ReviewItem", "ReviewLog"]]


class ReviewStore(Protocol):
    """Persistence contract for review items and their history.

    - add_if_absent: 既存なら何もしない（戻り値の created=False）
    - update: item_id 単位で原子的に read-modify-write し、履歴を 1 件追記する。
      対象が無ければ NotFoundError
    - iter_due: 呼び出し毎に新しく問い合わせるイテレータ
    """

    def get(self, item_id: str) -> ReviewItem | None: ...

    def add_if_absent(self, item: ReviewItem) -> tuple[ReviewItem, bool]: ...

    def update(self, item_id: str, fn: ReviewUpdater) -> ReviewItem: ...

    def iter_due(self, now: datetime) -> Iterator[ReviewItem]: ...

    def count(self) -> int: ...

    def count_due(self, now: datetime) -> int: ...

    def count_scheduled_between(self, start: datetime, end: datetime) -> int: ...

    def recent_reviews(self, limit: int) -> list[ReviewLog]: ...

    def count_reviews_since(self, since: datetime) -> int: ...
