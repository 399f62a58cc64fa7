from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from enum import IntEnum
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from .config import settings
from .errors import InvalidArgumentError, NotFoundError
from .id_factory import make_review_item_id
from .logging import logger
from .models.review import Flashcard, ReviewEvent, ReviewStats

if TYPE_CHECKING:
    from .store.base import ReviewStore


DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3
FIRST_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 6
# 間隔は指数的に伸びるので上限を設ける（約 100 年）。これが無いと datetime の範囲を超える
MAX_INTERVAL_DAYS = 36500
_LATEST_UTC = datetime.max.replace(tzinfo=UTC)


class ReviewQuality(IntEnum):
    """Ratings offered by the four-button review UI.

    2 は UI に出ないが、アルゴリズムは 0..5 の全域を受け付ける。
    """

    FORGOT = 1
    HARD = 3
    GOOD = 4
    EASY = 5


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Normalise a timestamp to aware UTC. Naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def add_days(ts: datetime, days: int) -> datetime:
    """Return ``ts + days``, saturating at the latest representable UTC time."""
    try:
        return ts + timedelta(days=days)
    except OverflowError:
        return _LATEST_UTC


@dataclass
class ReviewItem:
    item_id: str
    content: dict[str, Any]
    next_review_at: datetime
    interval_days: int = FIRST_INTERVAL_DAYS
    ease_factor: float = DEFAULT_EASE_FACTOR
    repetitions: int = 0
    kind: str = "flashcard"

    def is_due(self, now: datetime) -> bool:
        return as_utc(self.next_review_at) <= as_utc(now)


@dataclass(frozen=True)
class ReviewSchedule:
    """Result of one SM-2 step (no timestamps)."""

    interval_days: int
    ease_factor: float
    repetitions: int


@dataclass(frozen=True)
class ReviewLog:
    """One row of review history, appended per recorded review."""

    item_id: str
    reviewed_at: datetime
    quality: int
    ease_factor: float
    interval_days: int
    next_review_at: datetime
    id: int | None = field(default=None, compare=False)


def validate_quality(quality: object) -> int:
    """Return ``quality`` as int or raise :class:`InvalidArgumentError`.

    黙ってクランプすると ease 更新式が壊れるため、範囲外は必ずエラーにする。
    bool は int のサブクラスだが評価値としては受け付けない。
    """
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidArgumentError(f"quality must be an integer in [{MIN_QUALITY}, {MAX_QUALITY}], got {quality!r}")
    if quality < MIN_QUALITY or quality > MAX_QUALITY:
        raise InvalidArgumentError(f"quality must be an integer in [{MIN_QUALITY}, {MAX_QUALITY}], got {quality!r}")
    return int(quality)


def _round_half_up(value: float) -> int:
    # Python の round() は偶数丸めなので使わない
    return int(math.floor(value + 0.5))


def calculate_next_review(quality: int, repetitions: int, ease_factor: float, interval_days: int) -> ReviewSchedule:
    """Compute the next SM-2 state from the current one.

    - ease: EF' = EF + (0.1 - (5-q) * (0.08 + (5-q) * 0.02)), 下限 1.3
    - q < 3: repetitions=0, interval=1（翌日に再出題）
    - q >= 3: repetitions+1。1回目=1日, 2回目=6日, 3回目以降=round(前回間隔 * EF')、上限 MAX_INTERVAL_DAYS
    """
    q = validate_quality(quality)
    miss = MAX_QUALITY - q
    ease = max(MIN_EASE_FACTOR, ease_factor + (0.1 - miss * (0.08 + miss * 0.02)))

    if q < PASSING_QUALITY:
        return ReviewSchedule(interval_days=FIRST_INTERVAL_DAYS, ease_factor=ease, repetitions=0)

    reps = repetitions + 1
    if reps == 1:
        interval = FIRST_INTERVAL_DAYS
    elif reps == 2:
        interval = SECOND_INTERVAL_DAYS
    else:
        interval = min(MAX_INTERVAL_DAYS, max(1, _round_half_up(interval_days * ease)))
    return ReviewSchedule(interval_days=interval, ease_factor=ease, repetitions=reps)


class DueItems:
    """Restartable view over the items due at ``now``.

    イテレートする度にストアへ問い合わせ直す（スナップショットは持たない）。
    """

    def __init__(self, store: ReviewStore, now: datetime) -> None:
        self._store = store
        self._now = now

    def __iter__(self) -> Iterator[ReviewItem]:
        return self._store.iter_due(self._now)

    def __repr__(self) -> str:
        return f"DueItems(now={self._now.isoformat()})"


class Scheduler:
    """Spaced-repetition scheduler over an injected review store.

    - seed: 初回学習完了時に ReviewItem を作成（既存ならそのまま返す）
    - record_review: SM-2 で interval/ease/repetitions/next_review_at を更新
    - items_due_for_review: next_review_at <= now の項目を返す
    ストアは item_id 単位の原子的な read-modify-write を保証する。
    """

    def __init__(
        self,
        store: ReviewStore,
        *,
        clock: Callable[[], datetime] = utcnow,
        max_today: int | None = None,
    ) -> None:
        self.store = store
        self.clock = clock
        self.max_today = max_today if max_today is not None else settings.srs_max_today
        if self.max_today < 1:
            raise InvalidArgumentError(f"max_today must be >= 1, got {self.max_today}")

    def _now(self, now: datetime | None) -> datetime:
        return as_utc(now if now is not None else self.clock())

    # --- seeding ---
    def seed(self, item_id: str, content: Mapping[str, Any], now: datetime | None = None, *, kind: str = "flashcard") -> ReviewItem:
        """Create the scheduling record for ``item_id`` unless it already exists."""
        ts = self._now(now)
        item = ReviewItem(
            item_id=item_id,
            content=dict(content),
            next_review_at=add_days(ts, FIRST_INTERVAL_DAYS),
            kind=kind,
        )
        stored, created = self.store.add_if_absent(item)
        if created:
            logger.info("review_item_seeded", item_id=item_id, kind=kind, next_review_at=stored.next_review_at.isoformat())
        return stored

    def seed_folder(
        self,
        folder_id: str,
        flashcards: Iterable[Flashcard | Mapping[str, Any]],
        now: datetime | None = None,
    ) -> list[ReviewItem]:
        """Seed every flashcard of a completed set; return only the new items."""
        ts = self._now(now)
        created: list[ReviewItem] = []
        for raw in flashcards:
            try:
                card = raw if isinstance(raw, Flashcard) else Flashcard.model_validate(raw)
            except ValidationError as exc:
                raise InvalidArgumentError(f"invalid flashcard in folder {folder_id}: {exc}") from exc
            item_id = make_review_item_id(card.id, folder_id)
            item = ReviewItem(
                item_id=item_id,
                content=card.model_dump(exclude_none=True),
                next_review_at=add_days(ts, FIRST_INTERVAL_DAYS),
            )
            stored, was_created = self.store.add_if_absent(item)
            if was_created:
                created.append(stored)
        logger.info("review_folder_seeded", folder_id=folder_id, created=len(created))
        return created

    # --- reviewing ---
    def record_review(self, item_id: str, quality: int, now: datetime | None = None) -> ReviewItem:
        """Apply one rating to ``item_id`` and persist the new schedule."""
        try:
            q = validate_quality(quality)
        except InvalidArgumentError:
            logger.warning("review_quality_rejected", item_id=item_id, quality=repr(quality))
            raise
        ts = self._now(now)

        def _apply(current: ReviewItem) -> tuple[ReviewItem, ReviewLog]:
            step = calculate_next_review(q, current.repetitions, current.ease_factor, current.interval_days)
            updated = replace(
                current,
                interval_days=step.interval_days,
                ease_factor=step.ease_factor,
                repetitions=step.repetitions,
                next_review_at=add_days(ts, step.interval_days),
            )
            log = ReviewLog(
                item_id=item_id,
                reviewed_at=ts,
                quality=q,
                ease_factor=updated.ease_factor,
                interval_days=updated.interval_days,
                next_review_at=updated.next_review_at,
            )
            return updated, log

        try:
            updated = self.store.update(item_id, _apply)
        except NotFoundError:
            logger.warning("review_item_not_found", item_id=item_id)
            raise
        logger.info(
            "review_recorded",
            item_id=item_id,
            quality=q,
            repetitions=updated.repetitions,
            interval_days=updated.interval_days,
            ease_factor=round(updated.ease_factor, 4),
            next_review_at=updated.next_review_at.isoformat(),
        )
        return updated

    def apply_reviews(self, events: Iterable[ReviewEvent | Mapping[str, Any]], now: datetime | None = None) -> list[ReviewItem]:
        """Apply a stream of ``{item_id, quality}`` events in order.

        最初の失敗で停止し例外を伝搬する。それまでの採点は各項目単位で確定済み。
        """
        ts = self._now(now)
        results: list[ReviewItem] = []
        for raw in events:
            try:
                event = raw if isinstance(raw, ReviewEvent) else ReviewEvent.model_validate(raw)
            except ValidationError as exc:
                raise InvalidArgumentError(f"invalid review event: {exc}") from exc
            results.append(self.record_review(event.item_id, event.quality, ts))
        return results

    # --- queries ---
    def get(self, item_id: str) -> ReviewItem:
        item = self.store.get(item_id)
        if item is None:
            raise NotFoundError(item_id)
        return item

    def items_due_for_review(self, now: datetime | None = None) -> DueItems:
        return DueItems(self.store, self._now(now))

    def review_queue(self, now: datetime | None = None, limit: int | None = None) -> list[ReviewItem]:
        """Due items ordered by next_review_at then item_id, at most ``limit``."""
        cap = self.max_today if limit is None else limit
        if cap < 0:
            raise InvalidArgumentError(f"limit must be >= 0, got {cap}")
        due = sorted(self.items_due_for_review(now), key=lambda it: (it.next_review_at, it.item_id))
        return due[:cap]

    def recent_reviews(self, limit: int = 5) -> list[ReviewLog]:
        if limit < 0:
            raise InvalidArgumentError(f"limit must be >= 0, got {limit}")
        return self.store.recent_reviews(limit)

    def stats(self, now: datetime | None = None) -> ReviewStats:
        """Progress counters for the learning dashboard.

        - due_now: next_review_at <= now の件数
        - scheduled_today: now と同じ UTC 日に出題予定の件数
        - reviewed_today: 当日 00:00 UTC 以降に採点された件数
        """
        ts = self._now(now)
        day_start = datetime(ts.year, ts.month, ts.day, tzinfo=UTC)
        day_end = add_days(day_start, 1)
        return ReviewStats(
            total=self.store.count(),
            due_now=self.store.count_due(ts),
            scheduled_today=self.store.count_scheduled_between(day_start, day_end),
            reviewed_today=self.store.count_reviews_since(day_start),
        )
