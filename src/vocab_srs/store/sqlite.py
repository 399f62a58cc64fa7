from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterator
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path

from ..errors import InvalidArgumentError, NotFoundError
from ..logging import logger
from ..srs import ReviewItem, ReviewLog, as_utc
from .base import ReviewUpdater


_ITEM_COLUMNS = "item_id, kind, content, repetitions, interval_days, ease, next_review_at"


def _to_db(ts: datetime) -> str:
    # 桁数を固定して文字列比較 = 時刻比較 になるようにする
    return as_utc(ts).isoformat(timespec="microseconds")


def _from_db(raw: str) -> datetime:
    return as_utc(datetime.fromisoformat(raw))


def _row_to_item(row: sqlite3.Row) -> ReviewItem:
    return ReviewItem(
        item_id=row["item_id"],
        kind=row["kind"],
        content=json.loads(row["content"]) if row["content"] else {},
        repetitions=int(row["repetitions"]),
        interval_days=int(row["interval_days"]),
        ease_factor=float(row["ease"]),
        next_review_at=_from_db(row["next_review_at"]),
    )


def _row_to_log(row: sqlite3.Row) -> ReviewLog:
    return ReviewLog(
        id=int(row["id"]),
        item_id=row["item_id"],
        reviewed_at=_from_db(row["reviewed_at"]),
        quality=int(row["quality"]),
        ease_factor=float(row["ease"]),
        interval_days=int(row["interval_days"]),
        next_review_at=_from_db(row["next_review_at"]),
    )


class SQLiteReviewStore:
    """SQLite-backed review store with review history.

    - review_items: 項目ごとの SM-2 状態（repetitions/interval_days/ease/next_review_at）
    - review_logs: 採点履歴（1 採点 = 1 行）
    - update は BEGIN IMMEDIATE で同一項目への同時採点による更新消失を防ぐ
    """

    def __init__(self, db_path: str) -> None:
        if db_path.strip() == ":memory:":
            # 接続毎に別 DB になるため使えない。InMemoryReviewStore を使うこと
            raise InvalidArgumentError("SQLiteReviewStore needs a file path; use InMemoryReviewStore for in-memory state")
        self.db_path = db_path
        self._ensure_dirs()
        self._init_db()
        logger.info("review_store_initialized", backend="sqlite", db_path=db_path)

    # --- low-level helpers ---
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=10.0, isolation_level=None, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        with conn:
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA foreign_keys=ON;")
        return conn

    def _ensure_dirs(self) -> None:
        p = Path(self.db_path)
        if p.parent and not p.parent.exists():
            p.parent.mkdir(parents=True, exist_ok=True)

    def _init_db(self) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS review_items (
                        item_id TEXT PRIMARY KEY,
                        kind TEXT NOT NULL DEFAULT 'flashcard',
                        content TEXT NOT NULL,
                        repetitions INTEGER NOT NULL DEFAULT 0,
                        interval_days INTEGER NOT NULL DEFAULT 1,
                        ease REAL NOT NULL DEFAULT 2.5,
                        next_review_at TEXT NOT NULL,
                        created_at TEXT NOT NULL
                    );
                    """
                )
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS review_logs (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        item_id TEXT NOT NULL,
                        reviewed_at TEXT NOT NULL,
                        quality INTEGER NOT NULL,
                        ease REAL NOT NULL,
                        interval_days INTEGER NOT NULL,
                        next_review_at TEXT NOT NULL,
                        FOREIGN KEY(item_id) REFERENCES review_items(item_id) ON DELETE CASCADE
                    );
                    """
                )
                conn.execute("CREATE INDEX IF NOT EXISTS idx_review_items_next_review_at ON review_items(next_review_at);")
                conn.execute("CREATE INDEX IF NOT EXISTS idx_review_logs_reviewed_at ON review_logs(reviewed_at);")
        finally:
            conn.close()

    # --- public API ---
    def get(self, item_id: str) -> ReviewItem | None:
        conn = self._connect()
        try:
            row = conn.execute(
                f"SELECT {_ITEM_COLUMNS} FROM review_items WHERE item_id = ?;",
                (item_id,),
            ).fetchone()
            return _row_to_item(row) if row is not None else None
        finally:
            conn.close()

    def add_if_absent(self, item: ReviewItem) -> tuple[ReviewItem, bool]:
        conn = self._connect()
        try:
            with conn:
                cur = conn.execute(
                    """
                    INSERT OR IGNORE INTO review_items(
                        item_id, kind, content, repetitions, interval_days, ease, next_review_at, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?);
                    """,
                    (
                        item.item_id,
                        item.kind,
                        json.dumps(item.content, ensure_ascii=False),
                        item.repetitions,
                        item.interval_days,
                        item.ease_factor,
                        _to_db(item.next_review_at),
                        _to_db(datetime.now(UTC)),
                    ),
                )
                created = cur.rowcount > 0
            if created:
                return replace(item, next_review_at=as_utc(item.next_review_at)), True
            row = conn.execute(
                f"SELECT {_ITEM_COLUMNS} FROM review_items WHERE item_id = ?;",
                (item.item_id,),
            ).fetchone()
            return _row_to_item(row), False
        finally:
            conn.close()

    def update(self, item_id: str, fn: ReviewUpdater) -> ReviewItem:
        conn = self._connect()
        try:
            # BEGIN IMMEDIATE to avoid concurrent writers on the same row
            conn.execute("BEGIN IMMEDIATE;")
            row = conn.execute(
                f"SELECT {_ITEM_COLUMNS} FROM review_items WHERE item_id = ?;",
                (item_id,),
            ).fetchone()
            if row is None:
                raise NotFoundError(item_id)

            updated, log = fn(_row_to_item(row))
            conn.execute(
                """
                UPDATE review_items
                SET repetitions = ?, interval_days = ?, ease = ?, next_review_at = ?
                WHERE item_id = ?;
                """,
                (
                    updated.repetitions,
                    updated.interval_days,
                    updated.ease_factor,
                    _to_db(updated.next_review_at),
                    item_id,
                ),
            )
            conn.execute(
                """
                INSERT INTO review_logs(item_id, reviewed_at, quality, ease, interval_days, next_review_at)
                VALUES (?, ?, ?, ?, ?, ?);
                """,
                (
                    item_id,
                    _to_db(log.reviewed_at),
                    log.quality,
                    log.ease_factor,
                    log.interval_days,
                    _to_db(log.next_review_at),
                ),
            )
            conn.execute("COMMIT;")
            return updated
        except Exception:
            if conn.in_transaction:
                conn.execute("ROLLBACK;")
            raise
        finally:
            conn.close()

    def _iter_items(self, sql: str, params: tuple = ()) -> Iterator[ReviewItem]:
        conn = self._connect()
        try:
            rows = conn.execute(sql, params).fetchall()
        finally:
            conn.close()
        for row in rows:
            yield _row_to_item(row)

    def iter_due(self, now: datetime) -> Iterator[ReviewItem]:
        return self._iter_items(
            f"SELECT {_ITEM_COLUMNS} FROM review_items WHERE next_review_at <= ?;",
            (_to_db(now),),
        )

    def _scalar(self, sql: str, params: tuple = ()) -> int:
        conn = self._connect()
        try:
            return int(conn.execute(sql, params).fetchone()["c"])
        finally:
            conn.close()

    def count(self) -> int:
        return self._scalar("SELECT COUNT(1) AS c FROM review_items;")

    def count_due(self, now: datetime) -> int:
        return self._scalar("SELECT COUNT(1) AS c FROM review_items WHERE next_review_at <= ?;", (_to_db(now),))

    def count_scheduled_between(self, start: datetime, end: datetime) -> int:
        return self._scalar(
            "SELECT COUNT(1) AS c FROM review_items WHERE next_review_at >= ? AND next_review_at < ?;",
            (_to_db(start), _to_db(end)),
        )

    def recent_reviews(self, limit: int) -> list[ReviewLog]:
        """直近の採点履歴を新しい順に最大 limit 件返す。"""
        conn = self._connect()
        try:
            cur = conn.execute(
                """
                SELECT id, item_id, reviewed_at, quality, ease, interval_days, next_review_at
                FROM review_logs
                ORDER BY reviewed_at DESC, id DESC
                LIMIT ?;
                """,
                (limit,),
            )
            return [_row_to_log(row) for row in cur.fetchall()]
        finally:
            conn.close()

    def count_reviews_since(self, since: datetime) -> int:
        return self._scalar("SELECT COUNT(1) AS c FROM review_logs WHERE reviewed_at >= ?;", (_to_db(since),))
