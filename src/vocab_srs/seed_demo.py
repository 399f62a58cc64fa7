"""デモ用の復習デッキを投入するユーティリティ。

ローカル確認用に数枚のフラッシュカードをフォルダ "demo" として seed する。
既に追跡中のカードはスキップされるため、何度実行しても結果は変わらない。
"""

from __future__ import annotations

from datetime import datetime, timedelta

from .logging import logger
from .srs import ReviewItem, Scheduler

DEMO_FOLDER_ID = "demo"

DEMO_FLASHCARDS: list[dict[str, str]] = [
    {"id": "converge", "front": "converge", "back": "to come together", "example": "The paths converge at the lake."},
    {"id": "assumption", "front": "assumption", "back": "a thing that is accepted as true"},
    {"id": "robust", "front": "robust", "back": "strong and healthy; resilient"},
    {"id": "tradeoff", "front": "trade-off", "back": "a balance achieved between two desirable but incompatible features"},
    {"id": "feasible", "front": "feasible", "back": "possible to do easily or conveniently"},
    {"id": "insight", "front": "insight", "back": "the capacity to gain an accurate understanding"},
    {"id": "yield", "front": "yield", "back": "produce or provide"},
]


def seed_demo_deck(scheduler: Scheduler, *, now: datetime | None = None, due_now: bool = False) -> list[ReviewItem]:
    """Seed the demo folder and return the newly created items.

    due_now=True の場合は 1 日前に学習したものとして seed し、即座に出題対象にする。
    """

    ts = now if now is not None else scheduler.clock()
    if due_now:
        ts = ts - timedelta(days=1)
    created = scheduler.seed_folder(DEMO_FOLDER_ID, DEMO_FLASHCARDS, ts)
    logger.info("demo_seeded", folder_id=DEMO_FOLDER_ID, created=len(created), due_now=due_now)
    return created
