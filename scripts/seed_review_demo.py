#!/usr/bin/env python
"""デモ用フラッシュカードを SQLite の復習ストアへ流し込むユーティリティ。"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--db-path",
        default=os.environ.get("SRS_DB_PATH", ".data/srs.sqlite3"),
        help="投入先 SQLite DB のパス（既定: SRS_DB_PATH または .data/srs.sqlite3）",
    )
    parser.add_argument(
        "--due-now",
        action="store_true",
        help="seed したカードを即座に出題対象にする場合に指定。",
    )
    return parser


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    # 設定クラスは import 時点で環境変数を読むため、先に上書きしてから読み込む。
    os.environ["SRS_DB_PATH"] = str(args.db_path)
    os.environ["SRS_STORE_BACKEND"] = "sqlite"

    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root / "src"))

    from vocab_srs.logging import configure_logging
    from vocab_srs.seed_demo import seed_demo_deck
    from vocab_srs.srs import Scheduler
    from vocab_srs.store import create_review_store

    configure_logging()
    scheduler = Scheduler(create_review_store())
    created = seed_demo_deck(scheduler, due_now=args.due_now)
    stats = scheduler.stats()
    print(f"Seeded {len(created)} review items into {args.db_path}.")
    print(stats.model_dump_json())


if __name__ == "__main__":
    main()
