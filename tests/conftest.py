"""Pytest configuration shared by the scheduler tests."""

import os
from datetime import UTC, datetime

import pytest

# import 時の Settings() がローカルの .env や DB パスに依存しないようにする
os.environ.setdefault("SRS_STORE_BACKEND", "memory")
os.environ.setdefault("STRICT_MODE", "false")

from vocab_srs.srs import Scheduler  # noqa: E402
from vocab_srs.store import InMemoryReviewStore, SQLiteReviewStore  # noqa: E402

D0 = datetime(2026, 1, 5, 9, 0, tzinfo=UTC)


@pytest.fixture()
def d0() -> datetime:
    return D0


@pytest.fixture(params=["memory", "sqlite"])
def store(request: pytest.FixtureRequest, tmp_path):
    if request.param == "memory":
        return InMemoryReviewStore()
    return SQLiteReviewStore(str(tmp_path / "srs.sqlite3"))


@pytest.fixture()
def scheduler(store) -> Scheduler:
    return Scheduler(store, clock=lambda: D0, max_today=20)
