import pytest

from vocab_srs.config import DEFAULT_DB_PATH, Settings
from vocab_srs.store import InMemoryReviewStore, SQLiteReviewStore, create_review_store


def test_defaults(monkeypatch: pytest.MonkeyPatch):
    for name in ("SRS_STORE_BACKEND", "SRS_DB_PATH", "SRS_MAX_TODAY", "LOG_LEVEL", "STRICT_MODE"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.srs_store_backend == "sqlite"
    assert settings.srs_db_path == DEFAULT_DB_PATH
    assert settings.srs_max_today == 20
    assert settings.log_level == "INFO"
    assert settings.strict_mode is True


def test_values_are_read_from_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SRS_STORE_BACKEND", "MEMORY")
    monkeypatch.setenv("SRS_MAX_TODAY", "7")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings(_env_file=None)

    assert settings.srs_store_backend == "memory"
    assert settings.srs_max_today == 7
    assert settings.log_level == "DEBUG"


def test_strict_mode_rejects_blank_db_path():
    with pytest.raises(ValueError, match="SRS_DB_PATH must be set when STRICT_MODE=true"):
        Settings(_env_file=None, strict_mode=True, srs_store_backend="sqlite", srs_db_path=" ")


def test_non_strict_mode_allows_blank_db_path():
    settings = Settings(_env_file=None, strict_mode=False, srs_store_backend="sqlite", srs_db_path="")
    assert settings.srs_db_path == ""


@pytest.mark.parametrize(
    "field, value",
    [("srs_store_backend", "redis"), ("log_level", "LOUD"), ("srs_max_today", 0)],
)
def test_invalid_values_are_rejected(field, value):
    with pytest.raises(ValueError):
        Settings(_env_file=None, **{field: value})


def test_create_review_store_follows_backend(tmp_path):
    memory = create_review_store(Settings(_env_file=None, srs_store_backend="memory"))
    sqlite = create_review_store(
        Settings(_env_file=None, srs_store_backend="sqlite", srs_db_path=str(tmp_path / "srs.sqlite3"))
    )

    assert isinstance(memory, InMemoryReviewStore)
    assert isinstance(sqlite, SQLiteReviewStore)
