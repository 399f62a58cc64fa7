import logging

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_DB_PATH = ".data/srs.sqlite3"
_STORE_BACKENDS = frozenset({"sqlite", "memory"})


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    環境変数から読み込まれるアプリ設定クラス。
    - environment: 実行環境（development/staging/production など）
    - srs_store_backend: 復習状態の保存先（sqlite / memory）
    - srs_db_path: SQLite ストアのパス
    """

    environment: str = Field(
        default="development",
        description="Runtime environment / 実行環境",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level / ルートロガーのログレベル",
    )

    # --- SRS（復習）の永続化設定 ---
    srs_store_backend: str = Field(
        default="sqlite",
        description="Review store backend (sqlite|memory) / 復習ストアの種類",
    )
    srs_db_path: str = Field(
        default=DEFAULT_DB_PATH,
        description="Path to SRS SQLite database / SRS用SQLite DBパス",
    )
    srs_max_today: int = Field(
        default=20,
        ge=1,
        description="Max items to return for today's review queue / 本日の最大出題数",
    )

    # --- Strict mode ---
    strict_mode: bool = Field(
        default=True,
        description="Fail fast on missing/invalid configuration (disable only for tests)",
    )

    # - env_file: .env を読み込む
    # - extra: 未使用キーを無視
    # - case_sensitive: 環境変数キーの大小文字を区別しない
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: object) -> str:
        level = str(value or "INFO").strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"LOG_LEVEL must be a standard logging level name, got {value!r}")
        return level

    @field_validator("srs_store_backend", mode="before")
    @classmethod
    def _normalise_store_backend(cls, value: object) -> str:
        backend = str(value or "").strip().lower()
        if backend not in _STORE_BACKENDS:
            raise ValueError(f"SRS_STORE_BACKEND must be one of {sorted(_STORE_BACKENDS)}, got {value!r}")
        return backend

    @model_validator(mode="after")
    def _require_db_path_in_strict_mode(self) -> "Settings":
        # memory バックエンドは DB パスを使わないので検証しない
        if self.strict_mode and self.srs_store_backend == "sqlite" and not self.srs_db_path.strip():
            raise ValueError("SRS_DB_PATH must be set when STRICT_MODE=true and SRS_STORE_BACKEND=sqlite")
        return self


settings = Settings()
