"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    """Read a positive integer from the environment, falling back on bad values."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "PayoffCast"
    DB_FILENAME = "payoffcast.db"
    LOG_FILENAME = "payoffcast.log"

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("PAYOFFCAST_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("PAYOFFCAST_DATABASE_URL", self._build_sqlite_url())
        self.DEFAULT_STRATEGY = os.getenv("PAYOFFCAST_DEFAULT_STRATEGY", "avalanche").strip().lower()
        self.HORIZON_YEARS = _env_int("PAYOFFCAST_HORIZON_YEARS", 5)
        self.SNAPSHOT_LOOKBACK_MONTHS = _env_int("PAYOFFCAST_LOOKBACK_MONTHS", 3)
        if self.DEFAULT_STRATEGY not in {"snowball", "avalanche"}:
            raise ValueError("PAYOFFCAST_DEFAULT_STRATEGY must be 'snowball' or 'avalanche'.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("PAYOFFCAST_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {}


class TestConfig(BaseConfig):
    """Configuration used by the test-suite; keeps the database in memory."""

    def __init__(self, data_dir: Path | None = None) -> None:
        super().__init__()
        if data_dir is not None:
            self.DATA_DIR = Path(data_dir)
        self.DATABASE_URL = "sqlite://"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Share one connection so every session sees the same in-memory database."""

        from sqlalchemy.pool import StaticPool

        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
