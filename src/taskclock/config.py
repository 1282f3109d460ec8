# src/taskclock/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

- One Settings object for the whole app.
- Settings are injectable: bootstrap and tests can pass their own object.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKCLOCK"

STORAGE_BACKENDS = ("sqlite", "json", "memory")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


# Local .env never overrides variables already set in the environment.
load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Storage ----
    data_dir: Path
    storage_backend: str
    db_path: Path
    json_path: Path
    storage_key: str

    # ---- Timer ----
    tick_interval_seconds: float

    # ---- Console ----
    auto_render: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskclock")
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskclock"))

        storage_backend = _env(_k("STORAGE_BACKEND"), "sqlite").strip().lower()
        if storage_backend not in STORAGE_BACKENDS:
            storage_backend = "sqlite"

        db_path = _env_path(_k("DB_PATH"), data_dir / "tasks.sqlite3")
        json_path = _env_path(_k("JSON_PATH"), data_dir / "tasks.json")
        storage_key = _env(_k("STORAGE_KEY"), "todo-tasks").strip() or "todo-tasks"

        tick_interval_seconds = max(0.05, _env_float(_k("TICK_INTERVAL_SECONDS"), 1.0))

        auto_render = _env_bool(_k("AUTO_RENDER"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            storage_backend=storage_backend,
            db_path=db_path,
            json_path=json_path,
            storage_key=storage_key,
            tick_interval_seconds=tick_interval_seconds,
            auto_render=auto_render,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
