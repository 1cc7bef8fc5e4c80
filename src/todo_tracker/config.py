# src/todo_tracker/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Every location has a default under the user's home directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TT"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


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

    # ---- Local data paths ----
    db_path: Path
    log_path: Path

    @staticmethod
    def from_env() -> "Settings":
        home = Path.home()

        app_name = _env(_k("APP_NAME"), "todo-tracker")
        log_level = _env(_k("LOG_LEVEL"), "WARNING").strip().upper() or "WARNING"

        db_path = _env_path(_k("DB_FILENAME"), home / ".todo_tracker.sqlite")
        log_path = _env_path(_k("LOG_FILENAME"), home / ".todo_tracker.log")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            db_path=db_path,
            log_path=log_path,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
