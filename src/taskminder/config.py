# src/taskminder/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
- Nothing here opens files or databases; stores are built in cli/bootstrap.py.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKMINDER"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


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

    # ---- Scheduler ----
    shutdown_grace_seconds: float
    default_reminder_lead_minutes: int

    # ---- Connector flags ----
    console_enabled: bool
    console_bell: bool
    matrix_enabled: bool

    # ---- Matrix ----
    matrix_homeserver: str
    matrix_user_id: str
    matrix_password: str
    matrix_room_id: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path
    matrix_store_path: Path

    @staticmethod
    def from_env(*, load_env_file: bool = True) -> "Settings":
        if load_env_file:
            load_dotenv(override=False)

        app_name = _env(_k("APP_NAME"), "taskminder").strip() or "taskminder"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        shutdown_grace_seconds = max(0.0, _env_float(_k("SHUTDOWN_GRACE_SECONDS"), 60.0))
        default_reminder_lead_minutes = max(0, _env_int(_k("REMINDER_LEAD_MINUTES"), 15))

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)
        console_bell = _env_bool(_k("CONSOLE_BELL"), False)
        matrix_enabled = _env_bool(_k("MATRIX_ENABLED"), False)

        matrix_homeserver = _env(_k("MATRIX_HOMESERVER")).strip()
        matrix_user_id = _env(_k("MATRIX_USER_ID")).strip()
        matrix_password = _env(_k("MATRIX_PASSWORD")).strip()
        matrix_room_id = _env(_k("MATRIX_ROOM_ID")).strip()

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskminder"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")
        matrix_store_path = _env_path(_k("MATRIX_STORE_PATH"), data_dir / "matrix_store")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            shutdown_grace_seconds=shutdown_grace_seconds,
            default_reminder_lead_minutes=default_reminder_lead_minutes,
            console_enabled=console_enabled,
            console_bell=console_bell,
            matrix_enabled=matrix_enabled,
            matrix_homeserver=matrix_homeserver,
            matrix_user_id=matrix_user_id,
            matrix_password=matrix_password,
            matrix_room_id=matrix_room_id,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            matrix_store_path=matrix_store_path,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, read from the environment on first use."""
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
