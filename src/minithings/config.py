# src/minithings/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing is required at import time; every value has a local default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "MINITHINGS"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


# Local .env (gitignored) never overrides variables already set in the environment.
load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _parse_int(raw: str | None, default: int) -> int:
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
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

    # ---- HTTP server ----
    host: str
    port: int
    serve_ui: bool

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_dir: Path
    logbook_path: Path

    # ---- Behaviour ----
    seed_demo_tasks: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "minithings") or "minithings"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        host = _env(_k("HOST"), "127.0.0.1").strip() or "127.0.0.1"
        # Plain PORT is honored too (common for process managers / PaaS).
        port = _parse_int(_first_env(_k("PORT"), "PORT"), 3001)
        serve_ui = _env_bool(_k("SERVE_UI"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/minithings"))
        tasks_dir = _env_path(_k("TASKS_DIR"), data_dir / "tasks")
        logbook_path = _env_path(_k("LOGBOOK_PATH"), data_dir / "logbook" / "logbook.jsonl")

        seed_demo_tasks = _env_bool(_k("SEED_DEMO_TASKS"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            host=host,
            port=port,
            serve_ui=serve_ui,
            data_dir=data_dir,
            tasks_dir=tasks_dir,
            logbook_path=logbook_path,
            seed_demo_tasks=seed_demo_tasks,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
