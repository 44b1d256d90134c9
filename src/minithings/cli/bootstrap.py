# src/minithings/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the concrete stores into AppState,
- seeds demo tasks into an empty task directory (optional).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..tasks.logbook_store import LogbookStore
from ..tasks.seed import SEED_TASKS
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_dir.mkdir(parents=True, exist_ok=True)
    settings.logbook_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    logbook = LogbookStore(settings.logbook_path)
    task_store = TaskStore(settings.tasks_dir, logbook)

    if getattr(settings, "seed_demo_tasks", False):
        task_store.seed_if_empty(SEED_TASKS)

    return AppState(settings=settings, task_store=task_store, logbook=logbook)
