# src/minithings/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from .ports import LogbookRepo, TaskRepo


@dataclass
class AppState:
    # Settings object (config.Settings or a test double with the same attributes).
    settings: object

    task_store: TaskRepo
    logbook: LogbookRepo
