# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from minithings.api.server import create_app
from minithings.core.state import AppState
from minithings.tasks.logbook_store import LogbookStore
from minithings.tasks.task_store import TaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="minithings-test",
        log_level="DEBUG",
        host="127.0.0.1",
        port=0,
        # Paths (tmp per test run)
        data_dir=tmp_path,
        tasks_dir=tmp_path / "tasks",
        logbook_path=tmp_path / "logbook" / "logbook.jsonl",
        # Features
        serve_ui=False,
        seed_demo_tasks=False,
    )


@pytest.fixture()
def logbook(settings: SimpleNamespace) -> LogbookStore:
    return LogbookStore(settings.logbook_path)


@pytest.fixture()
def task_store(settings: SimpleNamespace, logbook: LogbookStore) -> TaskStore:
    return TaskStore(settings.tasks_dir, logbook)


@pytest.fixture()
def state(settings: SimpleNamespace, task_store: TaskStore, logbook: LogbookStore) -> AppState:
    """
    AppState wired with the real file-backed stores.

    Their on-disk behaviour is part of what we want to test.
    """
    return AppState(settings=settings, task_store=task_store, logbook=logbook)


@pytest.fixture()
def client(state: AppState) -> TestClient:
    return TestClient(create_app(state))
