# tests/conftest.py

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_tracker.core.state import AppState
from todo_tracker.tasks.task_store import TaskStore


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "todo_tracker.sqlite"


@pytest.fixture()
def store(db_path: Path) -> Iterator[TaskStore]:
    """A real SQLite-backed store per test; its correctness is what we test."""
    s = TaskStore(db_path)
    yield s
    s.close()


@pytest.fixture()
def state(tmp_path: Path, store: TaskStore) -> AppState:
    """
    AppState for command tests.

    SimpleNamespace instead of real config keeps tests isolated from the environment.
    """
    settings = SimpleNamespace(
        app_name="todo-tracker",
        log_level="WARNING",
        db_path=tmp_path / "todo_tracker.sqlite",
        log_path=tmp_path / "todo_tracker.log",
    )
    return AppState(settings=settings, store=store)
