# tests/helpers.py

from __future__ import annotations

import sqlite3
from pathlib import Path

from todo_tracker.tasks.task_models import TaskStatus
from todo_tracker.tasks.task_store import TaskStore


def titles(store: TaskStore, status: TaskStatus) -> list[str]:
    return [t.title for t in store.statuses[status].tasks]


def ranks(store: TaskStore, status: TaskStatus) -> list[int]:
    return [t.rank for t in store.statuses[status].tasks]


def durable_rows(db_path: Path) -> list[tuple[str, str, int]]:
    """(status, title, rank) straight from disk, ordered like the load path."""
    conn = sqlite3.connect(str(db_path))
    try:
        rows = conn.execute(
            """
            SELECT s.name, t.title, t.rank
            FROM task t JOIN status s ON s.id = t.status_id
            ORDER BY t.status_id, t.rank
            """
        ).fetchall()
    finally:
        conn.close()
    return [(str(a), str(b), int(c)) for a, b, c in rows]


def run_sql(db_path: Path, sql: str) -> None:
    """Apply DDL (e.g. a failure-injecting trigger) through a second connection."""
    conn = sqlite3.connect(str(db_path))
    try:
        conn.execute(sql)
        conn.commit()
    finally:
        conn.close()
