# src/todo_tracker/tasks/schema.py

"""
Durable schema for the task store.

The script is idempotent: tables are created only when missing and seed rows
use INSERT OR IGNORE with fixed ids, so it is safe to run on every start.
"""

from __future__ import annotations

import logging
import sqlite3

from .task_models import TaskStatus

logger = logging.getLogger(__name__)

# Fixed ids: status rows are referenced by id from task.status_id.
SEED_STATUSES: tuple[TaskStatus, ...] = (
    TaskStatus.OPEN,
    TaskStatus.CLOSED,
    TaskStatus.ON_HOLD,
    TaskStatus.DONE,
    TaskStatus.ABANDONED,
)

SEED_LABELS: tuple[str, ...] = (
    "task",
    "learning",
    "human_interaction",
    "urgent",
    "platform_learning",
    "personal_growth",
    "environment_setup",
    "planning/design",
    "onboarding",
)

_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS status (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name VARCHAR(20) UNIQUE NOT NULL
);

CREATE TABLE IF NOT EXISTS label (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name VARCHAR(20) UNIQUE NOT NULL
);

CREATE TABLE IF NOT EXISTS task (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title VARCHAR(255) NOT NULL,
    description VARCHAR(1023) NOT NULL DEFAULT '',
    status_id SMALLINT NOT NULL,
    rank INT NOT NULL,
    created_at REAL NOT NULL,
    updated_at REAL NOT NULL,
    FOREIGN KEY (status_id) REFERENCES status(id)
);

CREATE INDEX IF NOT EXISTS idx_task_status_rank ON task(status_id, rank);

CREATE TABLE IF NOT EXISTS task_label (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    task_id INTEGER NOT NULL,
    label_id INTEGER NOT NULL,
    FOREIGN KEY (task_id) REFERENCES task(id),
    FOREIGN KEY (label_id) REFERENCES label(id),
    UNIQUE(task_id, label_id)
);
"""


def _seed_sql() -> str:
    statuses = ",\n    ".join(f"({i}, '{s.value}')" for i, s in enumerate(SEED_STATUSES, start=1))
    labels = ",\n    ".join(f"({i}, '{name}')" for i, name in enumerate(SEED_LABELS, start=1))
    return (
        f"INSERT OR IGNORE INTO status (id, name) VALUES\n    {statuses};\n\n"
        f"INSERT OR IGNORE INTO label (id, name) VALUES\n    {labels};\n"
    )


SCHEMA_SQL = _TABLES_SQL + "\n" + _seed_sql()


def ensure_schema(conn: sqlite3.Connection) -> None:
    """Create tables and seed rows if absent. sqlite3.Error propagates to the caller."""
    conn.executescript(SCHEMA_SQL)
    logger.debug("Schema ensured (%d statuses, %d seed labels)", len(SEED_STATUSES), len(SEED_LABELS))
