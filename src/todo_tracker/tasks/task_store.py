# src/todo_tracker/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import TypeVar

from .errors import (
    CannotMoveFirstUp,
    CannotMoveLastDown,
    DuplicateLabel,
    EmptyTitle,
    FieldTooLong,
    IllegalTransition,
    InputError,
    MaxClosedReached,
    NilTask,
    NoStatusChange,
    StatusMismatch,
    StorageError,
    StorageUnavailable,
    UnknownLabel,
)
from .schema import ensure_schema
from .task_models import (
    MAX_DESCRIPTION_LENGTH,
    MAX_TITLE_LENGTH,
    Label,
    Status,
    Task,
    TaskStatus,
    is_transition_allowed,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TaskStore:
    """
    SQLite task store with an in-memory mirror.

    Everything is loaded into memory on open. Each status keeps its tasks in a
    list ordered by rank, and ranks are always 0..n-1 both on disk and in memory.

    Mutations go through _commit_then_apply(): the SQL runs in one transaction
    and the mirror is only touched after COMMIT succeeded. A failed operation
    leaves both sides exactly as they were.

    Thread-safety:
    - none; one control thread drives the store.
    """

    def __init__(self, db_path: str | Path = "todo_tracker.sqlite") -> None:
        self._db_path = Path(db_path)

        self.statuses: dict[TaskStatus, Status] = {}
        self.labels: list[Label] = []
        self.tasks: list[Task] = []

        try:
            self._conn = sqlite3.connect(str(self._db_path), isolation_level=None)
        except sqlite3.Error as e:
            raise StorageUnavailable(f"error connecting to sqlite db at {self._db_path}: {e}") from e

        try:
            self._conn.row_factory = sqlite3.Row
            self._configure_conn(self._conn)
            ensure_schema(self._conn)
            self._load()
        except StorageUnavailable:
            with contextlib.suppress(sqlite3.Error):
                self._conn.close()
            raise
        except sqlite3.Error as e:
            with contextlib.suppress(sqlite3.Error):
                self._conn.close()
            raise StorageUnavailable(f"error initializing task store at {self._db_path}: {e}") from e

        logger.info("TaskStore ready db=%s total=%s", self._db_path, len(self.tasks))

    def close(self) -> None:
        try:
            self._conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"error closing db: {e}") from e

    def __enter__(self) -> TaskStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ---- low-level helpers ----

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")

    def _rollback(self, context: str, err: BaseException) -> None:
        if not self._conn.in_transaction:
            return
        try:
            self._conn.execute("ROLLBACK")
        except sqlite3.Error as rb_err:
            raise StorageError(
                f"error rolling back transaction: '{rb_err}' after error {context}: {err}"
            ) from err

    @contextlib.contextmanager
    def _transaction(self, context: str) -> Iterator[sqlite3.Cursor]:
        cur = self._conn.cursor()
        try:
            cur.execute("BEGIN")
        except sqlite3.Error as e:
            raise StorageError(f"error opening transaction for {context}: {e}") from e

        try:
            yield cur
            cur.execute("COMMIT")
        except BaseException as e:
            self._rollback(context, e)
            if isinstance(e, sqlite3.Error):
                raise StorageError(f"error {context}: {e}") from e
            raise
        finally:
            cur.close()

    def _commit_then_apply(
        self,
        context: str,
        persist: Callable[[sqlite3.Cursor], T],
        apply: Callable[[T], None],
    ) -> None:
        """
        Run `persist` inside one transaction, then `apply` its result to the mirror.

        `apply` never runs if anything in `persist` or the COMMIT failed.
        """
        with self._transaction(context) as cur:
            result = persist(cur)
        apply(result)

    @staticmethod
    def _clean_fields(title: str, description: str | None) -> tuple[str, str]:
        title = (title or "").strip()
        description = description or ""
        if not title:
            raise EmptyTitle()
        if len(title) > MAX_TITLE_LENGTH:
            raise FieldTooLong("title", MAX_TITLE_LENGTH)
        if len(description) > MAX_DESCRIPTION_LENGTH:
            raise FieldTooLong("description", MAX_DESCRIPTION_LENGTH)
        return title, description

    def _owning_status(self, task: Task) -> Status:
        status = self.statuses[task.status]
        if not (0 <= task.rank < len(status.tasks)) or status.tasks[task.rank] is not task:
            if any(t is task for t in status.tasks):
                raise StatusMismatch(
                    f"task '{task.title}' has rank {task.rank} but {status.name} ranks "
                    "are not contiguous on disk"
                )
            raise StatusMismatch(f"task '{task.title}' is not at rank {task.rank} of {status.name}")
        return status

    # ---- loading ----

    def _load(self) -> None:
        self._load_labels()
        self._load_statuses()
        self._load_tasks()
        self._load_task_labels()
        self._check_ranks()

    def _load_labels(self) -> None:
        rows = self._conn.execute("SELECT id, name FROM label ORDER BY id").fetchall()
        self.labels = [Label(id=int(r["id"]), name=str(r["name"])) for r in rows]

    def _load_statuses(self) -> None:
        rows = self._conn.execute("SELECT id, name FROM status ORDER BY id").fetchall()
        for r in rows:
            try:
                name = TaskStatus.parse(r["name"])
            except ValueError as e:
                raise StorageUnavailable(f"error loading statuses from {self._db_path}: {e}") from e
            self.statuses[name] = Status(id=int(r["id"]), name=name)

        missing = [s.value for s in TaskStatus if s not in self.statuses]
        if missing:
            raise StorageUnavailable(
                f"error loading statuses from {self._db_path}: missing {', '.join(missing)}"
            )

    def _load_tasks(self) -> None:
        # Ordered by (status, rank): each list is rebuilt by appending, no re-sort.
        rows = self._conn.execute(
            """
            SELECT id, title, description, status_id, rank, created_at, updated_at
            FROM task
            ORDER BY status_id, rank
            """
        ).fetchall()

        by_id = {s.id: s for s in self.statuses.values()}
        for r in rows:
            status = by_id.get(int(r["status_id"]))
            if status is None:
                raise StorageUnavailable(
                    f"task {r['id']} references unknown status id {r['status_id']}"
                )
            task = Task(
                id=int(r["id"]),
                title=str(r["title"]),
                description=str(r["description"] or ""),
                status=status.name,
                rank=int(r["rank"]),
                created_at=float(r["created_at"] or 0.0),
                updated_at=float(r["updated_at"] or 0.0),
            )
            status.tasks.append(task)
            self.tasks.append(task)

    def _load_task_labels(self) -> None:
        # task_label.id is the insertion order of a task's labels.
        rows = self._conn.execute("SELECT task_id, label_id FROM task_label ORDER BY id").fetchall()

        tasks_by_id = {t.id: t for t in self.tasks}
        labels_by_id = {lb.id: lb for lb in self.labels}
        for r in rows:
            task = tasks_by_id.get(int(r["task_id"]))
            label = labels_by_id.get(int(r["label_id"]))
            if task is None or label is None:
                logger.warning(
                    "Skipping dangling task_label task_id=%s label_id=%s", r["task_id"], r["label_id"]
                )
                continue
            task.labels.append(label)

    def _check_ranks(self) -> None:
        for status in self.statuses.values():
            if not status.ranks_are_dense():
                stuck = [t.id for i, t in enumerate(status.tasks) if t.rank != i]
                logger.warning(
                    "Status %s has non-contiguous ranks on disk: %s; tasks %s cannot be "
                    "moved or reordered until their ranks are repaired",
                    status.name,
                    [t.rank for t in status.tasks],
                    stuck,
                )

    # ---- read model ----

    def status_of(self, task: Task) -> Status:
        return self.statuses[task.status]

    def find_task(self, task_id: int) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def get_label(self, name: str) -> Label:
        for label in self.labels:
            if label.name == name:
                return label
        raise UnknownLabel(name)

    def count_tasks(self) -> int:
        """Count rows on disk (the mirror is len(self.tasks))."""
        try:
            (n,) = self._conn.execute("SELECT COUNT(*) FROM task").fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"error counting tasks: {e}") from e
        return int(n)

    # ---- tasks ----

    def new_task(self, title: str, description: str | None = "") -> Task:
        """Create a task at the end of the open list."""
        title, description = self._clean_fields(title, description)

        open_status = self.statuses[TaskStatus.OPEN]
        now = time.time()
        task = Task(
            id=0,
            title=title,
            description=description,
            status=TaskStatus.OPEN,
            rank=len(open_status.tasks),
            created_at=now,
            updated_at=now,
        )

        def persist(cur: sqlite3.Cursor) -> int:
            cur.execute(
                """
                INSERT INTO task (title, description, status_id, rank, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (task.title, task.description, open_status.id, task.rank, now, now),
            )
            rowid = cur.lastrowid
            if rowid is None:
                raise StorageError(f"SQLite did not return lastrowid for task '{title}'")
            return int(rowid)

        def apply(task_id: int) -> None:
            task.id = task_id
            open_status.tasks.append(task)
            self.tasks.append(task)

        self._commit_then_apply(f"adding task '{title}'", persist, apply)
        logger.debug("Task added id=%s rank=%s title=%r", task.id, task.rank, task.title)
        return task

    def update_task(self, task: Task | None, title: str, description: str | None) -> None:
        if task is None:
            raise NilTask()
        title, description = self._clean_fields(title, description)
        now = time.time()

        def persist(cur: sqlite3.Cursor) -> None:
            cur.execute(
                "UPDATE task SET title = ?, description = ?, updated_at = ? WHERE id = ?",
                (title, description, now, task.id),
            )

        def apply(_: None) -> None:
            task.title = title
            task.description = description
            task.updated_at = now

        self._commit_then_apply(f"updating task '{task.title}'", persist, apply)
        logger.debug("Task updated id=%s", task.id)

    # ---- labels ----

    def new_label(self, name: str) -> Label:
        name = (name or "").strip()
        if not name:
            raise EmptyTitle("label name")

        def persist(cur: sqlite3.Cursor) -> int:
            try:
                cur.execute("INSERT INTO label (name) VALUES (?)", (name,))
            except sqlite3.IntegrityError as e:
                raise DuplicateLabel(f"error adding label '{name}': {e}") from e
            rowid = cur.lastrowid
            if rowid is None:
                raise StorageError(f"SQLite did not return lastrowid for label '{name}'")
            return int(rowid)

        label = Label(id=0, name=name)

        def apply(label_id: int) -> None:
            label.id = label_id
            self.labels.append(label)

        self._commit_then_apply(f"adding label '{name}'", persist, apply)
        logger.debug("Label added id=%s name=%r", label.id, label.name)
        return label

    def update_label(self, label: Label | None, name: str) -> None:
        if label is None:
            raise InputError("no label given")
        name = (name or "").strip()
        if not name:
            raise EmptyTitle("label name")

        def persist(cur: sqlite3.Cursor) -> None:
            try:
                cur.execute("UPDATE label SET name = ? WHERE id = ?", (name, label.id))
            except sqlite3.IntegrityError as e:
                raise DuplicateLabel(f"error renaming label '{label.name}' to '{name}': {e}") from e

        def apply(_: None) -> None:
            label.name = name

        self._commit_then_apply(f"renaming label '{label.name}'", persist, apply)

    def add_task_label(self, task: Task | None, label: Label | None) -> None:
        if task is None:
            raise NilTask()
        if label is None:
            raise InputError("no label given")

        def persist(cur: sqlite3.Cursor) -> None:
            try:
                cur.execute(
                    "INSERT INTO task_label (task_id, label_id) VALUES (?, ?)",
                    (task.id, label.id),
                )
            except sqlite3.IntegrityError as e:
                if "UNIQUE" not in str(e):
                    raise
                raise DuplicateLabel(
                    f"error adding label '{label.name}' to task '{task.title}': {e}"
                ) from e

        def apply(_: None) -> None:
            task.labels.append(label)

        self._commit_then_apply(f"adding label '{label.name}' to task '{task.title}'", persist, apply)
        logger.debug("Label %s added to task id=%s", label.name, task.id)

    def remove_task_label(self, task: Task | None, label: Label | None) -> None:
        if task is None:
            raise NilTask()
        if label is None:
            raise InputError("no label given")

        def persist(cur: sqlite3.Cursor) -> None:
            cur.execute(
                "DELETE FROM task_label WHERE task_id = ? AND label_id = ?",
                (task.id, label.id),
            )

        def apply(_: None) -> None:
            for i, lb in enumerate(task.labels):
                if lb.id == label.id:
                    del task.labels[i]
                    break

        self._commit_then_apply(
            f"removing label '{label.name}' from task '{task.title}'", persist, apply
        )
        logger.debug("Label %s removed from task id=%s", label.name, task.id)

    # ---- ordering ----

    def change_status(
        self,
        task: Task | None,
        old_status: TaskStatus | str,
        new_status: TaskStatus | str,
    ) -> None:
        """
        Move a task to the end of another status.

        Source ranks after the task shift down by one so both lists stay dense.
        """
        if task is None:
            raise NilTask()

        src = self.statuses[TaskStatus.parse(old_status)]
        dst = self.statuses[TaskStatus.parse(new_status)]

        if task.status != src.name:
            raise StatusMismatch(f"task '{task.title}' is in {task.status}, not {src.name}")
        self._owning_status(task)

        if src is dst:
            raise NoStatusChange()
        if dst.is_full():
            raise MaxClosedReached()
        if not is_transition_allowed(src.name, dst.name):
            raise IllegalTransition(src.name, dst.name)

        old_rank = task.rank
        new_rank = len(dst.tasks)
        below = src.tasks[old_rank + 1 :]
        now = time.time()

        def persist(cur: sqlite3.Cursor) -> None:
            cur.execute(
                "UPDATE task SET status_id = ?, rank = ?, updated_at = ? WHERE id = ?",
                (dst.id, new_rank, now, task.id),
            )
            cur.executemany(
                "UPDATE task SET rank = rank - 1 WHERE id = ?",
                [(t.id,) for t in below],
            )

        def apply(_: None) -> None:
            for t in below:
                t.rank -= 1
            del src.tasks[old_rank]
            dst.tasks.append(task)
            task.status = dst.name
            task.rank = len(dst.tasks) - 1
            task.updated_at = now

        self._commit_then_apply(
            f"moving task '{task.title}' from {src.name} to {dst.name}", persist, apply
        )
        logger.debug(
            "Task id=%s moved %s[%s] -> %s[%s]", task.id, src.name, old_rank, dst.name, task.rank
        )

    def move_up(self, task: Task | None) -> None:
        """Swap a task with the one right above it in the same status."""
        if task is None:
            raise NilTask()
        status = self._owning_status(task)
        if task.rank == 0:
            raise CannotMoveFirstUp()

        rank = task.rank
        above = status.tasks[rank - 1]

        def persist(cur: sqlite3.Cursor) -> None:
            cur.executemany(
                "UPDATE task SET rank = ? WHERE id = ?",
                [(rank - 1, task.id), (rank, above.id)],
            )

        def apply(_: None) -> None:
            status.tasks[rank - 1] = task
            status.tasks[rank] = above
            task.rank = rank - 1
            above.rank = rank

        self._commit_then_apply(f"moving task '{task.title}' up in {status.name}", persist, apply)
        logger.debug("Task id=%s moved up to rank %s in %s", task.id, task.rank, status.name)

    def move_down(self, task: Task | None) -> None:
        """Moving a task down is moving the task below it up."""
        if task is None:
            raise NilTask()
        status = self._owning_status(task)
        if task.rank >= len(status.tasks) - 1:
            raise CannotMoveLastDown()
        self.move_up(status.tasks[task.rank + 1])
