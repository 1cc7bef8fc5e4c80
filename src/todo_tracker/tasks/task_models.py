# src/todo_tracker/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

MAX_CLOSED_TASKS = 5

MAX_TITLE_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 1023


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Notes:
    - the value is the stable key stored in the status table.
    - "closed" is the actively committed list and is capped at MAX_CLOSED_TASKS.
    """

    OPEN = "open"
    CLOSED = "closed"
    ON_HOLD = "on_hold"
    DONE = "done"
    ABANDONED = "abandoned"

    @classmethod
    def parse(cls, raw: str | TaskStatus) -> TaskStatus:
        if isinstance(raw, cls):
            return raw
        key = str(raw or "").strip().lower().replace("-", "_").replace(" ", "_")
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"unknown status: {raw!r}") from None


# A task must pass through "closed" to reach "done".
FORBIDDEN_TRANSITIONS: frozenset[tuple[TaskStatus, TaskStatus]] = frozenset(
    {
        (TaskStatus.CLOSED, TaskStatus.OPEN),
        (TaskStatus.OPEN, TaskStatus.DONE),
        (TaskStatus.ON_HOLD, TaskStatus.DONE),
    }
)


def is_transition_allowed(src: TaskStatus, dst: TaskStatus) -> bool:
    return src != dst and (src, dst) not in FORBIDDEN_TRANSITIONS


@dataclass(eq=False, slots=True)
class Label:
    id: int
    name: str


@dataclass(eq=False, slots=True)
class Task:
    """
    A single tracked task.

    `status` is a key into TaskStore.statuses, not an owning reference.
    `rank` is the zero-based position inside that status; lower is more important.
    """

    id: int
    title: str
    description: str
    status: TaskStatus
    rank: int
    created_at: float
    updated_at: float
    labels: list[Label] = field(default_factory=list)

    def has_label(self, label: Label) -> bool:
        return any(lb.id == label.id for lb in self.labels)


@dataclass(eq=False, slots=True)
class Status:
    id: int
    name: TaskStatus
    tasks: list[Task] = field(default_factory=list)

    def is_full(self) -> bool:
        return self.name == TaskStatus.CLOSED and len(self.tasks) >= MAX_CLOSED_TASKS

    def ranks_are_dense(self) -> bool:
        return all(t.rank == i for i, t in enumerate(self.tasks))
