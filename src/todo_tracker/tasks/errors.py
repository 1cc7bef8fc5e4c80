# src/todo_tracker/tasks/errors.py

"""
Error kinds raised by the task store.

Three families:
- InputError: bad arguments, rejected before any I/O.
- PolicyError: the move is well-formed but the lifecycle rules forbid it.
- StorageError: SQLite failed; the message carries the operation context.

Callers can match either the family or the concrete class.
"""

from __future__ import annotations

from .task_models import MAX_CLOSED_TASKS


class TrackerError(Exception):
    """Base class for everything the store raises on purpose."""


# ---- input validation ----


class InputError(TrackerError, ValueError):
    pass


class EmptyTitle(InputError):
    def __init__(self, what: str = "title") -> None:
        super().__init__(f"{what} cannot be empty")


class FieldTooLong(InputError):
    def __init__(self, what: str, limit: int) -> None:
        super().__init__(f"{what} is longer than {limit} characters")
        self.limit = limit


class NilTask(InputError):
    def __init__(self) -> None:
        super().__init__("no task given")


class DuplicateLabel(InputError):
    pass


class UnknownLabel(InputError):
    def __init__(self, name: str) -> None:
        super().__init__(f"no label found with name '{name}'")
        self.name = name


class StatusMismatch(InputError):
    pass


# ---- lifecycle policy ----


class PolicyError(TrackerError):
    pass


class NoStatusChange(PolicyError):
    def __init__(self) -> None:
        super().__init__("cannot move a task from one status to itself")


class MaxClosedReached(PolicyError):
    def __init__(self) -> None:
        super().__init__(
            f"there are already {MAX_CLOSED_TASKS} closed tasks. "
            "Complete or abandon something before starting something new"
        )


class IllegalTransition(PolicyError):
    def __init__(self, src: str, dst: str) -> None:
        super().__init__(f"cannot move a task from {src} to {dst}")
        self.src = src
        self.dst = dst


class CannotMoveFirstUp(PolicyError):
    def __init__(self) -> None:
        super().__init__("cannot move the first task up")


class CannotMoveLastDown(PolicyError):
    def __init__(self) -> None:
        super().__init__("cannot move the last task down")


# ---- storage ----


class StorageError(TrackerError, RuntimeError):
    pass


class StorageUnavailable(StorageError):
    pass
