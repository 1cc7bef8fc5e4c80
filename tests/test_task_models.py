# tests/test_task_models.py

from __future__ import annotations

import itertools

import pytest

from todo_tracker.tasks.task_models import (
    FORBIDDEN_TRANSITIONS,
    MAX_CLOSED_TASKS,
    Status,
    Task,
    TaskStatus,
    is_transition_allowed,
)


def test_forbidden_pairs_are_exactly_the_known_ones() -> None:
    assert FORBIDDEN_TRANSITIONS == {
        (TaskStatus.CLOSED, TaskStatus.OPEN),
        (TaskStatus.OPEN, TaskStatus.DONE),
        (TaskStatus.ON_HOLD, TaskStatus.DONE),
    }


def test_every_other_pair_is_allowed() -> None:
    for src, dst in itertools.permutations(TaskStatus, 2):
        assert is_transition_allowed(src, dst) == ((src, dst) not in FORBIDDEN_TRANSITIONS)
    for s in TaskStatus:
        assert not is_transition_allowed(s, s)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("open", TaskStatus.OPEN),
        ("CLOSED", TaskStatus.CLOSED),
        ("on-hold", TaskStatus.ON_HOLD),
        ("on hold", TaskStatus.ON_HOLD),
        (TaskStatus.DONE, TaskStatus.DONE),
    ],
)
def test_parse_status(raw, expected) -> None:
    assert TaskStatus.parse(raw) is expected


def test_parse_unknown_status() -> None:
    with pytest.raises(ValueError):
        TaskStatus.parse("later")


def _task(rank: int, status: TaskStatus = TaskStatus.OPEN) -> Task:
    return Task(
        id=rank + 1,
        title=f"t{rank}",
        description="",
        status=status,
        rank=rank,
        created_at=0.0,
        updated_at=0.0,
    )


def test_only_closed_can_be_full() -> None:
    closed = Status(id=2, name=TaskStatus.CLOSED)
    opened = Status(id=1, name=TaskStatus.OPEN)
    for i in range(MAX_CLOSED_TASKS):
        closed.tasks.append(_task(i, TaskStatus.CLOSED))
        opened.tasks.append(_task(i))

    assert closed.is_full()
    assert not opened.is_full()


def test_ranks_are_dense() -> None:
    status = Status(id=1, name=TaskStatus.OPEN, tasks=[_task(0), _task(1)])
    assert status.ranks_are_dense()

    status.tasks.append(_task(3))
    assert not status.ranks_are_dense()
