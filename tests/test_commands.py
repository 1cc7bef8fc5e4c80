# tests/test_commands.py

from __future__ import annotations

from todo_tracker.cli.commands import CommandRegistry, registry
from todo_tracker.tasks.errors import NoStatusChange
from todo_tracker.tasks.task_models import TaskStatus


def test_command_registry_routes_and_aliases(state) -> None:
    reg = CommandRegistry()
    called = {"a": 0}

    def handler(state, args):
        called["a"] += 1
        return " ".join(args)

    reg.register("a", handler, "a", aliases=["x"])

    assert reg.handle(state, "/a one two") == "one two"
    assert reg.handle(state, "/X three") == "three"
    assert called["a"] == 2


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_store_errors_become_messages(state) -> None:
    reg = CommandRegistry()

    def boom(state, args):
        raise NoStatusChange()

    reg.register("boom", boom, "boom")
    assert reg.handle(state, "/boom") == "Error: cannot move a task from one status to itself"


def test_new_and_list(state) -> None:
    reply = registry.handle(state, "/new write report | quarterly numbers")
    assert reply is not None and reply.startswith("Added #")

    (task,) = state.store.tasks
    assert task.title == "write report"
    assert task.description == "quarterly numbers"

    listing = registry.handle(state, "/list open") or ""
    assert "write report" in listing
    assert "closed (0/5)" in (registry.handle(state, "/list") or "")


def test_move_and_policy_errors(state) -> None:
    registry.handle(state, "/new first")
    (task,) = state.store.tasks

    reply = registry.handle(state, f"/move {task.id} done")
    assert reply == "Error: cannot move a task from open to done"
    assert task.status == TaskStatus.OPEN

    reply = registry.handle(state, f"/move {task.id} closed")
    assert reply == f"Moved #{task.id} to closed at position 1."
    assert task.status == TaskStatus.CLOSED

    assert "unknown status" in (registry.handle(state, f"/move {task.id} someday") or "")
    assert registry.handle(state, "/move 999 closed") == "No task with id 999."
    assert registry.handle(state, "/move abc closed") == "Invalid task id: abc"


def test_up_down(state) -> None:
    registry.handle(state, "/new one")
    registry.handle(state, "/new two")
    one, two = state.store.tasks

    assert registry.handle(state, f"/up {one.id}") == "Error: cannot move the first task up"
    registry.handle(state, f"/up {two.id}")
    assert [t.title for t in state.store.statuses[TaskStatus.OPEN].tasks] == ["two", "one"]

    assert registry.handle(state, f"/down {one.id}") == "Error: cannot move the last task down"


def test_labels(state) -> None:
    registry.handle(state, "/new tagged")
    (task,) = state.store.tasks

    registry.handle(state, f"/label {task.id} urgent")
    assert [lb.name for lb in task.labels] == ["urgent"]

    reply = registry.handle(state, f"/label {task.id} urgent") or ""
    assert reply.startswith("Error: error adding label 'urgent'")

    assert registry.handle(state, f"/label {task.id} nope") == "Error: no label found with name 'nope'"

    registry.handle(state, "/newlabel busywork")
    assert "busywork" in (registry.handle(state, "/labels") or "")

    registry.handle(state, f"/unlabel {task.id} urgent")
    assert task.labels == []


def test_edit(state) -> None:
    registry.handle(state, "/new write report | due friday, include charts")
    (task,) = state.store.tasks

    assert registry.handle(state, f"/edit {task.id} write final report") == f"Updated #{task.id}."
    assert task.title == "write final report"
    assert task.description == "due friday, include charts"

    registry.handle(state, f"/edit {task.id} send report | to the whole team")
    assert task.title == "send report"
    assert task.description == "to the whole team"

    registry.handle(state, f"/edit {task.id} send report |")
    assert task.description == ""

    assert registry.handle(state, f"/edit {task.id} | only a description") == "Error: title cannot be empty"
    assert registry.handle(state, f"/edit {task.id}") == "Error: title cannot be empty"
    assert task.title == "send report"
    assert task.description == ""

    assert registry.handle(state, "/edit") == "Usage: /edit <id> <title> [| <description>]"
    assert registry.handle(state, "/edit 42 anything") == "No task with id 42."


def test_newlabel_and_renamelabel(state) -> None:
    assert registry.handle(state, "/newlabel busywork") == "Added label busywork."
    label = state.store.get_label("busywork")

    reply = registry.handle(state, "/newlabel busywork") or ""
    assert reply.startswith("Error: error adding label 'busywork'")

    assert registry.handle(state, "/renamelabel busywork chores") == "Renamed label busywork to chores."
    assert label.name == "chores"
    assert state.store.get_label("chores") is label

    assert registry.handle(state, "/renamelabel busywork x") == "Error: no label found with name 'busywork'"
    reply = registry.handle(state, "/renamelabel chores urgent") or ""
    assert reply.startswith("Error: error renaming label 'chores' to 'urgent'")
    assert label.name == "chores"
    assert registry.handle(state, "/renamelabel chores") == "Usage: /renamelabel <old> <new>"
