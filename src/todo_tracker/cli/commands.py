# src/todo_tracker/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.state import AppState
from ..tasks.errors import TrackerError
from ..tasks.task_models import MAX_CLOSED_TASKS, Task, TaskStatus

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /new, /move, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Store errors are turned into their message; the store guarantees that a
        failed operation changed nothing.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return handler(state, args)
        except TrackerError as e:
            logger.info("/%s failed: %s", name, e)
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _split_title(args: list[str]) -> tuple[str, str]:
    """'/new title words | description words' -> (title, description)."""
    title, _, description = " ".join(args).partition("|")
    return title.strip(), description.strip()


def _find_task(state: AppState, raw_id: str) -> Task | str:
    try:
        task_id = int(raw_id)
    except ValueError:
        return f"Invalid task id: {raw_id}"
    task = state.store.find_task(task_id)
    if task is None:
        return f"No task with id {task_id}."
    return task


def _format_task(task: Task) -> str:
    labels = ", ".join(lb.name for lb in task.labels)
    label_str = f"  [{labels}]" if labels else ""
    return f"  {task.rank + 1}. (#{task.id}) {task.title}{label_str}"


def _format_status(state: AppState, status: TaskStatus) -> list[str]:
    tasks = state.store.statuses[status].tasks
    header = f"{status.value} ({len(tasks)}/{MAX_CLOSED_TASKS})" if status == TaskStatus.CLOSED else status.value
    lines = [f"{header}:"]
    if not tasks:
        lines.append("  (empty)")
    lines.extend(_format_task(t) for t in tasks)
    return lines


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list          -> every status
    /list closed   -> one status
    """
    if args:
        try:
            statuses = [TaskStatus.parse(args[0])]
        except ValueError as e:
            return f"Error: {e}"
    else:
        statuses = list(TaskStatus)

    lines: list[str] = []
    for status in statuses:
        lines.extend(_format_status(state, status))
    return "\n".join(lines)


def cmd_new(state: AppState, args: list[str]) -> str:
    title, description = _split_title(args)
    task = state.store.new_task(title, description)
    return f"Added #{task.id} to open at position {task.rank + 1}."


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <id> <title>                  -> new title, description kept
    /edit <id> <title> | <description>  -> both replaced ("| " alone clears it)
    """
    if not args:
        return "Usage: /edit <id> <title> [| <description>]"
    found = _find_task(state, args[0])
    if isinstance(found, str):
        return found
    title, description = _split_title(args[1:])
    if "|" not in " ".join(args[1:]):
        description = found.description
    state.store.update_task(found, title, description)
    return f"Updated #{found.id}."


def cmd_move(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /move <id> <status>"
    found = _find_task(state, args[0])
    if isinstance(found, str):
        return found
    try:
        target = TaskStatus.parse(args[1])
    except ValueError as e:
        return f"Error: {e}"
    state.store.change_status(found, found.status, target)
    return f"Moved #{found.id} to {target.value} at position {found.rank + 1}."


def cmd_up(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /up <id>"
    found = _find_task(state, args[0])
    if isinstance(found, str):
        return found
    state.store.move_up(found)
    return f"#{found.id} is now at position {found.rank + 1} in {found.status.value}."


def cmd_down(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /down <id>"
    found = _find_task(state, args[0])
    if isinstance(found, str):
        return found
    state.store.move_down(found)
    return f"#{found.id} is now at position {found.rank + 1} in {found.status.value}."


def cmd_label(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /label <id> <label>"
    found = _find_task(state, args[0])
    if isinstance(found, str):
        return found
    state.store.add_task_label(found, state.store.get_label(args[1]))
    return f"Labelled #{found.id} with {args[1]}."


def cmd_unlabel(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /unlabel <id> <label>"
    found = _find_task(state, args[0])
    if isinstance(found, str):
        return found
    state.store.remove_task_label(found, state.store.get_label(args[1]))
    return f"Removed {args[1]} from #{found.id}."


def cmd_labels(state: AppState, args: list[str]) -> str:
    return "Labels: " + ", ".join(lb.name for lb in state.store.labels)


def cmd_newlabel(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /newlabel <name>"
    label = state.store.new_label(args[0])
    return f"Added label {label.name}."


def cmd_renamelabel(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /renamelabel <old> <new>"
    state.store.update_label(state.store.get_label(args[0]), args[1])
    return f"Renamed label {args[0]} to {args[1]}."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show tasks: /list [status].", aliases=["ls"])
registry.register("new", cmd_new, help_text="Add to open: /new <title> | <description>.")
registry.register("edit", cmd_edit, help_text="Edit: /edit <id> <title> [| <description>].")
registry.register(
    "move",
    cmd_move,
    help_text="Change status: /move <id> open|closed|on_hold|done|abandoned.",
    aliases=["mv"],
)
registry.register("up", cmd_up, help_text="Raise priority within its status: /up <id>.")
registry.register("down", cmd_down, help_text="Lower priority within its status: /down <id>.")
registry.register("label", cmd_label, help_text="Attach a label: /label <id> <label>.")
registry.register("unlabel", cmd_unlabel, help_text="Detach a label: /unlabel <id> <label>.")
registry.register("labels", cmd_labels, help_text="List known labels.")
registry.register("newlabel", cmd_newlabel, help_text="Create a label: /newlabel <name>.")
registry.register("renamelabel", cmd_renamelabel, help_text="Rename a label: /renamelabel <old> <new>.")
