# src/taskminder/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..core.state import AppState
from ..errors import EmptyQueueError, InvalidArgumentError, RejectedSchedulingError, TaskminderError
from ..tasks import task_api
from ..tasks.task_models import TaskPriority, TaskRecord, TaskStatus
from .timeparse import parse_when

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

_TIME_FMT = "%Y-%m-%d %H:%M"


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

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

        Task errors are turned into a one-line reply; anything else propagates.
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
        except EmptyQueueError:
            return "No pending tasks."
        except RejectedSchedulingError:
            return "Scheduler is shutting down; no new reminders can be set."
        except TaskminderError as e:
            logger.debug("Command /%s failed: %s", name, e)
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def format_task(task: TaskRecord) -> str:
    return (
        f"{task.id[:8]}  [{task.priority.value:<6}] {task.status.value:<11} "
        f"due {task.due_time.strftime(_TIME_FMT)}  remind {task.reminder_time.strftime(_TIME_FMT)}  "
        f"{task.title}"
    )


def _require(args: list[str], n: int, usage: str) -> None:
    if len(args) < n:
        raise InvalidArgumentError(f"usage: {usage}")


def _completed_reply(task: TaskRecord) -> str:
    return f"Task {task.id[:8]} is completed; it has no reminder to move."


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <HIGH|MEDIUM|LOW> <due> [remind=<time>] <title...> [-- description...]
    """
    usage = "/add <HIGH|MEDIUM|LOW> <due> [remind=<time>] <title> [-- description]"
    _require(args, 3, usage)

    priority = TaskPriority.coerce(args[0])
    now = datetime.now()
    due = parse_when(args[1], now=now)

    rest = args[2:]
    reminder = None
    if rest and rest[0].lower().startswith("remind="):
        reminder = parse_when(rest[0].split("=", 1)[1], now=now)
        rest = rest[1:]

    if "--" in rest:
        cut = rest.index("--")
        title_words, desc_words = rest[:cut], rest[cut + 1 :]
    else:
        title_words, desc_words = rest, []

    title = " ".join(title_words).strip()
    if not title:
        raise InvalidArgumentError(f"usage: {usage}")

    task = task_api.add_task(
        state,
        title=title,
        description=" ".join(desc_words),
        due_time=due,
        reminder_time=reminder,
        priority=priority,
    )
    armed = state.scheduler.has_reminder(task)
    note = "" if armed else " (reminder time already passed: no reminder set)"
    return f"Added {format_task(task)}{note}"


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list      -> pending tasks in priority order
    /list all  -> every known task, including completed ones
    """
    if args and args[0].lower() == "all":
        tasks = sorted(state.tasks.values(), key=lambda t: t.sort_key())
        header = "All tasks:"
    else:
        tasks = state.scheduler.pending_tasks()
        header = "Pending tasks (highest priority first):"

    if not tasks:
        return "No tasks."
    return "\n".join([header] + [f"  {format_task(t)}" for t in tasks])


def cmd_next(state: AppState, args: list[str]) -> str:
    return f"Next: {format_task(state.scheduler.get_next_pending_task())}"


def cmd_start(state: AppState, args: list[str]) -> str:
    _require(args, 1, "/start <id>")
    task = task_api.find_task(state, args[0])
    if task_api.start_task(state, task):
        return f"Started {format_task(task)}"
    return f"Task {task.id[:8]} is {task.status.value}; only NOT_STARTED tasks can be started."


def cmd_done(state: AppState, args: list[str]) -> str:
    _require(args, 1, "/done <id>")
    task = task_api.find_task(state, args[0])
    if task.status == TaskStatus.COMPLETED:
        return f"Task {task.id[:8]} is already completed."
    task_api.complete_task(state, task)
    return f"Completed {format_task(task)}"


def cmd_snooze(state: AppState, args: list[str]) -> str:
    _require(args, 2, "/snooze <id> <minutes>")
    task = task_api.find_task(state, args[0])
    if task.is_completed:
        return _completed_reply(task)
    try:
        minutes = int(args[1])
    except ValueError:
        raise InvalidArgumentError("minutes must be a whole number") from None
    task_api.snooze_task(state, task, minutes)
    return f"Snoozed {task.id[:8]} until {task.reminder_time.strftime(_TIME_FMT)}"


def cmd_remind(state: AppState, args: list[str]) -> str:
    _require(args, 2, "/remind <id> <time>")
    task = task_api.find_task(state, args[0])
    if task.is_completed:
        return _completed_reply(task)
    when = parse_when(args[1])
    armed = task_api.reschedule_reminder(state, task, when)
    if not armed:
        return f"Reminder for {task.id[:8]} set to a past time; it will not fire."
    return f"Reminder for {task.id[:8]} set to {when.strftime(_TIME_FMT)}"


def cmd_cancel(state: AppState, args: list[str]) -> str:
    _require(args, 1, "/cancel <id>")
    task = task_api.find_task(state, args[0])
    if state.scheduler.cancel_reminder(task):
        return f"Reminder for {task.id[:8]} cancelled."
    return f"Task {task.id[:8]} has no pending reminder."


def cmd_priority(state: AppState, args: list[str]) -> str:
    _require(args, 2, "/priority <id> <HIGH|MEDIUM|LOW>")
    task = task_api.find_task(state, args[0])
    task_api.change_priority(state, task, args[1])
    return f"Priority of {task.id[:8]} is now {task.priority.value}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    _require(args, 1, "/delete <id>")
    task = task_api.find_task(state, args[0])
    task_api.delete_task(state, task)
    return f"Deleted {task.id[:8]} ({task.title})"


def cmd_status(state: AppState, args: list[str]) -> str:
    counts = {s: 0 for s in TaskStatus}
    for t in state.tasks.values():
        counts[t.status] += 1
    by_status = ", ".join(f"{s.value}={n}" for s, n in counts.items())
    armed = sum(1 for t in state.tasks.values() if state.scheduler.has_reminder(t))
    return (
        "Status:\n"
        f"  Queued: {len(state.scheduler)}\n"
        f"  Armed reminders: {armed}\n"
        f"  By status: {by_status}\n"
        f"  Scheduler: {'stopped' if state.scheduler.is_shut_down else 'running'}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add HIGH +2h [remind=+90m] Title words [-- description].",
)
registry.register("list", cmd_list, help_text="List pending tasks (/list all for everything).", aliases=["ls"])
registry.register("next", cmd_next, help_text="Show the highest-priority pending task.")
registry.register("start", cmd_start, help_text="Mark a task IN_PROGRESS: /start <id>.")
registry.register("done", cmd_done, help_text="Complete a task: /done <id>.")
registry.register("snooze", cmd_snooze, help_text="Move a reminder N minutes from now: /snooze <id> 10.")
registry.register("remind", cmd_remind, help_text="Set a reminder time: /remind <id> 14:30.")
registry.register("cancel", cmd_cancel, help_text="Cancel a task's pending reminder: /cancel <id>.")
registry.register("priority", cmd_priority, help_text="Change priority: /priority <id> LOW.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"])
registry.register("status", cmd_status, help_text="Show scheduler and task counts.")
