# src/taskseq/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import cast

from ..core.state import AppState
from ..queue.errors import QueueRunningError, TaskExistsError
from ..queue.queue_models import TaskListView
from .demo_tasks import make_simulated_task

CommandEmitter = Callable[[str], None]
CommandResult = str | Awaitable[str]
CommandHandler2 = Callable[[AppState, list[str]], CommandResult]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], CommandResult]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Slash-command registry used by the console demo (/help, /push, /pause, ...)."""

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

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        Handlers may be plain functions or coroutines.
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
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            result = cast(CommandHandler3, handler)(state, args, emit)
        else:
            result = cast(CommandHandler2, handler)(state, args)

        if inspect.isawaitable(result):
            return await result
        return result

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("  /exit - Quit.")
        return "\n".join(lines)


registry = CommandRegistry()


def _format_list(title: str, tasks: TaskListView) -> list[str]:
    if not tasks:
        return [f"  {title}: (empty)"]
    lines = [f"  {title}:"]
    for t in tasks:
        lines.append(f"    {t.id} [{t.status.value}] attempts={t.attempts}")
    return lines


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    q = state.queue
    opts = q.options
    stalled = " (stalled after a failure, use /retry)" if q.is_stalled() else ""
    return (
        "Status:\n"
        f"  Queue: {q.status.value}{stalled}\n"
        f"  Waiting / in flight / finished: {len(q.waiting)} / {len(q.in_flight)} / {len(q.finished)}\n"
        f"  Options: immediate={opts.immediate} remove_after_finish={opts.remove_after_finish} "
        f"continue_when_error={opts.continue_when_error}"
    )


def cmd_list(state: AppState, args: list[str]) -> str:
    q = state.queue
    lines = ["Tasks:"]
    lines += _format_list("waiting", q.waiting)
    lines += _format_list("in flight", q.in_flight)
    lines += _format_list("finished", q.finished)
    return "\n".join(lines)


def cmd_push(state: AppState, args: list[str]) -> str:
    """
    /push            -> one task
    /push 5          -> five tasks
    /push 5 fail     -> five tasks, the last one fails on its first attempt
    """
    count = 1
    fail = False
    for arg in args:
        if arg.lower() == "fail":
            fail = True
        elif arg.isdigit():
            count = max(1, int(arg))
        else:
            return "Usage: /push [count] [fail]"

    settings = state.settings
    pushed: list[str] = []
    for i in range(count):
        task_id = state.new_task_id()
        body = make_simulated_task(
            task_id,
            min_ms=settings.demo_min_duration_ms,
            max_ms=settings.demo_max_duration_ms,
            fail=fail and i == count - 1,
        )
        try:
            state.queue.submit(task_id, body)
        except TaskExistsError as e:
            logger.warning("%s", e)
            continue
        pushed.append(f"{task_id} ({body.duration_ms} ms{', fails' if body.fail else ''})")

    return "Pushed: " + ", ".join(pushed) if pushed else "Nothing pushed."


def cmd_exec(state: AppState, args: list[str]) -> str:
    q = state.queue
    if q.is_running() and q.in_flight:
        return "Queue is already running."
    q.exec()
    return f"Queue is {q.status.value}."


def cmd_pause(state: AppState, args: list[str]) -> str:
    q = state.queue
    if not q.is_running():
        return f"Queue is {q.status.value}; nothing to pause."
    state.spawn(q.pause())
    return "Pausing after the current task settles..."


def cmd_resume(state: AppState, args: list[str]) -> str:
    q = state.queue
    if not q.is_pause():
        return f"Queue is {q.status.value}; only a paused queue can resume."
    q.resume()
    return "Resumed."


def cmd_retry(state: AppState, args: list[str]) -> str:
    """
    /retry all   -> retry every failed task
    /retry <id>  -> retry one task
    """
    q = state.queue
    if not args:
        return "Usage: /retry all | /retry <id>"

    if args[0].lower() == "all":
        failed = [t.id for t in q.finished if q.is_failure_task(t)]
        if not failed:
            return "No failed tasks to retry."
        q.retry_all()
        return "Retrying: " + ", ".join(failed)

    task = q.find_task_by_id(args[0])
    if task is None:
        return f"No such task: {args[0]}"
    if task not in q.finished:
        return f"Task {task.id} is {task.status.value}; only finished tasks can be retried."
    q.retry(task)
    return f"Retrying: {task.id}"


def cmd_reset(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    q = state.queue

    def _rejected(error: QueueRunningError) -> None:
        if emit:
            emit(f"[QUEUE] {error}")

    try:
        q.reset(_rejected)
    except QueueRunningError:
        return "Reset refused: /pause first."
    return f"Reset: {len(q.waiting)} task(s) waiting."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show queue status and options.")
registry.register("list", cmd_list, help_text="List waiting / in-flight / finished tasks.", aliases=["ls"])
registry.register("push", cmd_push, help_text="Submit simulated tasks: /push [count] [fail].")
registry.register("exec", cmd_exec, help_text="Start the queue.", aliases=["run", "start"])
registry.register("pause", cmd_pause, help_text="Pause after the current task.")
registry.register("resume", cmd_resume, help_text="Resume a paused queue.")
registry.register("retry", cmd_retry, help_text="Retry failed tasks: /retry all | /retry <id>.")
registry.register("reset", cmd_reset, help_text="Move finished tasks back to waiting.")
