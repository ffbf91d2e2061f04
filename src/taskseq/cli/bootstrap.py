# src/taskseq/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- wires a NotificationHub and a TaskQueue into AppState,
- subscribes the console printers to every queue event.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..config import Settings, get_settings
from ..core.state import AppState
from ..events.event_models import QueueEvent, QueueSnapshot, TaskFailed, TaskStarted, TaskSucceeded
from ..events.hub import NotificationHub
from ..queue.sequencer import TaskQueue

logger = logging.getLogger(__name__)


def create_initial_state(*, settings: Settings | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    hub: NotificationHub[QueueEvent] = NotificationHub(max_subscribers=settings.max_subscribers)
    queue = TaskQueue(settings.queue_options(), hub=hub)
    return AppState(settings=settings, queue=queue)


def attach_event_printers(state: AppState, emit: Callable[[str], None]) -> list[Callable[[], None]]:
    """Print every queue event through emit. Returns the unsubscribe callables."""

    def _counts(payload: QueueSnapshot | TaskStarted | TaskSucceeded | TaskFailed) -> str:
        return f"waiting={len(payload.waiting)} finished={len(payload.finished)}"

    def on_task_start(p: TaskStarted) -> None:
        emit(f"[TASK] {p.task.id} start (attempt {p.task.attempts}, {_counts(p)})")

    def on_task_success(p: TaskSucceeded) -> None:
        emit(f"[TASK] {p.task.id} success: {p.result}")

    def on_task_failure(p: TaskFailed) -> None:
        emit(f"[TASK] {p.task.id} failure: {p.cause}")

    def on_queue_start(p: QueueSnapshot) -> None:
        emit(f"[QUEUE] start ({_counts(p)})")

    def on_queue_pause(p: QueueSnapshot) -> None:
        emit(f"[QUEUE] paused ({_counts(p)})")

    def on_queue_finish(p: QueueSnapshot) -> None:
        emit(f"[QUEUE] finished ({_counts(p)})")

    q = state.queue
    return [
        q.subscribe(QueueEvent.TASK_START, on_task_start),
        q.subscribe(QueueEvent.TASK_SUCCESS, on_task_success),
        q.subscribe(QueueEvent.TASK_FAILURE, on_task_failure),
        q.subscribe(QueueEvent.QUEUE_START, on_queue_start),
        q.subscribe(QueueEvent.QUEUE_PAUSE, on_queue_pause),
        q.subscribe(QueueEvent.QUEUE_FINISH, on_queue_finish),
    ]
