# src/taskseq/queue/errors.py

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .queue_models import QueueTask


class QueueError(Exception):
    """Base class for errors raised by TaskQueue operations."""


class TaskExistsError(QueueError):
    """A task with the same id is already tracked (waiting, in flight or finished)."""

    def __init__(self, task: QueueTask) -> None:
        super().__init__(
            f"task {task.id!r} is already tracked (status={task.status.value}); "
            "enable remove_after_finish, or retry/reset it instead of submitting again"
        )
        self.task = task


class QueueRunningError(QueueError):
    """The operation needs a queue that is not running."""

    def __init__(self, message: str = "queue is running; pause it or let it finish first") -> None:
        super().__init__(message)
