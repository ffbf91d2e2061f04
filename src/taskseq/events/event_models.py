# src/taskseq/events/event_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..queue.queue_models import QueueTask, TaskListView


class QueueEvent(StrEnum):
    """Channels the sequencer publishes on."""

    TASK_START = "task_start"
    TASK_SUCCESS = "task_success"
    TASK_FAILURE = "task_failure"

    QUEUE_START = "queue_start"
    QUEUE_PAUSE = "queue_pause"
    QUEUE_FINISH = "queue_finish"


@dataclass(frozen=True, slots=True)
class QueueSnapshot:
    """
    Payload of QUEUE_START / QUEUE_PAUSE / QUEUE_FINISH.

    waiting and finished are live read-only views, not copies: they show
    the lists as they are when the handler looks at them.
    """

    waiting: TaskListView
    finished: TaskListView


@dataclass(frozen=True, slots=True)
class TaskStarted:
    task: QueueTask
    waiting: TaskListView
    finished: TaskListView


@dataclass(frozen=True, slots=True)
class TaskSucceeded:
    task: QueueTask
    waiting: TaskListView
    finished: TaskListView
    result: Any


@dataclass(frozen=True, slots=True)
class TaskFailed:
    task: QueueTask
    waiting: TaskListView
    finished: TaskListView
    cause: BaseException


TaskEventPayload = TaskStarted | TaskSucceeded | TaskFailed
EventPayload = QueueSnapshot | TaskEventPayload
