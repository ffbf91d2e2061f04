"""
taskseq: run asynchronous tasks strictly one at a time, in submission order.

Components:
- queue/: TaskQueue (the sequencer), task/queue models and errors
- events/: NotificationHub and the lifecycle event payloads
- config.py / logging_setup.py: settings and logging for applications
- cli/: interactive console demo (`taskseq` command)
"""

from .events.event_models import QueueEvent, QueueSnapshot, TaskFailed, TaskStarted, TaskSucceeded
from .events.hub import NotificationHub, create_hub
from .queue.errors import QueueError, QueueRunningError, TaskExistsError
from .queue.queue_models import QueueOptions, QueueStatus, QueueTask, TaskListView, TaskStatus
from .queue.sequencer import TaskQueue

__all__ = [
    "NotificationHub",
    "QueueError",
    "QueueEvent",
    "QueueOptions",
    "QueueRunningError",
    "QueueSnapshot",
    "QueueStatus",
    "QueueTask",
    "TaskExistsError",
    "TaskFailed",
    "TaskListView",
    "TaskQueue",
    "TaskStarted",
    "TaskStatus",
    "TaskSucceeded",
    "create_hub",
]
