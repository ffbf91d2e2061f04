# src/taskseq/queue/sequencer.py

from __future__ import annotations

"""
Task sequencer.

Runs submitted tasks strictly one at a time, in submission order, on the
running asyncio loop. Tasks move through three lists:

- waiting:   submitted, not started yet (FIFO, this is the execution order)
- in flight: the one task currently running (never more than one)
- finished:  settled tasks, kept for dedup/retry unless remove_after_finish

Every step runs in its own loop task: when a task settles, its own
coroutine starts the next one, so long queues do not grow the call stack.

Lifecycle notifications go out through a NotificationHub (see QueueEvent).
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ..core.ports import TaskBody
from ..events.event_models import QueueEvent, QueueSnapshot, TaskFailed, TaskStarted, TaskSucceeded
from ..events.hub import NotificationHub
from .errors import QueueRunningError, TaskExistsError
from .queue_models import (
    QueueOptions,
    QueueStatus,
    QueueTask,
    TaskListView,
    TaskStatus,
    as_body,
)

logger = logging.getLogger(__name__)

SubmitRejected = Callable[[TaskExistsError, QueueTask], None]
ResetRejected = Callable[[QueueRunningError], None]
BodyLike = TaskBody | Callable[[QueueTask], Awaitable[Any]]


class TaskQueue:
    def __init__(
        self,
        options: QueueOptions | None = None,
        *,
        hub: NotificationHub[QueueEvent] | None = None,
    ) -> None:
        self._options = options if options is not None else QueueOptions()
        self.hub: NotificationHub[QueueEvent] = hub if hub is not None else NotificationHub()

        self._waiting: list[QueueTask] = []
        self._in_flight: list[QueueTask] = []
        self._finished: list[QueueTask] = []

        self._waiting_view = TaskListView(self._waiting)
        self._in_flight_view = TaskListView(self._in_flight)
        self._finished_view = TaskListView(self._finished)

        self._status = QueueStatus.WAITING

    # ---- configuration / views ----

    @property
    def options(self) -> QueueOptions:
        return self._options

    def replace_options(self, options: QueueOptions) -> None:
        """Swap the whole option set. There is no partial update."""
        if not isinstance(options, QueueOptions):
            raise TypeError(f"expected QueueOptions, got {type(options).__name__}")
        self._options = options

    @property
    def status(self) -> QueueStatus:
        return self._status

    @property
    def waiting(self) -> TaskListView:
        return self._waiting_view

    @property
    def in_flight(self) -> TaskListView:
        return self._in_flight_view

    @property
    def finished(self) -> TaskListView:
        return self._finished_view

    # ---- queue status ----

    def is_running(self) -> bool:
        return self._status is QueueStatus.RUNNING

    def is_pause(self) -> bool:
        return self._status is QueueStatus.PAUSE

    def is_before_pause(self) -> bool:
        # pause requested, waiting for the in-flight task to settle
        return self._status is QueueStatus.BEFORE_PAUSE

    def is_waiting(self) -> bool:
        return self._status is QueueStatus.WAITING

    def is_finished(self) -> bool:
        return self._status is QueueStatus.FINISH

    def is_stalled(self) -> bool:
        """RUNNING with nothing in flight: a failed task halted the chain."""
        return self.is_running() and not self._in_flight

    # ---- task status ----

    @staticmethod
    def is_waiting_task(task: QueueTask) -> bool:
        return task.status is TaskStatus.WAITING

    @staticmethod
    def is_running_task(task: QueueTask) -> bool:
        return task.status is TaskStatus.PENDING

    @staticmethod
    def is_success_task(task: QueueTask) -> bool:
        return task.status is TaskStatus.SUCCESS

    @staticmethod
    def is_failure_task(task: QueueTask) -> bool:
        return task.status is TaskStatus.FAILURE

    # ---- lookup ----

    def find_task_by_id(self, task_id: str) -> QueueTask | None:
        for tasks in (self._waiting, self._in_flight, self._finished):
            for task in tasks:
                if task.id == task_id:
                    return task
        return None

    def is_exist(self, task_id: str) -> bool:
        return self.find_task_by_id(task_id) is not None

    def remove_from_waiting(self, task: QueueTask | str) -> None:
        _remove(self._waiting, task)

    def remove_from_in_flight(self, task: QueueTask | str) -> None:
        _remove(self._in_flight, task)

    def remove_from_finished(self, task: QueueTask | str) -> None:
        _remove(self._finished, task)

    # ---- subscriptions (delegated to the hub) ----

    def subscribe(self, event: QueueEvent, handler: Callable[[Any], Any]) -> Callable[[], None]:
        return self.hub.subscribe(event, handler)

    def once(self, event: QueueEvent, handler: Callable[[Any], Any]) -> Callable[[], None]:
        return self.hub.once(event, handler)

    def unsubscribe(self, event: QueueEvent, handler: Callable[[Any], Any] | None = None) -> None:
        self.hub.unsubscribe(event, handler)

    # ---- operations ----

    def submit(
        self,
        task_id: str,
        body: BodyLike,
        on_rejected: SubmitRejected | None = None,
    ) -> QueueTask:
        """
        Append a new task to the waiting list.

        An id that is already tracked (waiting, in flight or finished) is
        rejected: on_rejected(error, existing_task) is called if given, then
        TaskExistsError is raised. Nothing is enqueued in that case.

        With options.immediate, an idle queue (never run, or finished)
        starts right away.
        """
        existing = self.find_task_by_id(task_id)
        if existing is not None:
            error = TaskExistsError(existing)
            logger.debug("Rejected duplicate task id=%s (status=%s)", task_id, existing.status.value)
            if on_rejected is not None:
                on_rejected(error, existing)
            raise error

        task = QueueTask(id=task_id, body=as_body(body))
        start = self._options.immediate and self._status in (QueueStatus.WAITING, QueueStatus.FINISH)
        if start:
            asyncio.get_running_loop()  # raises before the task is enqueued

        self._waiting.append(task)
        logger.debug("Task %s submitted (waiting=%d)", task_id, len(self._waiting))

        if start:
            self.exec()
        return task

    def exec(self) -> None:
        """
        Start (or restart) the chain. Must be called with a running event loop.

        - RUNNING with a task in flight: no-op, logs a warning.
        - RUNNING with nothing in flight (stalled after a failure): picks up
          the next waiting task without publishing QUEUE_START again.
        - BEFORE_PAUSE: withdraws the pending pause request.
        - otherwise: RUNNING, QUEUE_START, first step.
        """
        asyncio.get_running_loop()  # raises before any state changes

        if self.is_running():
            if self._in_flight:
                logger.warning("Task queue is already running")
                return
            logger.info("Restarting stalled task queue (waiting=%d)", len(self._waiting))
            self._advance()
            return

        if self.is_before_pause():
            logger.debug("Pause request withdrawn")
            self._status = QueueStatus.RUNNING
            if not self._in_flight:
                self._advance()
            return

        self._status = QueueStatus.RUNNING
        logger.debug("Task queue started (waiting=%d)", len(self._waiting))
        self._publish_queue(QueueEvent.QUEUE_START)
        self._advance()

    async def pause(self) -> None:
        """
        Let the in-flight task settle, then stop before the next one.

        Ends in PAUSE, or in FINISH when nothing is left waiting. Never
        interrupts a started task. Do not await this from inside a task body
        of the same queue: it waits for that very task.
        """
        if not self.is_running():
            return

        self._status = QueueStatus.BEFORE_PAUSE
        logger.debug("Pause requested (in_flight=%d)", len(self._in_flight))

        pending = [t.outcome for t in self._in_flight if t.outcome is not None]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        if not self.is_before_pause():
            # exec() withdrew the request while we were waiting
            return

        if not self._waiting:
            self._status = QueueStatus.FINISH
            self._publish_queue(QueueEvent.QUEUE_FINISH)
        else:
            self._status = QueueStatus.PAUSE
            logger.debug("Task queue paused (waiting=%d)", len(self._waiting))
            self._publish_queue(QueueEvent.QUEUE_PAUSE)

    def resume(self) -> None:
        if not self.is_pause():
            return
        self.exec()

    def retry(self, task: QueueTask) -> None:
        """Move task from finished (if there) to the tail of waiting and run the queue."""
        if any(t is task or t.id == task.id for t in (*self._waiting, *self._in_flight)):
            logger.warning("Task %s is already waiting or running; retry ignored", task.id)
            return

        self.remove_from_finished(task)
        task.status = TaskStatus.WAITING
        self._waiting.append(task)
        logger.debug("Task %s queued for retry", task.id)
        self.exec()

    def retry_all(self) -> None:
        """Retry every failed task; finished keeps only the successful ones."""
        failed = [t for t in self._finished if t.status is TaskStatus.FAILURE]
        self._finished[:] = [t for t in self._finished if t.status is TaskStatus.SUCCESS]
        for task in failed:
            self.retry(task)

    def reset(self, on_rejected: ResetRejected | None = None) -> None:
        """
        Put finished tasks back at the tail of waiting, all marked WAITING.

        Refused while RUNNING: on_rejected(error) is called if given, then
        QueueRunningError is raised. The queue status is left as it is.
        """
        if self.is_running():
            error = QueueRunningError()
            if on_rejected is not None:
                on_rejected(error)
            raise error

        self._waiting.extend(self._finished)
        self._finished.clear()
        for task in self._waiting:
            task.status = TaskStatus.WAITING
        logger.debug("Task queue reset (waiting=%d)", len(self._waiting))

    async def join(self) -> None:
        """
        Wait until nothing is in flight: finished, paused, or stalled after a failure.

        Only the in-flight list is watched, not the queue status: a pause
        requested meanwhile may still read BEFORE_PAUSE when this returns,
        until the pausing coroutine gets to run.
        """
        while self._in_flight:
            pending = [t.outcome for t in self._in_flight if t.outcome is not None and not t.outcome.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    # ---- engine ----

    def _advance(self) -> None:
        if self.is_before_pause():
            return

        if not self._waiting:
            self._status = QueueStatus.FINISH
            logger.debug("Task queue finished (finished=%d)", len(self._finished))
            self._publish_queue(QueueEvent.QUEUE_FINISH)
            return

        task = self._waiting.pop(0)
        self._in_flight.append(task)
        task.status = TaskStatus.PENDING
        task.attempts += 1
        self.hub.publish(
            QueueEvent.TASK_START,
            TaskStarted(task=task, waiting=self.waiting, finished=self.finished),
        )
        task.outcome = asyncio.get_running_loop().create_task(
            self._run(task), name=f"taskseq:{task.id}"
        )
        task.outcome.add_done_callback(lambda outcome: self._on_outcome_done(task, outcome))

    def _on_outcome_done(self, task: QueueTask, outcome: asyncio.Task[None]) -> None:
        # Cancelled before its first step: _run never entered its try block.
        if outcome.cancelled() and any(t is task for t in self._in_flight):
            self._fail(task, asyncio.CancelledError())
            self._settle(task, advance=False)

    async def _run(self, task: QueueTask) -> None:
        try:
            result = await task.body.run(task)
        except asyncio.CancelledError as exc:
            # Cancelled from outside: record it, but do not start anything else.
            self._fail(task, exc)
            self._settle(task, advance=False)
            raise
        except Exception as exc:
            self._fail(task, exc)
            self._settle(task, advance=self._options.continue_when_error)
        else:
            task.status = TaskStatus.SUCCESS
            logger.debug("Task %s succeeded", task.id)
            self.hub.publish(
                QueueEvent.TASK_SUCCESS,
                TaskSucceeded(task=task, waiting=self.waiting, finished=self.finished, result=result),
            )
            self._settle(task, advance=True)

    def _fail(self, task: QueueTask, exc: BaseException) -> None:
        task.status = TaskStatus.FAILURE
        logger.info("Task %s failed: %r", task.id, exc)
        self.hub.publish(
            QueueEvent.TASK_FAILURE,
            TaskFailed(task=task, waiting=self.waiting, finished=self.finished, cause=exc),
        )

    def _settle(self, task: QueueTask, *, advance: bool) -> None:
        if not self._options.remove_after_finish:
            self._finished.append(task)
        _remove(self._in_flight, task)
        if advance:
            self._advance()

    def _publish_queue(self, event: QueueEvent) -> None:
        self.hub.publish(event, QueueSnapshot(waiting=self.waiting, finished=self.finished))


def _remove(tasks: list[QueueTask], task: QueueTask | str) -> None:
    task_id = task if isinstance(task, str) else task.id
    for i, t in enumerate(tasks):
        if t.id == task_id:
            del tasks[i]
            return
