# src/taskseq/queue/queue_models.py

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, overload

from ..core.ports import TaskBody


class TaskStatus(StrEnum):
    """Task lifecycle: WAITING -> PENDING -> SUCCESS | FAILURE (retry goes back to WAITING)."""

    WAITING = "waiting"
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


class QueueStatus(StrEnum):
    """
    Queue lifecycle.

    WAITING -> RUNNING -> BEFORE_PAUSE | FINISH
    BEFORE_PAUSE -> PAUSE | FINISH
    PAUSE -> RUNNING (resume)

    FINISH is terminal for a run; reset() does not change the status.
    """

    WAITING = "waiting"
    RUNNING = "running"
    BEFORE_PAUSE = "before_pause"
    PAUSE = "pause"
    FINISH = "finish"


@dataclass(frozen=True, slots=True)
class QueueOptions:
    # start executing as soon as a task is submitted
    immediate: bool = False
    # drop finished tasks instead of keeping them for dedup/retry
    remove_after_finish: bool = True
    # keep going after a failed task instead of stalling the queue
    continue_when_error: bool = False


@dataclass(slots=True)
class CallableBody:
    """Adapts a plain coroutine function `async def f(task)` to TaskBody."""

    fn: Callable[[QueueTask], Awaitable[Any]]

    def run(self, task: QueueTask) -> Awaitable[Any]:
        return self.fn(task)


def as_body(body: TaskBody | Callable[[QueueTask], Awaitable[Any]]) -> TaskBody:
    if callable(getattr(body, "run", None)):
        return body  # type: ignore[return-value]
    if callable(body):
        return CallableBody(body)
    raise TypeError(f"task body must have run() or be callable, got {type(body).__name__}")


@dataclass(slots=True, eq=False)
class QueueTask:
    id: str
    body: TaskBody
    status: TaskStatus = TaskStatus.WAITING
    # handle to the pending outcome while the task is in flight
    outcome: asyncio.Task[None] | None = field(default=None, repr=False)
    attempts: int = 0


class TaskListView(Sequence[QueueTask]):
    """
    Read-only live view over one of the sequencer's lists.

    Reflects later changes to the underlying list; offers no way to change it.
    """

    __slots__ = ("_items",)

    def __init__(self, items: list[QueueTask]) -> None:
        self._items = items

    @overload
    def __getitem__(self, index: int) -> QueueTask: ...

    @overload
    def __getitem__(self, index: slice) -> list[QueueTask]: ...

    def __getitem__(self, index: int | slice) -> QueueTask | list[QueueTask]:
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[QueueTask]:
        return iter(self._items)

    def ids(self) -> list[str]:
        return [t.id for t in self._items]

    def __repr__(self) -> str:
        return f"TaskListView({self.ids()!r})"
