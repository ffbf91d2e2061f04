# tests/fakes.py

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from taskseq.events.event_models import QueueEvent
from taskseq.queue.queue_models import QueueTask, TaskStatus
from taskseq.queue.sequencer import TaskQueue


class Boom(RuntimeError):
    pass


@dataclass(slots=True)
class OkBody:
    """Resolves immediately with `result`."""

    result: Any = "ok"

    async def run(self, task: QueueTask) -> Any:
        return self.result


@dataclass(slots=True)
class FailBody:
    """
    Raises Boom on the first `failures` attempts, then succeeds.

    failures=-1 fails forever.
    """

    failures: int = -1
    calls: int = 0

    async def run(self, task: QueueTask) -> Any:
        self.calls += 1
        if self.failures < 0 or self.calls <= self.failures:
            raise Boom(f"{task.id} attempt {self.calls}")
        return f"{task.id} recovered"


@dataclass(slots=True)
class GatedBody:
    """Blocks until `gate` is set; lets a test hold a task in flight."""

    gate: asyncio.Event = field(default_factory=asyncio.Event)
    result: Any = "released"

    async def run(self, task: QueueTask) -> Any:
        await self.gate.wait()
        return self.result


@dataclass(slots=True)
class EventRecorder:
    """
    Subscribes to every QueueEvent of a queue and keeps (event, task_id) pairs.

    Also checks the single in-flight rule at every TASK_START.
    """

    queue: TaskQueue
    events: list[tuple[QueueEvent, str | None]] = field(default_factory=list)
    payloads: list[Any] = field(default_factory=list)
    max_pending_seen: int = 0

    def __post_init__(self) -> None:
        for event in QueueEvent:
            self.queue.subscribe(event, self._make_handler(event))

    def _make_handler(self, event: QueueEvent):
        def _handler(payload: Any) -> None:
            task = getattr(payload, "task", None)
            self.events.append((event, task.id if task is not None else None))
            self.payloads.append(payload)
            if event is QueueEvent.TASK_START:
                q = self.queue
                pending = sum(
                    1
                    for t in (*q.waiting, *q.in_flight, *q.finished)
                    if t.status is TaskStatus.PENDING
                )
                self.max_pending_seen = max(self.max_pending_seen, pending, len(q.in_flight))

        return _handler

    def ids(self, event: QueueEvent) -> list[str | None]:
        return [task_id for ev, task_id in self.events if ev is event]

    def count(self, event: QueueEvent) -> int:
        return len(self.ids(event))

    @property
    def started(self) -> list[str | None]:
        return self.ids(QueueEvent.TASK_START)
