# src/taskseq/cli/demo_tasks.py

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass

from ..queue.queue_models import QueueTask


class SimulatedFailure(RuntimeError):
    pass


@dataclass(slots=True)
class SimulatedTask:
    """Demo task body: sleeps for duration_ms, then succeeds. With fail=True the first attempt raises."""

    name: str
    duration_ms: int
    fail: bool = False

    async def run(self, task: QueueTask) -> str:
        await asyncio.sleep(self.duration_ms / 1000)
        if self.fail and task.attempts <= 1:
            raise SimulatedFailure(f"{self.name} failed after {self.duration_ms} ms")
        return f"{self.name} done in {self.duration_ms} ms (attempt {task.attempts})"


def make_simulated_task(
    task_id: str,
    *,
    min_ms: int,
    max_ms: int,
    fail: bool = False,
    rng: random.Random | None = None,
) -> SimulatedTask:
    rng = rng or random.Random()
    duration = rng.randint(min_ms, max_ms) if max_ms > min_ms else min_ms
    return SimulatedTask(name=f"name-{task_id}", duration_ms=duration, fail=fail)
