# src/taskseq/core/state.py

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from ..config import Settings
from ..queue.sequencer import TaskQueue


@dataclass
class AppState:
    """Everything the console demo shares between commands and event printers."""

    settings: Settings
    queue: TaskQueue

    # ids handed out by /push: uid-0, uid-1, ...
    next_uid: int = 0
    # pause() coroutines started by /pause; kept referenced until done
    background: set[asyncio.Task[Any]] = field(default_factory=set)

    def new_task_id(self) -> str:
        task_id = f"uid-{self.next_uid}"
        self.next_uid += 1
        return task_id

    def spawn(self, coro: Any) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro)
        self.background.add(task)
        task.add_done_callback(self.background.discard)
        return task
