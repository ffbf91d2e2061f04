# src/taskseq/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The sequencer depends on Protocols instead of concrete implementations.
Task bodies are supplied by the caller; this is the only shape it relies on.
"""

from typing import TYPE_CHECKING, Any, Awaitable, Protocol

if TYPE_CHECKING:
    from ..queue.queue_models import QueueTask


class TaskBody(Protocol):
    """
    One unit of asynchronous work.

    run() receives the task record it belongs to and produces a result,
    or raises to report a failure. The sequencer never cancels it.
    """

    def run(self, task: QueueTask) -> Awaitable[Any]: ...
