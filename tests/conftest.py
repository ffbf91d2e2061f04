# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from taskseq.cli.bootstrap import create_initial_state
from taskseq.config import Settings
from taskseq.core.state import AppState


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Explicit settings for tests.

    Built directly rather than from the environment, to keep unit tests
    isolated and deterministic. Demo tasks take 0 ms.
    """
    return Settings(
        app_name="taskseq-test",
        log_level="DEBUG",
        log_dir=tmp_path / "logs",
        immediate=False,
        remove_after_finish=False,
        continue_when_error=False,
        max_subscribers=10,
        demo_min_duration_ms=0,
        demo_max_duration_ms=0,
    )


@pytest.fixture()
def state(settings: Settings) -> AppState:
    """AppState wired the same way the CLI wires it."""
    return create_initial_state(settings=settings)
