# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from taskseq.logging_setup import _ConsoleNoiseFilter, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    ("name", "level", "shown"),
    [
        ("taskseq.cli.main", logging.INFO, True),
        ("taskseq.queue.sequencer", logging.INFO, False),
        ("taskseq.queue.sequencer", logging.WARNING, True),
        ("py.warnings", logging.WARNING, False),
        ("py.warnings", logging.ERROR, True),
        ("somelib", logging.WARNING, False),
        ("somelib", logging.ERROR, True),
    ],
)
def test_console_filter(name: str, level: int, shown: bool) -> None:
    assert _ConsoleNoiseFilter().filter(_record(name, level)) is shown


def test_setup_logging_writes_file(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    try:
        setup_logging(log_dir=tmp_path / "logs", console_level=logging.WARNING)
        logging.getLogger("taskseq.test").debug("hello file")
        for h in root.handlers:
            h.flush()

        log_file = tmp_path / "logs" / "taskseq.log"
        assert log_file.exists()
        assert "hello file" in log_file.read_text("utf-8")
        assert len(root.handlers) == 2
        assert root.handlers[0].level == logging.WARNING
        assert root.handlers[1].level == logging.DEBUG
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
        logging.captureWarnings(False)
