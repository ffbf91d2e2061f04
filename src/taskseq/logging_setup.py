# src/taskseq/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%H:%M:%S"


class _ConsoleNoiseFilter(logging.Filter):
    """
    The demo prints queue events itself, so the console only shows app logs,
    engine warnings and errors from anything else (py.warnings included).
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("taskseq.queue."):
            return record.levelno >= logging.WARNING
        if record.name.startswith("taskseq."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(*, log_dir: str | Path = ".local/taskseq", console_level: int = logging.INFO) -> None:
    """Filtered console on stderr plus a full DEBUG log in <log_dir>/taskseq.log. Call once at startup."""
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    fmt = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.addFilter(_ConsoleNoiseFilter())

    logfile = logging.FileHandler(log_dir / "taskseq.log", encoding="utf-8")
    logfile.setLevel(logging.DEBUG)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in (console, logfile):
        h.setFormatter(fmt)
        root.addHandler(h)

    logging.captureWarnings(True)
