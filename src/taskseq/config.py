# src/taskseq/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

One Settings object for the whole app. Library code (TaskQueue, NotificationHub)
never reads it implicitly: callers pass options in, the CLI builds them from here.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .events.hub import DEFAULT_MAX_SUBSCRIBERS
from .queue.queue_models import QueueOptions

ENV_PREFIX = "TASKSEQ"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except ImportError:
        return
    load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Path

    # ---- Queue options ----
    immediate: bool
    remove_after_finish: bool
    continue_when_error: bool

    # ---- Hub ----
    max_subscribers: int

    # ---- Console demo ----
    demo_min_duration_ms: int
    demo_max_duration_ms: int

    @staticmethod
    def from_env() -> "Settings":
        defaults = QueueOptions()

        min_ms = max(0, _env_int(_k("DEMO_MIN_DURATION_MS"), 300))
        max_ms = max(min_ms, _env_int(_k("DEMO_MAX_DURATION_MS"), 1300))

        return Settings(
            app_name=_env(_k("APP_NAME"), "taskseq") or "taskseq",
            log_level=_env(_k("LOG_LEVEL"), "INFO"),
            log_dir=_env_path(_k("LOG_DIR"), Path(".local/taskseq")),
            immediate=_env_bool(_k("IMMEDIATE"), defaults.immediate),
            remove_after_finish=_env_bool(_k("REMOVE_AFTER_FINISH"), defaults.remove_after_finish),
            continue_when_error=_env_bool(_k("CONTINUE_WHEN_ERROR"), defaults.continue_when_error),
            max_subscribers=max(0, _env_int(_k("MAX_SUBSCRIBERS"), DEFAULT_MAX_SUBSCRIBERS)),
            demo_min_duration_ms=min_ms,
            demo_max_duration_ms=max_ms,
        )

    def queue_options(self) -> QueueOptions:
        return QueueOptions(
            immediate=self.immediate,
            remove_after_finish=self.remove_after_finish,
            continue_when_error=self.continue_when_error,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, read from the environment (and .env) on first use."""
    global _SETTINGS
    if _SETTINGS is None:
        _load_dotenv_if_available()
        _SETTINGS = Settings.from_env()
    return _SETTINGS
