"""Logging for sync runs: structlog events rendered as JSON lines.

Three kinds of file live under ``<home>/logs``:

* ``sync.log`` carries every event at INFO and above,
* ``error.log`` only the failures,
* ``content/<content type>.log`` the events of a single content type.

Every line written during a run carries the run's ``run_tag``, the same tag
used to name that run's collection backups.
"""

from __future__ import annotations

import logging
import logging.config
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

import structlog

SHARED_LOGS = ("sync", "error")

_LOGGING_INITIALISED = False


def log_dir() -> Path:
    home = os.environ.get("NEWSROOM_SYNC_HOME")
    root = Path(home).expanduser() if home else Path.cwd()
    return root / "logs"


def resolve_log(name: str) -> Path:
    """Map ``sync``, ``error`` or a content type name to its log file."""

    if name in SHARED_LOGS:
        return log_dir() / f"{name}.log"
    return log_dir() / "content" / f"{name}.log"


def _handlers(level: str) -> dict:
    handlers: dict = {
        "console": {"class": "logging.StreamHandler", "level": level, "formatter": "json"}
    }
    for name, file_level in zip(SHARED_LOGS, ("INFO", "ERROR")):
        path = resolve_log(name)
        path.touch(exist_ok=True)
        handlers[f"{name}_file"] = {
            "class": "logging.FileHandler",
            "level": file_level,
            "filename": str(path),
            "formatter": "json",
            "encoding": "utf-8",
        }
    return handlers


def configure_logging(verbose: bool = False) -> structlog.BoundLogger:
    """Configure structlog + stdlib handlers once and return the sync logger."""

    global _LOGGING_INITIALISED
    (log_dir() / "content").mkdir(parents=True, exist_ok=True)

    if not _LOGGING_INITIALISED:
        level = "DEBUG" if verbose else "INFO"
        handlers = _handlers(level)
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "json": {
                        "()": "pythonjsonlogger.json.JsonFormatter",
                        "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                    }
                },
                "handlers": handlers,
                "loggers": {
                    "newsroom_sync": {
                        "handlers": list(handlers),
                        "level": level,
                        "propagate": False,
                    },
                },
            }
        )

        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                # JSON rendering happens in the stdlib handler formatter
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_INITIALISED = True
    return structlog.get_logger("newsroom_sync")


def new_run_tag() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")


def bind_run(run_tag: str) -> None:
    """Stamp every event logged from here on with ``run_tag``."""

    structlog.contextvars.bind_contextvars(run_tag=run_tag)


def clear_run() -> None:
    structlog.contextvars.unbind_contextvars("run_tag")


def content_logger(
    content_type: str, collection: str | None = None, verbose: bool = False
) -> structlog.BoundLogger:
    """Return a logger bound to one content type, also writing its own file."""

    configure_logging(verbose)
    log_path = resolve_log(content_type)

    logger_name = f"newsroom_sync.content.{content_type}"
    py_logger = logging.getLogger(logger_name)
    if not any(
        isinstance(handler, logging.FileHandler) and handler.baseFilename == str(log_path)
        for handler in py_logger.handlers
    ):
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        global_logger = logging.getLogger("newsroom_sync")
        if global_logger.handlers:
            file_handler.setFormatter(global_logger.handlers[0].formatter)
        file_handler.setLevel(logging.INFO)
        py_logger.addHandler(file_handler)

    return structlog.get_logger(logger_name).bind(
        content_type=content_type, collection=collection or content_type
    )


def tail_log(path: Path, line_count: int = 100) -> list[str]:
    """Return the last N lines from a log file."""

    if not path.exists():
        return []
    with path.open("r", encoding="utf-8", errors="ignore") as stream:
        lines = stream.readlines()
    return lines[-line_count:]


def available_content_logs() -> Iterable[Path]:
    content_dir = log_dir() / "content"
    if not content_dir.exists():
        return []
    return sorted(content_dir.glob("*.log"))


__all__ = [
    "SHARED_LOGS",
    "available_content_logs",
    "bind_run",
    "clear_run",
    "configure_logging",
    "content_logger",
    "log_dir",
    "new_run_tag",
    "resolve_log",
    "tail_log",
]
