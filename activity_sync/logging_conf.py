"""Logging configuration built around structlog JSON logging.

Every record is a JSON line. The ``activity_sync`` logger writes to the
console, ``logs/sync.log`` and (errors only) ``logs/error.log``; each source
additionally gets ``logs/sources/<source>.log``. The log directory follows
:class:`ConfigLocator`, so ``ACTIVITY_SYNC_HOME`` moves logs together with
config and history.
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from typing import Optional

import structlog
from pythonjsonlogger import jsonlogger

from .config.loader import ConfigLocator

APP_LOGGER = "activity_sync"
SOURCE_LOGGER_PREFIX = f"{APP_LOGGER}.source."
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# (log directory, level) the stdlib handlers currently point at.
_active: Optional[tuple[Path, str]] = None


def log_dir() -> Path:
    return ConfigLocator().logs_dir


def _file_handler(path: Path, level: str) -> dict:
    return {
        "class": "logging.FileHandler",
        "level": level,
        "filename": str(path),
        "encoding": "utf-8",
        "formatter": "json",
    }


def _dict_config(directory: Path, level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"json": {"()": jsonlogger.JsonFormatter, "fmt": JSON_FORMAT}},
        "handlers": {
            "console": {"class": "logging.StreamHandler", "level": level, "formatter": "json"},
            "sync_file": _file_handler(directory / "sync.log", "INFO"),
            "error_file": _file_handler(directory / "error.log", "ERROR"),
        },
        "loggers": {
            APP_LOGGER: {
                "handlers": ["console", "sync_file", "error_file"],
                "level": level,
                "propagate": False,
            },
        },
    }


def _drop_source_handlers() -> None:
    for name, logger in list(logging.root.manager.loggerDict.items()):
        if name.startswith(SOURCE_LOGGER_PREFIX) and isinstance(logger, logging.Logger):
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()


def configure_logging(verbose: Optional[bool] = None) -> structlog.BoundLogger:
    """Point the handlers at the current log directory and return the app logger.

    ``verbose=None`` keeps the level chosen by an earlier call. The stdlib
    handlers are rebuilt only when the directory or the level changed.
    """

    global _active
    directory = log_dir()
    if verbose is None:
        level = _active[1] if _active else "INFO"
    else:
        level = "DEBUG" if verbose else "INFO"
    (directory / "sources").mkdir(parents=True, exist_ok=True)

    if _active != (directory, level):
        _drop_source_handlers()
        logging.config.dictConfig(_dict_config(directory, level))
        if _active is None:
            structlog.configure(
                processors=[
                    structlog.contextvars.merge_contextvars,
                    structlog.processors.TimeStamper(fmt="iso"),
                    structlog.stdlib.add_log_level,
                    structlog.processors.StackInfoRenderer(),
                    structlog.processors.format_exc_info,
                    structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
                ],
                logger_factory=structlog.stdlib.LoggerFactory(),
                cache_logger_on_first_use=True,
            )
        _active = (directory, level)
    return structlog.get_logger(APP_LOGGER)


def source_logger(source_name: str) -> structlog.BoundLogger:
    """Logger bound to ``source`` that also writes ``logs/sources/<source>.log``."""

    configure_logging()
    path = log_dir() / "sources" / f"{source_name}.log"
    py_logger = logging.getLogger(f"{SOURCE_LOGGER_PREFIX}{source_name}")
    if not any(getattr(handler, "baseFilename", None) == str(path) for handler in py_logger.handlers):
        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setFormatter(jsonlogger.JsonFormatter(JSON_FORMAT))
        handler.setLevel(logging.INFO)
        py_logger.addHandler(handler)
    return structlog.get_logger(py_logger.name).bind(source=source_name)


def tail_log(path: Path, line_count: int = 100) -> list[str]:
    """Return the last N lines from a log file."""

    if not path.exists():
        return []
    with path.open("r", encoding="utf-8", errors="ignore") as stream:
        lines = stream.readlines()
    return lines[-line_count:]


def available_source_logs() -> list[Path]:
    return sorted((log_dir() / "sources").glob("*.log"))


__all__ = ["available_source_logs", "configure_logging", "log_dir", "source_logger", "tail_log"]
