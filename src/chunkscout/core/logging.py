"""Structured logging for :mod:`chunkscout`.

Diagnostics go to stderr through Rich so that reports keep stdout to
themselves. Passing ``log_dir`` adds a JSON-lines file that rotates at
midnight UTC and gzips its archives.
"""

from __future__ import annotations

import gzip
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
import shutil

from rich.console import Console
from rich.logging import RichHandler
import structlog

Logger = structlog.stdlib.BoundLogger

LOG_FILENAME = "chunkscout.log"
_ARCHIVE_DAYS = 7

_SHARED_PROCESSORS = (
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
)


def _level_number(level: str) -> int:
    try:
        return logging.getLevelNamesMapping()[level.strip().upper()]
    except KeyError:
        raise ValueError(f"Unsupported log level: {level!r}") from None


def _gzip_archive(source: str, dest: str) -> None:
    with open(source, "rb") as src, gzip.open(dest, "wb") as target:
        shutil.copyfileobj(src, target)
    Path(source).unlink(missing_ok=True)


def _handlers(
    level: int,
    log_dir: Path | None,
    console: Console | None,
) -> list[logging.Handler]:
    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        log_time_format="%H:%M:%S",
    )
    rich_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=False),
            foreign_pre_chain=list(_SHARED_PROCESSORS),
        )
    )
    handlers: list[logging.Handler] = [rich_handler]

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            log_dir / LOG_FILENAME,
            when="midnight",
            utc=True,
            backupCount=_ARCHIVE_DAYS,
            encoding="utf-8",
            delay=True,
        )
        file_handler.suffix = "%Y-%m-%d"
        file_handler.namer = lambda name: f"{name}.gz"
        file_handler.rotator = _gzip_archive
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(sort_keys=True),
                foreign_pre_chain=list(_SHARED_PROCESSORS),
            )
        )
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level)
    return handlers


def configure_logging(
    *,
    level: str = "INFO",
    log_dir: str | Path | None = None,
    console: Console | None = None,
) -> None:
    """Route structlog events through the root logger.

    Calling it again replaces the handlers installed by the previous call.

    Raises:
        ValueError: If ``level`` is not a logging level name.
    """

    number = _level_number(level)
    directory = None
    if log_dir is not None:
        directory = Path(log_dir).expanduser().resolve(strict=False)

    structlog.reset_defaults()
    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in _handlers(number, directory, console):
        root.addHandler(handler)
    root.setLevel(number)


def get_logger(name: str | None = None, **initial_context: object) -> Logger:
    """Return a structlog logger with ``initial_context`` bound."""

    return structlog.get_logger(name).bind(**initial_context)


__all__ = ["LOG_FILENAME", "Logger", "configure_logging", "get_logger"]
