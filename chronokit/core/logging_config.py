"""
Logging configuration for chronokit.

The library only emits events through module loggers
(``structlog.get_logger(__name__)``). Nothing is printed until an application,
or the dates CLI, calls configure_logging():
- stderr console handler, so CLI results on stdout stay machine-readable
- optional file handler, rotated every Monday and gzip-compressed
- JSON events with ISO timestamps

Both defaults come from settings (CHRONOKIT_LOG_LEVEL, CHRONOKIT_LOG_TO_FILE).
"""
import gzip
import logging
import logging.handlers
import shutil
import sys
from pathlib import Path
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

from chronokit.core.config import PROJECT_ROOT, get_settings

LOG_FILE_NAME = "chronokit.log"

# Rotate on Mondays, keep one year of weekly archives
ROTATION_WHEN = "W0"
ROTATION_BACKUP_COUNT = 52


def get_log_directory() -> Path:
    """Return <project root>/logs, creating it on first use."""
    log_dir = PROJECT_ROOT / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def add_log_level(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Store the upper-case level under "level" ("warn" is reported as WARNING)."""
    level = "warning" if method_name == "warn" else method_name
    event_dict["level"] = level.upper()
    return event_dict


def gzip_namer(default_name: str) -> str:
    """Archive name for a rotated file: chronokit.log.2025-01-06 -> chronokit.log.2025-01-06.gz"""
    return f"{default_name}.gz"


def gzip_rotator(source: str, dest: str) -> None:
    """Compress the rotated file into dest and delete the plain copy."""
    source_path = Path(source)
    with source_path.open("rb") as plain, gzip.open(dest, "wb") as packed:
        shutil.copyfileobj(plain, packed)
    source_path.unlink()


def _numeric_level(log_level: str) -> int:
    """Map a level name to its logging constant; unknown names mean INFO."""
    level = logging.getLevelName(log_level.upper())
    return level if isinstance(level, int) else logging.INFO


def _file_handler(level: int) -> logging.Handler:
    handler = logging.handlers.TimedRotatingFileHandler(
        filename=str(get_log_directory() / LOG_FILE_NAME),
        when=ROTATION_WHEN,
        backupCount=ROTATION_BACKUP_COUNT,
        encoding="utf-8",
        utc=True,
        )
    handler.namer = gzip_namer
    handler.rotator = gzip_rotator
    handler.setLevel(level)
    return handler


def build_handlers(level: int, enable_file_logging: bool) -> list[logging.Handler]:
    """stderr handler first, then the rotating file handler when enabled."""
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    handlers: list[logging.Handler] = [console]
    if enable_file_logging:
        handlers.append(_file_handler(level))
    return handlers


def build_processors() -> list[Processor]:
    """structlog processor chain ending in the JSON renderer."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
        ]


def configure_logging(log_level: Optional[str] = None, enable_file_logging: Optional[bool] = None) -> None:
    """
    Route chronokit's structlog events to stderr and, optionally, a log file.

    Existing root handlers are replaced, so calling this again reconfigures
    logging instead of duplicating output.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
                   Defaults to CHRONOKIT_LOG_LEVEL; unknown names mean INFO.
        enable_file_logging: Also write to logs/chronokit.log.
                             Defaults to CHRONOKIT_LOG_TO_FILE.
    """
    settings = get_settings()
    level = _numeric_level(log_level or settings.LOG_LEVEL)
    if enable_file_logging is None:
        enable_file_logging = settings.LOG_TO_FILE

    logging.basicConfig(
        format="%(message)s",
        handlers=build_handlers(level, enable_file_logging),
        level=level,
        force=True,
        )

    structlog.configure(
        processors=build_processors(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
        )
