"""
Logging configuration shared by the dashboard server and its background worker.

Usage
-----
In the entrypoint:

    from utils.logging_utils import setup_logging

    setup_logging(level="INFO", job_name="weather_dashboard")

In a module:

    from utils.logging_utils import get_tagged_logger

    logger = get_tagged_logger(__name__, tag="refresh")
    logger.info("Cycle finished", extra={"weather_ok": True})

Records emitted before setup_logging() runs still carry a timestamp and level
thanks to the bootstrap basicConfig below.
"""

from __future__ import annotations

import logging
import logging.config
from typing import Any, Mapping, Optional


DEFAULT_JOB_NAME = "weather_dashboard"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(job_name)s | %(tag)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s", datefmt=DATE_FORMAT)

_CONFIGURED: bool = False


class MaxLevelFilter(logging.Filter):
    """Pass only records at or below `max_level` (keeps warnings off stdout)."""

    def __init__(self, max_level: int) -> None:
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        return record.levelno <= self.max_level


class EnsureTagFilter(logging.Filter):
    """
    Give every record a `tag`.

    Records coming through a tagged LoggerAdapter already have one; records
    from third-party loggers (uvicorn, urllib3) get the last segment of their
    logger name, e.g. "uvicorn.error" -> "error".
    """

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if not hasattr(record, "tag"):
            logger_name = getattr(record, "name", "")
            record.tag = logger_name.split(".")[-1] if logger_name else "-"
        return True


class JobNameFilter(logging.Filter):
    """Stamp the process-wide job name onto records that lack one."""

    def __init__(self, job_name: Optional[str] = None) -> None:
        super().__init__()
        self._job_name = job_name or "-"

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if not hasattr(record, "job_name"):
            record.job_name = self._job_name
        return True


def build_logging_config(
    *,
    level: str | int = "INFO",
    job_name: Optional[str] = DEFAULT_JOB_NAME,
) -> Mapping[str, Any]:
    """
    Build the dictConfig mapping used by setup_logging().

    DEBUG/INFO go to stdout, WARNING and above go to stderr. Both handlers
    share the same formatter so a failed refresh cycle and a successful one
    line up in a single tail.
    """
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "ensure_tag": {"()": EnsureTagFilter},
            "job_name": {"()": JobNameFilter, "job_name": job_name},
            "stdout_max_info": {
                "()": MaxLevelFilter,
                "max_level": logging.INFO,
            },
        },
        "formatters": {
            "standard": {
                "format": LOG_FORMAT,
                "datefmt": DATE_FORMAT,
            },
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "filters": ["ensure_tag", "job_name", "stdout_max_info"],
                "level": "DEBUG",
                "stream": "ext://sys.stdout",
            },
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "filters": ["ensure_tag", "job_name"],
                "level": "WARNING",
                "stream": "ext://sys.stderr",
            },
        },
        # urllib3 logs a connection line for every poll at DEBUG.
        "loggers": {
            "urllib3": {"level": "WARNING"},
        },
        "root": {
            "level": level,
            "handlers": ["stdout", "stderr"],
        },
    }


def setup_logging(
    *,
    level: str | int = "INFO",
    job_name: Optional[str] = DEFAULT_JOB_NAME,
    override_existing: bool = False,
) -> None:
    """
    Apply the dashboard logging configuration once per process.

    Repeated calls are no-ops unless `override_existing` is True, which the
    tests use to re-apply the config after tampering with the root logger.
    """
    global _CONFIGURED

    if _CONFIGURED and not override_existing:
        return

    logging.config.dictConfig(build_logging_config(level=level, job_name=job_name))
    _CONFIGURED = True


def get_tagged_logger(
    name: str,
    *,
    tag: Optional[str] = None,
) -> logging.LoggerAdapter:
    """
    Return a LoggerAdapter whose records always carry a `tag` field.

    `tag` defaults to the last dotted segment of `name`, so
    get_tagged_logger("weather_dashboard.refresh") is tagged "refresh".
    """
    base_logger = logging.getLogger(name)
    if tag is None:
        tag = name.split(".")[-1]
    return logging.LoggerAdapter(base_logger, {"tag": tag})
