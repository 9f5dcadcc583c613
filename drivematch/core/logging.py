"""Logging for the DriveMatch service.

Everything logs under the ``drivematch`` logger: the helpers below write to
it directly and module loggers (``drivematch.services.similarity`` etc.)
propagate to it. Lines are flat ``KIND ... key=value`` records so request,
catalog and OpenAI activity can be grepped apart.
"""

import logging
import sys
from typing import Any

LOGGER_NAME = "drivematch"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Attach a stdout handler to the package logger and set its level.

    Safe to call again (``main`` does, with ``LOG_LEVEL``); only the level
    changes on repeat calls.
    """
    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if package_logger.handlers:
        return package_logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    package_logger.addHandler(handler)
    return package_logger


logger = setup_logging()


def _fields(**kwargs: Any) -> str:
    return " ".join(f"{k}={v}" for k, v in kwargs.items() if v is not None)


def log_request(method: str, path: str, **kwargs: Any) -> None:
    logger.info(f"REQUEST {method} {path} {_fields(**kwargs)}".rstrip())


def log_response(method: str, path: str, status: int, duration_ms: float) -> None:
    logger.info(f"RESPONSE {method} {path} status={status} duration_ms={duration_ms:.2f}")


def log_error(message: str, exc: Exception | None = None, **kwargs: Any) -> None:
    """Error line with context fields; ``exc`` adds the traceback."""
    logger.error(f"ERROR {message} {_fields(**kwargs)}".rstrip(), exc_info=exc)


def log_db_query(
    operation: str, table: str, duration_ms: float | None = None, rows: int | None = None
) -> None:
    """Catalog read timing (debug level; one line per repository call)."""
    duration = f"{duration_ms:.2f}" if duration_ms is not None else None
    logger.debug(
        f"DB {operation} {_fields(table=table, rows=rows, duration_ms=duration)}"
    )


def log_external_call(
    service: str, operation: str, success: bool, duration_ms: float | None = None
) -> None:
    """Outcome of a third-party call such as the OpenAI filter extraction."""
    duration = f"{duration_ms:.2f}" if duration_ms is not None else None
    status = "success" if success else "failed"
    logger.info(
        f"EXTERNAL {service} {operation} {_fields(status=status, duration_ms=duration)}"
    )
