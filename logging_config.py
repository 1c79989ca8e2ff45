"""
Logging setup for ReBuy Web.

Every record carries the producing thread and, inside a Flask request, the
request line. Delivery assignments run on their own "Assign-<id>" threads,
so a shipped order can be traced from the click to the backend response:

    2025-12-03 10:15:30 [INFO    ] [MainThread] [POST /admin/delivery/confirm] rebuy_web.routes.delivery - Confirmed Uber
    2025-12-03 10:15:31 [INFO    ] [Assign-6650a1b2] [-] rebuy_web.assign.6650a1b2 - Order shipped via Uber

Call setup_logging() once from create_app(); modules use get_logger(__name__).
"""

import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from flask import has_request_context, request


APP_LOGGER_NAME = "rebuy_web"

LOG_FORMAT = "%(asctime)s [%(levelname)-8s] [%(thread_name)s] [%(request_line)s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


class ThreadContextFilter(logging.Filter):
    """Adds thread_name, thread_id and request_line to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.thread_name = threading.current_thread().name
        record.thread_id = threading.get_ident()
        if has_request_context():
            record.request_line = f"{request.method} {request.path}"
        else:
            record.request_line = "-"
        return True


def _handler(handler: logging.Handler, level: int, formatter: logging.Formatter,
             context: logging.Filter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(context)
    return handler


def _file_handlers(log_dir: Path, app_name: str, level: int, formatter: logging.Formatter,
                   context: logging.Filter) -> List[logging.Handler]:
    """Rotating application log plus an ERROR-only log beside it."""
    log_dir.mkdir(parents=True, exist_ok=True)
    handlers = []
    for suffix, handler_level in (("", level), ("_error", logging.ERROR)):
        rotating = RotatingFileHandler(
            filename=log_dir / f"{app_name}{suffix}.log",
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUPS,
            encoding="utf-8",
        )
        handlers.append(_handler(rotating, handler_level, formatter, context))
    return handlers


def setup_logging(
    app_name: str = APP_LOGGER_NAME,
    log_level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    enable_file_logging: bool = True,
) -> logging.Logger:
    """
    Configure the application logger.

    Console output is always on; file_logging adds rotating files under
    log_dir (default ./logs). Calling again replaces the handlers, which
    tests rely on when they build several apps.

    Returns:
        The "rebuy_web" logger; Flask's app.logger reuses its handlers.
    """
    logger = logging.getLogger(app_name)
    logger.setLevel(log_level)
    logger.propagate = False
    logger.handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    context = ThreadContextFilter()

    logger.addHandler(_handler(logging.StreamHandler(sys.stdout), log_level, formatter, context))

    if enable_file_logging:
        log_dir = log_dir or Path(__file__).parent / "logs"
        for handler in _file_handlers(log_dir, app_name, log_level, formatter, context):
            logger.addHandler(handler)
        logger.info(f"File logging enabled in {log_dir}")

    logger.info(f"Logging configured at level {logging.getLevelName(log_level)}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger under the rebuy_web namespace, e.g. rebuy_web.services.order_service."""
    if not name.startswith(APP_LOGGER_NAME):
        name = f"{APP_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def short_id(identifier: str) -> str:
    """Trailing 8 characters of a backend id; the leading bytes are a shared timestamp."""
    return identifier[-8:] if len(identifier) > 8 else identifier


def get_assignment_logger(order_id: str) -> logging.Logger:
    """Logger for one delivery assignment, e.g. rebuy_web.assign.6650a1b2."""
    return logging.getLogger(f"{APP_LOGGER_NAME}.assign.{short_id(order_id)}")


def set_thread_name(name: str) -> None:
    threading.current_thread().name = name
