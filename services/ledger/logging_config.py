"""
Centralized Logging Configuration for the Growth Ledger

Structured, event-style logging via structlog.

Author: Growth Ledger Team
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog

from config import LOG_LEVEL, LOG_FILE, JSON_LOGS


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    json_logs: bool = False
) -> None:
    """
    Configure centralized logging for the entire service.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for logs
        json_logs: Use JSON format for production (better parsing)
    """
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
        logging.getLogger().addHandler(file_handler)


def get_logger(name: str | None = None) -> Any:
    """
    Get a logger instance.

    Usage:
        from logging_config import get_logger

        logger = get_logger(__name__)
        logger.info("sprout_grafted", sprout_id=sprout.id, cost=cost)
    """
    return structlog.get_logger(name)


def log_sprout_transition(
    sprout_id: str,
    from_state: str | None,
    to_state: str,
    reason: str,
    timestamp: datetime
) -> None:
    """Log sprout state transition, stamped with the garden clock's time"""
    logger = get_logger("sprout_transition")
    logger.info(
        "sprout_transition",
        sprout_id=sprout_id,
        from_state=from_state,
        to_state=to_state,
        reason=reason,
        transitioned_at=timestamp.isoformat()
    )


def log_error(
    error: Exception,
    context: dict | None = None,
    level: str = "ERROR"
) -> None:
    """Log error with full context and stack trace"""
    logger = get_logger("error_handler")
    log_func = getattr(logger, level.lower(), logger.error)

    log_data = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }

    if context:
        log_data.update(context)

    log_func("error_occurred", **log_data, exc_info=error)


# Auto-setup on import
setup_logging(
    level=LOG_LEVEL,
    log_file=LOG_FILE,
    json_logs=JSON_LOGS
)
