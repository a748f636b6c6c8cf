"""
Logging Configuration

Centralized logging configuration for the globe constellation package.
Structured events are produced with structlog and emitted through the
standard library logging handlers, so records from third-party libraries
(requests, urllib3) end up in the same stream.

Usage:
    from globe_constellation.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Element sets loaded", count=4812)
    logger.warning("Element set source is empty", source=path)
    logger.debug("Frame summary", visible=1204, dropped=3)
"""

import logging
import sys
from typing import Optional

import structlog

# structlog renders the full line, the stdlib formatter only passes it through
LOG_FORMAT = "%(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    json_logs: bool = False,
    force: bool = False,
) -> None:
    """
    Configure logging for the entire application.

    Parameters
    ----------
    level : int
        Logging level (e.g., logging.DEBUG, logging.INFO)
    log_file : str, optional
        Path to log file. If None, logs only to console.
    json_logs : bool
        Render events as JSON lines instead of key=value console output.
    force : bool
        Replace root handlers that are already installed. Leave False when
        the host application has configured logging itself.
    """
    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
        force=force,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance.

    Parameters
    ----------
    name : str
        Name of the logger (typically __name__)

    Returns
    -------
    structlog.stdlib.BoundLogger
        Structured logger bound to the stdlib logger of that name
    """
    return structlog.get_logger(name)


# Configure default logging on module import
configure_logging()
