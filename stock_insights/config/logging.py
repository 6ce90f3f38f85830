"""
Logging Configuration for the Inventory Classification Service

Provides structured logging with JSON or console output. Every module logs
through `structlog.get_logger(__name__)`; this module only wires structlog
into stdlib logging so uvicorn, httpx and Prefect share one handler.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import add_log_level, ProcessorFormatter

from stock_insights.config.settings import get_settings

# Servers whose records go through our handler at our level
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

# Clients that log every request at INFO; kept at WARNING unless debugging
CHATTY_LOGGERS = ("httpx", "httpcore", "prefect.task_runs")


def configure_logging(log_level: Optional[str] = None) -> logging.Handler:
    """
    Configure structured logging for the application.

    Safe to call more than once: the root handlers are replaced, not added to.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        The handler installed on the root logger
    """
    settings = get_settings()
    level = (log_level or settings.monitoring.log_level).upper()

    numeric_level = getattr(logging, level, logging.INFO)

    # Processors shared by structlog and foreign (stdlib) records
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if settings.monitoring.log_format == "json":
        renderer = JSONRenderer()
    else:
        # Colors only when someone is watching the terminal
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    formatter = ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(console_handler)

    for logger_name in SERVER_LOGGERS:
        logger = logging.getLogger(logger_name)
        logger.handlers = []
        logger.propagate = False
        logger.addHandler(console_handler)
        logger.setLevel(numeric_level)

    chatty_level = numeric_level if numeric_level <= logging.DEBUG else logging.WARNING
    for logger_name in CHATTY_LOGGERS:
        logging.getLogger(logger_name).setLevel(chatty_level)

    structlog.get_logger(__name__).info(
        "Logging configured",
        level=level,
        format=settings.monitoring.log_format,
        environment=settings.app_env,
    )
    return console_handler
