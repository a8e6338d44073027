"""
Logging Configuration for the Storefront Catalog Engine

structlog renders every record, including stdlib records from uvicorn,
SQLAlchemy and redis, through one stdout handler. Each event carries the
service name and environment, and the ``request_id`` bound by
``RequestLoggingMiddleware`` while a request is in flight.
"""

import logging
import sys
from typing import Dict, List, Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import add_log_level, ProcessorFormatter
from structlog.typing import EventDict, Processor, WrappedLogger

from storefront.config.settings import Settings, get_settings


def _service_context(settings: Settings) -> Processor:
    service = settings.app_name
    environment = settings.app_env

    def add_service_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service)
        event_dict.setdefault("environment", environment)
        return event_dict

    return add_service_context


def library_levels(settings: Settings, level: int) -> Dict[str, int]:
    """
    Levels for third-party loggers.

    SQL statements are logged only with ``POSTGRES_ECHO``. Access lines from
    uvicorn are dropped below WARNING since the request middleware already
    logs every request with its id and duration.
    """
    quiet = max(level, logging.WARNING)
    return {
        "uvicorn": level,
        "uvicorn.error": level,
        "uvicorn.access": quiet,
        "sqlalchemy.engine": logging.INFO if settings.database.echo else quiet,
        "sqlalchemy.pool": quiet,
        "asyncpg": quiet,
        "redis": quiet,
    }


def shared_processors(settings: Settings) -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        _service_context(settings),
        structlog.stdlib.add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(log_level: Optional[str] = None) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Override ``LOG_LEVEL`` (DEBUG, INFO, WARNING, ERROR)
    """
    settings = get_settings()
    level = log_level or settings.monitoring.log_level
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    processors = shared_processors(settings)

    # Drop request ids left over from a previous configuration
    structlog.contextvars.clear_contextvars()
    structlog.configure(
        processors=processors + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if settings.monitoring.log_format == "json":
        renderer = JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    console_handler = logging.StreamHandler(sys.stdout)
    # Logger levels filter; the handler passes everything it receives
    console_handler.setLevel(logging.NOTSET)
    console_handler.setFormatter(ProcessorFormatter(processor=renderer, foreign_pre_chain=processors))

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(console_handler)

    # Libraries propagate to the root handler at their own level
    for name, library_level in library_levels(settings, numeric_level).items():
        library_logger = logging.getLogger(name)
        library_logger.handlers = []
        library_logger.propagate = True
        library_logger.setLevel(library_level)

    structlog.get_logger(__name__).info(
        "Logging configured",
        level=level,
        format=settings.monitoring.log_format,
        sql_echo=settings.database.echo,
    )
