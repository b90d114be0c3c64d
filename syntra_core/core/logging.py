"""
Standardized Logging Configuration

Structured logging setup shared by the pipeline, the vault and the CLI.
JSON output for production, human-readable console output for development.
"""

import logging
import sys
from typing import Optional, Union

import structlog

from syntra_core.config import LogFormat, get_settings


# =============================================================================
# Logger Setup
# =============================================================================


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def configure_logging(
    level: Optional[str] = None,
    format: Optional[Union[LogFormat, str]] = None,
    service_name: Optional[str] = None,
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: Log level (debug, info, warning, error, critical)
        format: Log format (json, console)
        service_name: Service name bound to every log entry
    """
    settings = get_settings()
    level = (level or settings.log_level).upper()
    log_format = LogFormat(format or settings.log_format)
    service_name = service_name or settings.service_name

    if log_format == LogFormat.JSON:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(getattr(logging, level))
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING)

    structlog.contextvars.bind_contextvars(service=service_name)
    structlog.get_logger(__name__).debug(
        "Logging configured",
        level=level,
        format=log_format.value,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structlog logger bound to the given name.

    Args:
        name: Logger name (typically __name__)
    """
    return structlog.get_logger(name)
