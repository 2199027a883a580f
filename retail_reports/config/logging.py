"""
Logging setup

structlog and standard library records (SQLAlchemy's included) share one
stderr handler, so report tables printed on stdout stay clean. Each report
run binds its name and reference date with `report_context`, and every
line logged while the report computes carries them.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog

from retail_reports.config.settings import Settings, get_settings


def resolve_level(settings: Settings, log_level: Optional[str] = None) -> int:
    """
    Numeric log level: explicit override, then DEBUG when debug mode is on,
    then LOG_LEVEL. Unknown names fall back to INFO.
    """
    if log_level:
        name = log_level
    elif settings.debug:
        name = "DEBUG"
    else:
        name = settings.monitoring.log_level
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(log_level: Optional[str] = None) -> int:
    """
    Route all logging through structlog.

    Args:
        log_level: Overrides LOG_LEVEL (the CLI's --log-level)

    Returns:
        The numeric level applied
    """
    settings = get_settings()
    level = resolve_level(settings, log_level)

    pre_chain = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]
    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if settings.monitoring.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    # DATABASE_ECHO turns on statement logging
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.database.echo else logging.WARNING)

    structlog.get_logger(__name__).debug(
        "Logging configured",
        app=settings.app_name,
        version=settings.version,
        level=logging.getLevelName(level),
        environment=settings.app_env,
    )
    return level


@contextmanager
def report_context(**values) -> Iterator[None]:
    """Bind key/values to every log line emitted in this context"""
    with structlog.contextvars.bound_contextvars(**values):
        yield
