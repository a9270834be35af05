import inspect
import json
import logging
from typing import Any, Optional

import structlog

from db_explorer.config_constants import LogFormat, LogLevel

# Module-level flag to prevent multiple configuration
_logging_configured = False

_LEVEL_COLORS = {
    'DEBUG': '\033[36m',
    'INFO': '\033[32m',
    'WARNING': '\033[33m',
    'ERROR': '\033[31m',
    'CRITICAL': '\033[35m',
}
_RESET = '\033[0m'


def _add_module_info(logger: Any, method_name: str, event_dict: structlog.types.EventDict) -> structlog.types.EventDict:
    """
    Add a short 'module' field derived from the logger name.

    "db_explorer.repositories.schema_repository" becomes
    "repositories.schema_repository"; foreign loggers keep their full name.
    """
    logger_name = event_dict.get('logger', 'unknown')

    if logger_name.startswith('db_explorer.'):
        module_parts = logger_name.split('.')
        event_dict['module'] = '.'.join(module_parts[-2:])
    else:
        event_dict['module'] = logger_name

    return event_dict


def _pretty_json_renderer(logger: Any, method_name: str, event_dict: structlog.types.EventDict) -> str:
    """Render the event as indented JSON."""
    return json.dumps(event_dict, indent=2, ensure_ascii=False, default=str)


def _console_renderer(logger: Any, method_name: str, event_dict: structlog.types.EventDict) -> str:
    """
    Render the event as a single coloured line for local development.

    Format: "<timestamp> [LEVEL] module: event (trace: abcd1234) | key=value, ..."
    """
    timestamp = event_dict.get('timestamp', '')
    level = event_dict.get('level', '').upper()
    module = event_dict.get('module', '')
    event = event_dict.get('event', '')
    trace_id = event_dict.get('trace_id', '')

    color = _LEVEL_COLORS.get(level, '')
    line = f"{timestamp} {color}[{level}]{_RESET} {module}: {event}"

    if trace_id:
        line += f" (trace: {trace_id[:8]})"

    skip_fields = {'timestamp', 'level', 'module', 'event', 'trace_id', 'logger'}
    other_fields = [f"{key}={value}" for key, value in event_dict.items() if key not in skip_fields]
    if other_fields:
        line += f" | {', '.join(other_fields)}"

    return line


def configure_logging(
    log_level: Optional[LogLevel] = None,
    log_format: Optional[LogFormat] = None,
) -> None:
    """
    Configure structured logging for the application.

    Runs once per process; later calls are no-ops. Level and format default
    to the application settings when not given.
    """
    global _logging_configured

    if _logging_configured:
        return
    _logging_configured = True

    if log_level is None or log_format is None:
        from db_explorer.config import get_settings

        app_settings = get_settings().app
        log_level = log_level or app_settings.log_level
        log_format = log_format or app_settings.log_format

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.value),
        handlers=[logging.StreamHandler()]
    )

    renderer = _console_renderer if log_format == LogFormat.CONSOLE else _pretty_json_renderer

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,  # Adds trace_id bound by utils.tracing
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _add_module_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("Tables listed", count=14, schema="public")
    """
    return structlog.get_logger(name)


def get_module_logger() -> structlog.stdlib.BoundLogger:
    """
    Get a logger named after the calling module.

    Falls back to 'unknown' if frame inspection fails.
    """
    module_name = 'unknown'
    frame = None

    try:
        frame = inspect.currentframe()
        if frame is not None and frame.f_back is not None:
            module_name = frame.f_back.f_globals.get('__name__', 'unknown')
    except (AttributeError, RuntimeError):
        pass
    finally:
        if frame is not None:
            del frame

    return get_logger(module_name)
