"""Structured logging setup for ybproxy.

All modules log through structlog with snake_case event names and keyword
context. Stdlib loggers (uvicorn, httpx, ...) are routed through the same
processor chain so console and JSON output stay consistent.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import BoundLogger
from structlog.typing import Processor


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def setup_logging(
    json_logs: bool = False,
    log_level_name: str = "INFO",
    log_file: str | None = None,
) -> BoundLogger:
    """Configure structlog and stdlib logging.

    Args:
        json_logs: Render records as JSON instead of the console renderer
        log_level_name: Root log level name (DEBUG, INFO, ...)
        log_file: Optional path that additionally receives JSON records

    Returns:
        A logger bound to this module, ready for use by the caller
    """
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)
    shared = _shared_processors()

    structlog.configure(
        processors=[
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info if json_logs else _identity,
                renderer,
            ],
        )
    )

    handlers: list[logging.Handler] = [console_handler]
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=shared,
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.format_exc_info,
                    structlog.processors.JSONRenderer(),
                ],
            )
        )
        handlers.append(file_handler)

    root = logging.getLogger()
    root.handlers = handlers
    root.setLevel(log_level)

    # Third-party chatter stays quiet unless explicitly debugging them
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger: BoundLogger = structlog.get_logger(__name__)
    return logger


def _identity(logger: Any, method_name: str, event_dict: Any) -> Any:
    return event_dict


def get_logger(name: str | None = None) -> BoundLogger:
    """Get a structlog logger bound to ``name``."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]
