import logging
import sys

import structlog
from fastapi import Request
from structlog.stdlib import ProcessorFormatter

# Context bound by the logging and auth middleware, copied onto every event
REQUEST_CONTEXT_KEYS = ("request_id", "ip_address", "user_id")

# Third-party loggers kept at warnings
QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncio")


def get_client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "127.0.0.1"


def merge_request_context(
    logger: structlog.BoundLogger, method_name: str, event_dict: dict
) -> dict:
    bound = structlog.contextvars.get_contextvars()
    for key in REQUEST_CONTEXT_KEYS:
        if bound.get(key) and key not in event_dict:
            event_dict[key] = bound[key]
    return event_dict


def _build_formatter(is_production: bool) -> ProcessorFormatter:
    if is_production:
        renderer = structlog.processors.JSONRenderer(sort_keys=False)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True, pad_event=8)
    return ProcessorFormatter(processor=renderer)


def setup_logging(is_production: bool = False, level: str = "INFO"):
    """Route structlog through stdlib logging.

    PROD renders one JSON object per line; everything else gets the
    colored console renderer.
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    structlog.configure(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            merge_request_context,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_build_formatter(is_production))

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(log_level)

    # uvicorn's own handlers would print every line twice
    for name in ("uvicorn", "uvicorn.access"):
        logging.getLogger(name).handlers = []
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return structlog.get_logger()


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger instance with optional name."""
    return structlog.get_logger(name)
