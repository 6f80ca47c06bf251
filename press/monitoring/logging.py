"""
Structured logging for the publishing pipeline.

Pipeline services log events (``post_created``, ``cover_rejected``,
``slug_attempts_exhausted``) through structlog; infrastructure modules keep
plain stdlib loggers. Both end up on the root handlers installed by
``configure_logging``: a console renderer in development, JSON elsewhere.

Every event passes through ``sanitize_event_dict`` before rendering, so
author emails and bearer tokens never reach a log line, and the request
id bound by the logging middleware is merged into each event.

>>> from press.monitoring import get_logger
>>> get_logger("press.services.publishing").info("post_created", slug="hello-world")
"""

from logging import INFO, Formatter, LogRecord, StreamHandler, root
from logging.handlers import RotatingFileHandler
from pathlib import Path
from re import compile as re_compile
from typing import Any

from structlog import configure
from structlog import get_logger as struct_logger
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars
from structlog.dev import ConsoleRenderer, RichTracebackFormatter
from structlog.processors import (
    JSONRenderer,
    StackInfoRenderer,
    UnicodeDecoder,
    add_log_level,
    format_exc_info,
)
from structlog.stdlib import (
    BoundLogger,
    LoggerFactory,
    PositionalArgumentsFormatter,
    ProcessorFormatter,
    add_logger_name,
    filter_by_level,
)
from structlog.types import EventDict, Processor, WrappedLogger

from press.configs.settings import settings
from press.utils.helpers import local_timestamp

REDACTED_HEADERS = frozenset({"authorization", "cookie", "proxy-authorization", "x-api-key"})

# JWT before email: a token payload can contain something that looks like an address.
REDACTIONS = (
    (re_compile(r"eyJ[\w-]*\.eyJ[\w-]*\.[\w-]*"), "[REDACTED_JWT]"),
    (re_compile(r"[\w.%+-]+@[\w.-]+\.[a-zA-Z]{2,}"), "[REDACTED_EMAIL]"),
)

_ESCAPES = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t", "\x00": ""})


def sanitize_log_message(message: str) -> str:
    r"""
    Escape line breaks so a crafted title cannot forge extra log lines.

    >>> sanitize_log_message("Hello\nWorld")
    'Hello\\nWorld'
    """
    return message.translate(_ESCAPES)


def sanitize_headers(headers: dict[str, Any]) -> dict[str, Any]:
    return {
        name: "[REDACTED]" if name.lower() in REDACTED_HEADERS else value
        for name, value in headers.items()
    }


def redact_pii(message: str) -> str:
    """
    >>> redact_pii("author ana@example.com signed in")
    'author [REDACTED_EMAIL] signed in'
    """
    for pattern, replacement in REDACTIONS:
        message = pattern.sub(replacement, message)
    return message


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["timestamp"] = local_timestamp()
    return event_dict


def sanitize_event_dict(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Escape and redact string values; mask credential headers."""
    for key, value in event_dict.items():
        if isinstance(value, str):
            event_dict[key] = redact_pii(sanitize_log_message(value))
        elif key.lower() == "headers" and isinstance(value, dict):
            event_dict[key] = sanitize_headers(value)
    return event_dict


def _renderer(*, colors: bool) -> Processor:
    if settings.ENVIRONMENT == "development":
        return ConsoleRenderer(
            colors=colors,
            pad_level=False,
            exception_formatter=RichTracebackFormatter(),
        )
    return JSONRenderer()


def _formatter(*, colors: bool) -> Formatter:
    return ProcessorFormatter(
        processor=_renderer(colors=colors),
        foreign_pre_chain=[add_log_level, add_timestamp],
    )


def _from_structlog(record: LogRecord) -> bool:
    # Stdlib module loggers already write to LOG_FILE through file_logger().
    return hasattr(record, "_logger")


def configure_logging() -> None:
    """
    Install the structlog pipeline and the root handlers.

    Safe to call again on reload: existing root handlers are replaced.
    """
    root.handlers.clear()
    root.setLevel(settings.LOG_LEVEL.upper())

    configure(
        processors=[
            filter_by_level,
            merge_contextvars,
            add_logger_name,
            add_log_level,
            add_timestamp,
            PositionalArgumentsFormatter(),
            StackInfoRenderer(),
            format_exc_info,
            UnicodeDecoder(),
            sanitize_event_dict,
            ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=BoundLogger,
        cache_logger_on_first_use=True,
    )

    console = StreamHandler()
    console.setFormatter(_formatter(colors=True))
    root.addHandler(console)

    if settings.LOG_TO_FILE:
        log_file = Path(settings.LOG_FILE)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        events = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=5)
        events.setLevel(INFO)
        events.addFilter(_from_structlog)
        events.setFormatter(_formatter(colors=False))
        root.addHandler(events)


def get_logger(name: str) -> BoundLogger:
    return struct_logger(name)


def bind_request_id(request_id: str) -> None:
    bind_contextvars(request_id=request_id)


def bind_author(author_id: int) -> None:
    """Tag the remaining events of this request with the acting author."""
    bind_contextvars(author_id=author_id)


def clear_context() -> None:
    clear_contextvars()
