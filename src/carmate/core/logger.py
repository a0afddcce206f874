"""Logging configuration for the API process and the reminder worker."""

import logging
import os
from logging.handlers import RotatingFileHandler

import structlog
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer
from structlog.types import EventDict, Processor

from ..core.config import settings

# Request-scoped keys bound by LoggerMiddleware, each gated by a *_LOG_INCLUDE_* flag.
REQUEST_CONTEXT_KEYS = {
    "request_id": "REQUEST_ID",
    "path": "PATH",
    "method": "METHOD",
    "client_host": "CLIENT_HOST",
    "status_code": "STATUS_CODE",
}


def drop_color_message_key(_, __, event_dict: EventDict) -> EventDict:
    """Uvicorn adds `color_message` which duplicates `event`.

    Remove it to avoid double logging.
    """
    event_dict.pop("color_message", None)
    return event_dict


def request_context_filter(prefix: str) -> Processor:
    """Build a processor dropping the request context keys disabled for a handler.

    ``prefix`` is ``FILE`` or ``CONSOLE`` and selects the matching
    ``<prefix>_LOG_INCLUDE_<FIELD>`` settings.
    """

    def _filter(_, __, event_dict: EventDict) -> EventDict:
        for key, flag in REQUEST_CONTEXT_KEYS.items():
            if not getattr(settings, f"{prefix}_LOG_INCLUDE_{flag}"):
                event_dict.pop(key, None)
        return event_dict

    return _filter


timestamper = structlog.processors.TimeStamper(fmt="iso")
SHARED_PROCESSORS: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.stdlib.ExtraAdder(),
    drop_color_message_key,
    timestamper,
    structlog.processors.StackInfoRenderer(),
]


structlog.configure(
    processors=SHARED_PROCESSORS + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def build_formatter(*, json_output: bool, pre_chain: list[Processor]) -> structlog.stdlib.ProcessorFormatter:
    """Build a ProcessorFormatter with the specified renderer and processors."""
    renderer = JSONRenderer() if json_output else ConsoleRenderer()

    processors = [structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer]

    if json_output:
        pre_chain = pre_chain + [structlog.processors.format_exc_info]

    return structlog.stdlib.ProcessorFormatter(foreign_pre_chain=pre_chain, processors=processors)


LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "logs")


def configure_logging() -> None:
    """Attach the rotating file handler and the console handler to the root logger."""
    os.makedirs(LOG_DIR, exist_ok=True)

    file_handler = RotatingFileHandler(
        filename=os.path.join(LOG_DIR, "carmate.log"),
        maxBytes=settings.FILE_LOG_MAX_BYTES,
        backupCount=settings.FILE_LOG_BACKUP_COUNT,
    )
    file_handler.setLevel(settings.FILE_LOG_LEVEL)
    file_handler.setFormatter(
        build_formatter(
            json_output=settings.FILE_LOG_FORMAT_JSON,
            pre_chain=SHARED_PROCESSORS + [request_context_filter("FILE")],
        )
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(settings.CONSOLE_LOG_LEVEL)
    console_handler.setFormatter(
        build_formatter(
            json_output=settings.CONSOLE_LOG_FORMAT_JSON,
            pre_chain=SHARED_PROCESSORS + [request_context_filter("CONSOLE")],
        )
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.handlers.clear()  # avoid duplicate logs
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access", "arq.worker"):
        logger = logging.getLogger(logger_name)
        logger.handlers.clear()
        logger.propagate = True
        logger.setLevel(logging.INFO)


configure_logging()
