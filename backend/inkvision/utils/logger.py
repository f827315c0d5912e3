# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Structured Logging
structlog everywhere: snake_case event names with keyword context.
Inside API requests every entry also carries the session_id, bound by
the session dependency through bind_session().

JSON lines in production, coloured console output at DEBUG.
"""

import logging
import sys
from enum import Enum
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from inkvision.config import get_settings

# Third-party loggers that are chatty at INFO (httpx logs every fetch)
_QUIET_LOGGERS = ("httpx", "httpcore", "PIL", "multipart")


def _add_app_info(
    logger: Any, method: str, event_dict: EventDict
) -> EventDict:
    event_dict["app"] = "inkvision"
    return event_dict


def _flatten_enums(
    logger: Any, method: str, event_dict: EventDict
) -> EventDict:
    """Log Slot / BlendMode / TattooStyle members by value."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
    return event_dict


def _drop_color_message_key(
    logger: Any, method: str, event_dict: EventDict
) -> EventDict:
    event_dict.pop("color_message", None)
    return event_dict


def configure_logging() -> None:
    """Configure structlog and the stdlib root logger. Called once at startup."""
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_app_info,
        _flatten_enums,
        _drop_color_message_key,
    ]

    if settings.log_level == "DEBUG":
        renderer: Processor = structlog.dev.ConsoleRenderer(colors=True)
    else:
        shared_processors.append(structlog.processors.dict_tracebacks)
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stdout),
        cache_logger_on_first_use=True,
    )

    # uvicorn / fastapi go through stdlib logging
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def bind_session(session_id: str) -> None:
    """Attach session_id to every log entry emitted in the current context."""
    structlog.contextvars.bind_contextvars(session_id=session_id)


def get_logger(name: str = "inkvision") -> structlog.BoundLogger:
    """
    Return a structlog bound logger.

    Usage:
        log = get_logger(__name__)
        log.info("slot_loaded", slot=Slot.BACKGROUND, width=1920, height=1080)
    """
    return structlog.get_logger(name)
