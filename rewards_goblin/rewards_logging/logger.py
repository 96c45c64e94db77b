"""
Structured logging for the rewards worker and API.

Every line carries service, logger, level, timestamp and event_type (the
snake_case event name passed first to the log call). Job handling binds
job_id / job_name / attempt into context once per job (job_context), so
every line logged while the job runs is attributable without repeating
those fields at each call site.

LOG_LEVEL (default INFO) and LOG_FORMAT (json | console, default json) are
read when the module is first imported. No rewards_goblin imports here.
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

import structlog

SERVICE_NAME = "rewards-goblin"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

# A caller field named event_type would shadow the event name
SHADOWED_EVENT_TYPE_KEY = "reward_event_type"


def _add_service(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _add_timestamp(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return event_dict


def _event_to_event_type(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Move structlog's 'event' to event_type and mirror it into message.

    The event name always wins; a conflicting event_type field is kept
    under reward_event_type.
    """
    if "event" not in event_dict:
        return event_dict
    if "event_type" in event_dict:
        event_dict[SHADOWED_EVENT_TYPE_KEY] = event_dict.pop("event_type")
    event_dict["event_type"] = event_dict.pop("event")
    event_dict.setdefault("message", str(event_dict["event_type"]))
    return event_dict


def build_processors(log_format: str = LOG_FORMAT) -> list[Any]:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_service,
        _add_timestamp,
        _event_to_event_type,
    ]
    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    return processors


def configure_structlog(level: str = LOG_LEVEL, log_format: str = LOG_FORMAT) -> None:
    structlog.configure(
        processors=build_processors(log_format),
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("achievement_awarded", wallet_id=addr, achievement_id=mint_id)
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_wallet(logger: structlog.BoundLogger, wallet_id: str) -> structlog.BoundLogger:
    """Return logger with wallet_id bound; the module's logger name is kept."""
    return logger.bind(wallet_id=wallet_id)


@contextmanager
def job_context(job: Any) -> Iterator[None]:
    """Bind job_id, job_name and attempt (1-based) to every log line inside the block."""
    attempt = int(getattr(job, "attemptsMade", 0) or 0) + 1
    with structlog.contextvars.bound_contextvars(
        job_id=getattr(job, "id", None),
        job_name=getattr(job, "name", None),
        attempt=attempt,
    ):
        yield
