"""Structured logging configuration and the user-facing progress channel."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

import structlog


def setup_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structured logging for the application."""

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if json_logs:
        processors = shared_processors + [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # google-genai and httpx are chatty at INFO
    for noisy in ("httpx", "google_genai", "google_genai.models", "gradio_client"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


# =============================================================================
# Progress channel
# =============================================================================


class ProgressLevel(str, Enum):
    """Severity of a user-facing progress message."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    CONNECT = "connect"


_LEVEL_TO_METHOD = {
    ProgressLevel.INFO: "info",
    ProgressLevel.SUCCESS: "info",
    ProgressLevel.CONNECT: "info",
    ProgressLevel.WARNING: "warning",
    ProgressLevel.ERROR: "error",
}


@dataclass(frozen=True)
class ProgressEvent:
    """A single progress message delivered to listeners."""

    message: str
    level: ProgressLevel
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    fields: dict[str, Any] = field(default_factory=dict)


ProgressListener = Callable[[ProgressEvent], None]


class ProgressReporter:
    """Fire-and-forget sink for human-readable pipeline progress.

    Every message is written to the structured log and then fanned out to
    registered listeners (a UI, a test recorder...). A failing listener is
    logged and skipped; it never propagates into the pipeline.
    """

    def __init__(self, name: str = "reelforge.progress"):
        self._logger = get_logger(name)
        self._listeners: list[ProgressListener] = []

    def subscribe(self, listener: ProgressListener) -> None:
        """Register a listener for future events."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: ProgressListener) -> None:
        """Remove a previously registered listener."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(
        self,
        message: str,
        level: ProgressLevel = ProgressLevel.INFO,
        **fields: Any,
    ) -> None:
        """Publish a progress message."""
        level = ProgressLevel(level)
        log_method = getattr(self._logger, _LEVEL_TO_METHOD[level])
        log_method(message, progress=level.value, **fields)

        event = ProgressEvent(message=message, level=level, fields=fields)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                self._logger.debug(
                    "progress_listener_failed",
                    listener=getattr(listener, "__name__", repr(listener)),
                    error=str(e),
                )
