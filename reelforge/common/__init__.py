"""Common utilities and shared components."""

from reelforge.common.config import Settings, get_settings
from reelforge.common.logging import (
    ProgressEvent,
    ProgressLevel,
    ProgressReporter,
    get_logger,
    setup_logging,
)
from reelforge.common.retry import (
    RetryExhaustedError,
    RetryPolicy,
    exponential_backoff,
    linear_backoff,
)

__all__ = [
    "Settings",
    "get_settings",
    "get_logger",
    "setup_logging",
    "ProgressEvent",
    "ProgressLevel",
    "ProgressReporter",
    "RetryExhaustedError",
    "RetryPolicy",
    "exponential_backoff",
    "linear_backoff",
]
