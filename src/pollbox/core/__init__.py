"""Core errors and shared utilities."""

from pollbox.core.errors import (
    ConfigError,
    EmptyAnswersError,
    NotFoundError,
    NotificationError,
    PollboxError,
    StorageError,
    UnauthorizedError,
    ValidationError,
)
from pollbox.core.logging import configure_logging

__all__ = [
    "ConfigError",
    "EmptyAnswersError",
    "NotFoundError",
    "NotificationError",
    "PollboxError",
    "StorageError",
    "UnauthorizedError",
    "ValidationError",
    "configure_logging",
]
