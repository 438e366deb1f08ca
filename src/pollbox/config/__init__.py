"""Configuration loading and validation."""

from pollbox.config.loader import load_config
from pollbox.config.schema import (
    APIConfig,
    AuthConfig,
    DatabaseConfig,
    LoggingConfig,
    MailConfig,
    PollboxConfig,
)

__all__ = [
    "APIConfig",
    "AuthConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "MailConfig",
    "PollboxConfig",
    "load_config",
]
