"""Exception hierarchy for pollbox.

Every module imports from here. The hierarchy is:

    PollboxError
    ├── UnauthorizedError
    ├── NotFoundError
    ├── ValidationError(field, message)
    │   └── EmptyAnswersError
    ├── ConfigError
    ├── StorageError
    └── NotificationError
"""

from __future__ import annotations


class PollboxError(Exception):
    """Base exception for all pollbox errors."""


# ─── Request Errors ───────────────────────────────────────────


class UnauthorizedError(PollboxError):
    """Missing, malformed or rejected bearer credential."""


class NotFoundError(PollboxError):
    """A referenced question or answer does not exist."""

    def __init__(self, kind: str, identifier: str) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class ValidationError(PollboxError):
    """A write was refused by a domain rule.

    ``field`` names the offending attribute in boundary (camelCase) form,
    ``message`` is the human-readable reason.
    """

    status_code = 422

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field} {message}")


class EmptyAnswersError(ValidationError):
    """A question was submitted without any answer options."""

    status_code = 400

    def __init__(self) -> None:
        super().__init__("answers", "Answers should be filled")


# ─── Configuration Errors ─────────────────────────────────────


class ConfigError(PollboxError):
    """Invalid configuration."""


# ─── Storage Errors ───────────────────────────────────────────


class StorageError(PollboxError):
    """Database layer error."""


# ─── Notification Errors ──────────────────────────────────────


class NotificationError(PollboxError):
    """Mail could not be delivered. Never surfaces to API callers."""
