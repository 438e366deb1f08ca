"""Pydantic models for pollbox configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    """Database connection settings."""

    url: str = "sqlite+aiosqlite:///~/.local/share/pollbox/pollbox.db"
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 3600


class APIConfig(BaseModel):
    """REST server settings."""

    host: str = "127.0.0.1"
    port: int = 8080
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    rate_limit: int = 60
    rate_limit_window: int = 60


class AuthConfig(BaseModel):
    """Bearer token verification."""

    jwt_secret: str = ""
    jwt_secret_env: str | None = "POLLBOX_JWT_SECRET"
    token_expiry_hours: int = 24


class MailConfig(BaseModel):
    """Outgoing notification mail."""

    enabled: bool = False
    smtp_host: str = "localhost"
    smtp_port: int = 587
    use_tls: bool = True
    username: str = ""
    password: str | None = None
    password_env: str | None = "POLLBOX_SMTP_PASSWORD"
    sender: str = "pollbox@localhost"
    recipients: list[str] = Field(default_factory=list)
    timeout: float = 10.0
    queue_size: int = 100


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    file: str = ""
    structured: bool = False


class PollboxConfig(BaseModel):
    """Top-level configuration for pollbox."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    mail: MailConfig = Field(default_factory=MailConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
