"""Logging setup driven by the ``[logging]`` config section.

Modules log through the standard library (``logging.getLogger(__name__)``).
With ``structured = true`` the handler renders each record as one JSON
line through structlog's processor chain.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from structlog.typing import Processor

    from pollbox.config.schema import LoggingConfig

_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def json_formatter() -> structlog.stdlib.ProcessorFormatter:
    """Formatter rendering stdlib records as JSON (timestamp, level, logger, event)."""
    pre_chain: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
    )


def configure_logging(config: LoggingConfig) -> logging.Handler:
    """Install a single handler on the ``pollbox`` logger.

    Calling it again replaces the previously installed handler, so the CLI
    and the app factory can both call it safely.
    """
    root = logging.getLogger("pollbox")
    for old in list(root.handlers):
        if getattr(old, "_pollbox", False):
            root.removeHandler(old)
            old.close()

    handler: logging.Handler
    if config.file:
        path = Path(config.file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path)
    else:
        handler = logging.StreamHandler()

    if config.structured:
        handler.setFormatter(json_formatter())
    else:
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))
    handler._pollbox = True  # type: ignore[attr-defined]

    root.addHandler(handler)
    root.setLevel(config.level.upper())
    return handler
