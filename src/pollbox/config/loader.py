"""Load :class:`PollboxConfig` from TOML files and the environment.

Sources, lowest priority first:

- ``$XDG_CONFIG_HOME/pollbox/config.toml`` (``~/.config`` when unset)
- ``./pollbox.toml``
- the file named by ``$POLLBOX_CONFIG``
- the ``path`` argument (``pollbox --config``)
- the ``overrides`` argument

The last two file sources must exist; the first two are optional.
Secrets (``auth.jwt_secret``, ``mail.password``) left empty by every
source are read from the environment variable named by the matching
``*_env`` setting.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from pollbox.core.errors import ConfigError

from .schema import PollboxConfig

# (section, secret field); the env var name lives in "<field>_env"
_SECRETS: tuple[tuple[str, str], ...] = (
    ("auth", "jwt_secret"),
    ("mail", "password"),
)


def _config_files(explicit: str | Path | None) -> list[Path]:
    xdg_home = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    candidates: list[tuple[Path, bool]] = [
        (Path(xdg_home) / "pollbox" / "config.toml", False),
        (Path.cwd() / "pollbox.toml", False),
    ]
    env_path = os.environ.get("POLLBOX_CONFIG")
    if env_path:
        candidates.append((Path(env_path), True))
    if explicit is not None:
        candidates.append((Path(explicit), True))

    found = []
    for path, required in candidates:
        if path.is_file():
            found.append(path)
        elif required:
            msg = f"Config file not found: {path}"
            raise ConfigError(msg)
    return found


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return *base* updated by *override*, merging nested tables."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = _deep_merge(current, value)
        merged[key] = value
    return merged


def _fill_secrets(config: PollboxConfig) -> None:
    for section_name, field in _SECRETS:
        section = getattr(config, section_name)
        env_name = getattr(section, f"{field}_env")
        if env_name and not getattr(section, field):
            value = os.environ.get(env_name)
            if value:
                setattr(section, field, value)


def load_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> PollboxConfig:
    """Build the effective configuration.

    Raises:
        ConfigError: A required file is missing, a file is not valid
            TOML, or the merged values fail validation.
    """
    raw: dict[str, Any] = {}
    for config_file in _config_files(path):
        try:
            raw = _deep_merge(raw, tomllib.loads(config_file.read_text("utf-8")))
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {config_file}: {e}"
            raise ConfigError(msg) from e
        except OSError as e:
            msg = f"Cannot read config file {config_file}: {e}"
            raise ConfigError(msg) from e
    raw = _deep_merge(raw, overrides or {})

    try:
        config = PollboxConfig.model_validate(raw)
    except PydanticValidationError as e:
        msg = f"Configuration validation failed: {e}"
        raise ConfigError(msg) from e

    _fill_secrets(config)
    return config
