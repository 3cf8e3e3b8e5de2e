"""
Configuration for the swinelink client.

This module defines the configuration structures (API credentials, state
persistence, logging) and loads them from layered sources. Priority, highest
first: process environment, user config file, project .env file.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Sequence

from dotenv import dotenv_values

from .exceptions import ConfigurationError


DEFAULT_BASE_URL = "https://api.porkbun.com/api/json/v3"

USER_CONFIG_DIR = Path.home() / ".config" / "swinelink"
USER_CONFIG_PATHS = (
    USER_CONFIG_DIR / "swinelink.conf",
    Path.home() / ".swinelink",
)
DEFAULT_STATE_FILE = USER_CONFIG_DIR / "state.json"

DEFAULT_USER_CONFIG = """# Swinelink Configuration
# Get your API credentials from: https://porkbun.com/account/api

PORKBUN_API_KEY=your_api_key_here
PORKBUN_SECRET_KEY=your_secret_key_here
PORKBUN_BASE_URL=https://api.porkbun.com/api/json/v3
"""

CONFIG_KEYS = (
    "PORKBUN_API_KEY",
    "PORKBUN_SECRET_KEY",
    "PORKBUN_BASE_URL",
    "SWINELINK_STATE_FILE",
    "SWINELINK_LOG_LEVEL",
    "SWINELINK_LOG_FORMAT",
)

LOG_LEVELS = ("debug", "info", "warn", "error")
LOG_FORMATS = ("text", "json", "both")


@dataclass(frozen=True)
class ApiConfig:
    """Credentials and endpoint of the registrar API."""

    api_key: Optional[str] = None
    secret_key: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL

    @property
    def missing_credentials(self) -> list[str]:
        missing = []
        if not self.api_key:
            missing.append("PORKBUN_API_KEY")
        if not self.secret_key:
            missing.append("PORKBUN_SECRET_KEY")
        return missing


@dataclass(frozen=True)
class PersistenceConfig:
    """Location of the local state file."""

    state_file_path: Path = DEFAULT_STATE_FILE


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = "warn"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass(frozen=True)
class SystemConfig:
    """Main configuration combining all sub-configurations."""

    api: ApiConfig = field(default_factory=ApiConfig)
    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _read_key_values(path: Path) -> dict[str, str]:
    """Read KEY=VALUE lines; unreadable or missing files yield nothing."""
    try:
        values = dotenv_values(path)
    except (OSError, UnicodeDecodeError):
        return {}
    return {k.strip().upper(): v.strip() for k, v in values.items() if v is not None}


def find_user_config(paths: Sequence[Path] = USER_CONFIG_PATHS) -> Optional[Path]:
    """Return the first existing user config file."""
    for path in paths:
        if path.is_file():
            return path
    return None


def collect_settings(
    environ: Optional[Mapping[str, str]] = None,
    user_config_paths: Sequence[Path] = USER_CONFIG_PATHS,
    dotenv_path: Optional[Path] = None,
) -> dict[str, str]:
    """
    Merge raw settings from all sources.

    Args:
        environ: Environment mapping (defaults to os.environ)
        user_config_paths: Candidate user config files, first existing one wins
        dotenv_path: Project .env file (defaults to ./.env)

    Returns:
        Mapping of recognised keys to their effective values
    """
    environ = os.environ if environ is None else environ
    dotenv_path = dotenv_path if dotenv_path is not None else Path.cwd() / ".env"

    settings: dict[str, str] = {}
    layers = [_read_key_values(dotenv_path) if dotenv_path.is_file() else {}]

    user_config = find_user_config(user_config_paths)
    if user_config is not None:
        layers.append(_read_key_values(user_config))

    layers.append({k: environ[k] for k in CONFIG_KEYS if environ.get(k)})

    for layer in layers:
        for key in CONFIG_KEYS:
            if layer.get(key):
                settings[key] = layer[key]
    return settings


def _choice(settings: Mapping[str, str], key: str, default: str, allowed: Sequence[str]) -> str:
    value = settings.get(key, default).lower()
    if value not in allowed:
        raise ConfigurationError(
            code="invalid_value",
            message=f"Invalid {key}: {value!r} (expected one of: {', '.join(allowed)})",
            details={"key": key, "value": value, "allowed": list(allowed)},
        )
    return value


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    user_config_paths: Sequence[Path] = USER_CONFIG_PATHS,
    dotenv_path: Optional[Path] = None,
) -> SystemConfig:
    """
    Load the system configuration from environment, user config and .env.

    Reads files and the environment only; nothing is printed and os.environ
    is never modified.

    Raises:
        ConfigurationError: If the log level or log format is not recognised
    """
    settings = collect_settings(environ, user_config_paths, dotenv_path)

    state_file = settings.get("SWINELINK_STATE_FILE")
    return SystemConfig(
        api=ApiConfig(
            api_key=settings.get("PORKBUN_API_KEY"),
            secret_key=settings.get("PORKBUN_SECRET_KEY"),
            base_url=settings.get("PORKBUN_BASE_URL", DEFAULT_BASE_URL),
        ),
        persistence=PersistenceConfig(
            state_file_path=Path(state_file).expanduser() if state_file else DEFAULT_STATE_FILE,
        ),
        logging=LoggingConfig(
            level=_choice(settings, "SWINELINK_LOG_LEVEL", "warn", LOG_LEVELS),
            output_format=_choice(settings, "SWINELINK_LOG_FORMAT", "text", LOG_FORMATS),
        ),
    )


def get_user_config_path() -> Path:
    return USER_CONFIG_PATHS[0]


def create_default_user_config(config_path: Optional[Path] = None) -> Optional[Path]:
    """
    Write the commented configuration template.

    Args:
        config_path: Target file (defaults to the primary user config path)

    Returns:
        The path written, or None if a config file already exists there
    """
    config_path = config_path or get_user_config_path()
    if config_path.exists():
        return None

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(DEFAULT_USER_CONFIG, encoding="utf-8")
    return config_path
