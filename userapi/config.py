"""Configuration loaded from a dotenv file and the process environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from userapi import logger

# Environment variables in the order of the DBConfig fields.
_DB_VARIABLES = (
    "POSTGRES_HOST",
    "POSTGRES_PORT",
    "POSTGRES_USER",
    "POSTGRES_PASSWORD",
    "POSTGRES_DB",
)


class ConfigError(Exception):
    """Raised when configuration is missing or cannot be loaded."""


@dataclass(frozen=True)
class DBConfig:
    """Connection settings for the PostgreSQL database."""

    host: str
    port: str
    user: str
    password: str = field(repr=False)
    db_name: str


def load_config(path=".env") -> None:
    """Load environment variables from a dotenv file; existing ones win."""
    env_path = Path(path)
    if not env_path.exists():
        raise ConfigError(f"{env_path.name} file not found")
    try:
        load_dotenv(env_path, override=False)
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"failed to load {env_path.name} file: {exc}") from exc
    logger.info("Successfully loaded config")


def get_env(key: str) -> str:
    """Return a non-empty environment variable or raise ConfigError."""
    value = os.environ.get(key, "")
    if not value:
        raise ConfigError(f"environment variable {key} not found")
    return value


def get_db_config() -> DBConfig:
    """Build the database settings from POSTGRES_* variables."""
    config = DBConfig(*(get_env(name) for name in _DB_VARIABLES))
    logger.info("Loaded database configuration")
    return config