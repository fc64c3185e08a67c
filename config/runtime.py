"""Runtime configuration - environment-driven settings.

Reads environment variables and applies defaults for a migration run.
"""

import os
from pathlib import Path

from .base import (
    DEFAULT_LEGACY_CONTENT_TABLE,
    DEFAULT_LOG_LEVEL,
    DEFAULT_TABLE_PREFIX,
)
from .schema import RuntimeConfig


def _env_flag(name, default=False):
    """Read a boolean environment variable."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes", "on")


def _env_str(name, default):
    """Read a string environment variable, treating blanks as unset."""
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def normalize_db_uri(db_value: str | None) -> str | None:
    """Map bare Postgres schemes onto the psycopg 3 driver."""
    if not db_value:
        return None
    db_uri = db_value.strip()
    if db_uri.startswith("postgres://"):
        return db_uri.replace("postgres://", "postgresql+psycopg://", 1)
    if db_uri.startswith("postgresql://"):
        return db_uri.replace("postgresql://", "postgresql+psycopg://", 1)
    return db_uri


def _resolve_db_uri(db_env: str) -> str:
    """Resolve DB URI from a URL or a local SQLite file path."""
    if "://" in db_env:
        return normalize_db_uri(db_env)
    return _sqlite_uri(Path(db_env))


def get_runtime_config(flask_config_name="default") -> RuntimeConfig:
    """
    Build runtime configuration from environment variables.

    Args:
        flask_config_name: Config profile name (default/development/production).
                          Every profile requires an explicit database.

    Returns:
        RuntimeConfig instance
    """
    db_env = os.environ.get("DATABASE_URL") or os.environ.get("DB_PATH")
    if not db_env:
        raise RuntimeError(
            "DATABASE_URL is required: point it at the Craft database to migrate."
        )
    db_uri = _resolve_db_uri(db_env)

    return RuntimeConfig(
        db_uri=db_uri,
        table_prefix=_env_str("DB_TABLE_PREFIX", DEFAULT_TABLE_PREFIX),
        legacy_content_table=_env_str(
            "LEGACY_CONTENT_TABLE", DEFAULT_LEGACY_CONTENT_TABLE
        ),
        dry_run=_env_flag("DRY_RUN", default=False),
        log_level=_env_str("LOG_LEVEL", DEFAULT_LOG_LEVEL),
    )


def _sqlite_uri(path: Path) -> str:
    """Convert a Path to SQLite URI."""
    return f"sqlite:///{path.resolve().as_posix()}"


__all__ = ["get_runtime_config", "normalize_db_uri", "_env_flag"]
