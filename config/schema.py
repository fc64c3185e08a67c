"""Configuration schema dataclasses."""

import logging
import re
from dataclasses import dataclass

from .base import DEFAULT_LEGACY_CONTENT_TABLE

_TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_]*$")


@dataclass
class RuntimeConfig:
    """Runtime configuration - environment-driven settings."""

    # Database
    db_uri: str
    table_prefix: str = ""
    legacy_content_table: str = DEFAULT_LEGACY_CONTENT_TABLE

    # Migration behaviour
    dry_run: bool = False

    # Logging
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate after initialization."""
        if not self.db_uri:
            raise ValueError("DATABASE_URL must not be empty")
        if not _TABLE_NAME_PATTERN.match(self.table_prefix or ""):
            raise ValueError("DB_TABLE_PREFIX may only contain letters, digits and '_'")
        if not self.legacy_content_table or not _TABLE_NAME_PATTERN.match(
            self.legacy_content_table
        ):
            raise ValueError(
                "LEGACY_CONTENT_TABLE may only contain letters, digits and '_'"
            )
        self.log_level = (self.log_level or "INFO").upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"Unknown LOG_LEVEL: {self.log_level}")


@dataclass
class AppConfig:
    """Application configuration."""

    runtime: RuntimeConfig


__all__ = ["RuntimeConfig", "AppConfig"]
