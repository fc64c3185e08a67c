"""Configuration package.

`get_config()` is the single source of truth; it is built lazily from the
environment for the profile selected with `set_config_name()`.
"""

from .runtime import get_runtime_config, normalize_db_uri
from .schema import AppConfig, RuntimeConfig

_config_name = "default"
_config: AppConfig | None = None


def set_config_name(name: str) -> None:
    """Select the config profile and drop any cached config."""
    global _config_name, _config
    _config_name = name or "default"
    _config = None


def get_config() -> AppConfig:
    global _config
    if _config is None:
        _config = AppConfig(runtime=get_runtime_config(_config_name))
    return _config


__all__ = [
    "AppConfig",
    "RuntimeConfig",
    "get_config",
    "set_config_name",
    "normalize_db_uri",
]
