"""Default configuration constants.

Values here are fallbacks; `config.runtime` overrides them from the environment.
The database has no default: the Craft installation must be named explicitly.
"""

# Database
DEFAULT_TABLE_PREFIX = ""
DEFAULT_LEGACY_CONTENT_TABLE = "lenz_linkfield"

# Logging
DEFAULT_LOG_LEVEL = "INFO"
