"""Flask application factory for the link field migrator."""

import json
import logging
import os

from flask import Flask
from flask_sqlalchemy import SQLAlchemy

from config import get_config, set_config_name

# SQLAlchemy instance shared by the services
db = SQLAlchemy()
_LOGGER_NAME = "link_migrator"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def encode_json(value, **kwargs) -> str:
    """Encode like the host CMS: compact, unescaped unicode and slashes."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), **kwargs)


def _configure_logger(level: str) -> logging.Logger:
    logger = logging.getLogger(_LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


def create_app(
    config_name="default",
    db_uri_override: str | None = None,
    table_prefix_override: str | None = None,
):
    """
    Application factory.

    Args:
        config_name: config profile ('development', 'production', 'default')
        db_uri_override: database URI that wins over DATABASE_URL
        table_prefix_override: host table prefix that wins over DB_TABLE_PREFIX

    Returns:
        Flask app instance with `db` bound
    """
    app = Flask(__name__)

    injected_database_url = False
    if db_uri_override and not os.environ.get("DATABASE_URL"):
        # Config refuses to bootstrap without DATABASE_URL; an explicit
        # override satisfies that requirement.
        os.environ["DATABASE_URL"] = db_uri_override
        injected_database_url = True

    set_config_name(config_name)
    try:
        cfg = get_config()
    finally:
        if injected_database_url:
            os.environ.pop("DATABASE_URL", None)

    effective_db_uri = db_uri_override or cfg.runtime.db_uri
    app.config["SQLALCHEMY_DATABASE_URI"] = effective_db_uri
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    engine_options = {"json_serializer": encode_json}
    if str(effective_db_uri).startswith("postgres"):
        engine_options.update(
            pool_pre_ping=True,
            pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "1800")),
        )
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = engine_options
    app.config["TABLE_PREFIX"] = (
        cfg.runtime.table_prefix
        if table_prefix_override is None
        else table_prefix_override
    )
    app.config["LEGACY_CONTENT_TABLE"] = cfg.runtime.legacy_content_table
    app.config["DRY_RUN"] = cfg.runtime.dry_run

    _configure_logger(cfg.runtime.log_level)

    db.init_app(app)
    return app
