"""SQLAlchemy Core definitions for the host CMS tables the migrator touches.

Only the columns the migration reads or writes are declared. Table names carry
the installation's table prefix (Craft's `{{%...}}` placeholder).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from flask import current_app
from sqlalchemy import JSON, Column, DateTime, Integer, MetaData, String, Table, Text
from sqlalchemy.dialects.postgresql import JSONB

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_]*$")

# Craft stores these as `json` on MySQL and `jsonb` on Postgres.
JsonColumn = JSON().with_variant(JSONB(), "postgresql")


@dataclass(frozen=True)
class HostTables:
    metadata: MetaData
    fields: Table
    elements: Table
    elements_sites: Table
    fieldlayouts: Table
    legacy_links: Table


@lru_cache(maxsize=None)
def build_tables(prefix: str = "", legacy_table: str = "lenz_linkfield") -> HostTables:
    """Return table objects for `prefix`; cached per (prefix, legacy_table)."""
    for name in (prefix, legacy_table):
        if not _NAME_PATTERN.match(name or ""):
            raise ValueError(f"Invalid table name component: {name!r}")

    metadata = MetaData()
    fields = Table(
        f"{prefix}fields",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("name", String(255)),
        Column("handle", String(64), nullable=False),
        Column("context", String(255), nullable=False, default="global"),
        Column("type", String(255), nullable=False),
        Column("settings", Text),
        Column("uid", String(36), nullable=False, unique=True),
    )
    elements = Table(
        f"{prefix}elements",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("fieldLayoutId", Integer),
        Column("type", String(255)),
        Column("dateDeleted", DateTime),
        Column("uid", String(36)),
    )
    elements_sites = Table(
        f"{prefix}elements_sites",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("elementId", Integer, nullable=False),
        Column("siteId", Integer, nullable=False),
        Column("content", JsonColumn),
        Column("uid", String(36)),
    )
    fieldlayouts = Table(
        f"{prefix}fieldlayouts",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("type", String(255)),
        Column("config", JsonColumn),
        Column("dateDeleted", DateTime),
        Column("uid", String(36)),
    )
    legacy_links = Table(
        f"{prefix}{legacy_table}",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("elementId", Integer, nullable=False),
        Column("siteId", Integer, nullable=False),
        Column("fieldId", Integer, nullable=False),
        Column("linkedId", Integer),
        Column("linkedSiteId", Integer),
        Column("type", String(63)),
        Column("linkedTitle", String(255)),
        Column("linkedUrl", Text),
        Column("payload", Text),
        Column("uid", String(36)),
    )
    return HostTables(
        metadata=metadata,
        fields=fields,
        elements=elements,
        elements_sites=elements_sites,
        fieldlayouts=fieldlayouts,
        legacy_links=legacy_links,
    )


def current_tables() -> HostTables:
    """Tables for the prefix configured on the active Flask app."""
    return build_tables(
        current_app.config.get("TABLE_PREFIX", ""),
        current_app.config.get("LEGACY_CONTENT_TABLE", "lenz_linkfield"),
    )


__all__ = ["HostTables", "build_tables", "current_tables"]
