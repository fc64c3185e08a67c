"""Repositories over the host CMS tables.

Each store wraps one concern (field registry, legacy link content, element
content) and is injected into the migration passes so tests can substitute
their own.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

from sqlalchemy import and_, or_, select, update

from link_migrator import db
from link_migrator.services.transaction import transaction
from link_migrator.tables import HostTables, current_tables


@dataclass(frozen=True)
class FieldDefinition:
    id: int
    handle: str
    uid: str
    type: str
    settings: Optional[str] = None
    context: str = "global"

    @property
    def is_global(self) -> bool:
        return self.context == "global"

    @classmethod
    def from_row(cls, row) -> "FieldDefinition":
        return cls(
            id=row["id"],
            handle=row["handle"],
            uid=row["uid"],
            type=row["type"],
            settings=row["settings"],
            context=row["context"] or "global",
        )


class FieldStore:
    """Reads and rewrites rows of the `fields` table."""

    def __init__(self, tables: HostTables | None = None, dry_run: bool = False):
        self.tables = tables or current_tables()
        self.dry_run = dry_run

    def fields_of_type(self, *types: str) -> List[FieldDefinition]:
        fields = self.tables.fields
        stmt = (
            select(fields)
            .where(or_(*(fields.c.type == t for t in types)))
            .order_by(fields.c.id)
        )
        rows = db.session.execute(stmt).mappings().all()
        return [FieldDefinition.from_row(row) for row in rows]

    def handles_by_uid(self) -> dict[str, str]:
        fields = self.tables.fields
        rows = db.session.execute(select(fields.c.uid, fields.c.handle)).all()
        return {str(uid): str(handle) for uid, handle in rows}

    def update_field(self, uid: str, field_type: str, settings: str) -> None:
        fields = self.tables.fields
        stmt = (
            update(fields)
            .where(fields.c.uid == uid)
            .values(type=field_type, settings=settings)
        )
        with transaction(dry_run=self.dry_run):
            db.session.execute(stmt)


class LegacyContentStore:
    """Read-only access to the legacy link content table."""

    def __init__(self, tables: HostTables | None = None):
        self.tables = tables or current_tables()

    def rows_for_field(self, field_id: int) -> List[dict]:
        links = self.tables.legacy_links
        stmt = (
            select(links)
            .where(links.c.fieldId == field_id)
            .order_by(links.c.elementId, links.c.siteId, links.c.id)
        )
        return [dict(row) for row in db.session.execute(stmt).mappings().all()]


class ElementContentStore:
    """JSON content blobs in `elements_sites`, keyed by (elementId, siteId)."""

    def __init__(self, tables: HostTables | None = None, dry_run: bool = False):
        self.tables = tables or current_tables()
        self.dry_run = dry_run

    def _key(self, element_id: int, site_id: int):
        sites = self.tables.elements_sites
        return and_(sites.c.elementId == element_id, sites.c.siteId == site_id)

    def fetch_content(self, element_id: int, site_id: int) -> Any:
        """Return the stored content as decoded by the JSON column type."""
        sites = self.tables.elements_sites
        stmt = select(sites.c.content).where(self._key(element_id, site_id))
        return db.session.execute(stmt).scalar()

    def save_content(self, element_id: int, site_id: int, content: dict) -> None:
        sites = self.tables.elements_sites
        stmt = update(sites).where(self._key(element_id, site_id)).values(content=content)
        with transaction(dry_run=self.dry_run):
            db.session.execute(stmt)

