"""Element and field-layout lookups against the host CMS tables."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, select

from link_migrator import db
from link_migrator.services.field_store import FieldStore
from link_migrator.tables import HostTables, current_tables

logger = logging.getLogger(__name__)

CUSTOM_FIELD_ELEMENT = "craft\\fieldlayoutelements\\CustomField"


@dataclass(frozen=True)
class Element:
    id: int
    site_id: int
    field_layout_id: Optional[int] = None


@dataclass(frozen=True)
class LayoutField:
    uid: str
    field_uid: Optional[str]
    handle: Optional[str]
    original_handle: Optional[str]

    @property
    def source_handle(self) -> Optional[str]:
        return self.original_handle or self.handle


def _decode_config(raw: Any) -> dict:
    if raw is None or raw == "":
        return {}
    if isinstance(raw, dict):
        return raw
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError):
        return {}
    return decoded if isinstance(decoded, dict) else {}


def parse_layout_config(raw: Any, handles_by_uid: Dict[str, str]) -> List[LayoutField]:
    """Return custom-field layout elements in tab order."""
    layout_fields: List[LayoutField] = []
    for tab in _decode_config(raw).get("tabs") or []:
        for item in tab.get("elements") or []:
            if not isinstance(item, dict) or item.get("type") != CUSTOM_FIELD_ELEMENT:
                continue
            uid = item.get("uid")
            if not uid:
                continue
            field_uid = item.get("fieldUid")
            layout_fields.append(
                LayoutField(
                    uid=uid,
                    field_uid=field_uid,
                    handle=item.get("handle") or None,
                    original_handle=handles_by_uid.get(field_uid) if field_uid else None,
                )
            )
    return layout_fields


class ElementRepository:
    """Read-only element lookup plus per-layout caching of layout fields."""

    def __init__(
        self,
        tables: HostTables | None = None,
        field_store: FieldStore | None = None,
    ):
        self.tables = tables or current_tables()
        self.field_store = field_store or FieldStore(self.tables)
        self._layouts: Dict[int, List[LayoutField]] = {}
        self._handles_by_uid: Dict[str, str] | None = None

    def get_element(self, element_id: int, site_id: int) -> Element | None:
        elements = self.tables.elements
        sites = self.tables.elements_sites
        stmt = (
            select(elements.c.id, elements.c.fieldLayoutId, sites.c.siteId)
            .join(sites, sites.c.elementId == elements.c.id)
            .where(
                and_(
                    elements.c.id == element_id,
                    sites.c.siteId == site_id,
                    elements.c.dateDeleted.is_(None),
                )
            )
        )
        row = db.session.execute(stmt).first()
        if row is None:
            return None
        return Element(id=row[0], site_id=row[2], field_layout_id=row[1])

    def layout_fields(self, field_layout_id: int | None) -> List[LayoutField]:
        if field_layout_id is None:
            return []
        if field_layout_id not in self._layouts:
            layouts = self.tables.fieldlayouts
            raw = db.session.execute(
                select(layouts.c.config).where(layouts.c.id == field_layout_id)
            ).scalar()
            if self._handles_by_uid is None:
                self._handles_by_uid = self.field_store.handles_by_uid()
            self._layouts[field_layout_id] = parse_layout_config(
                raw, self._handles_by_uid
            )
            logger.debug(
                "Loaded %d layout fields for layout #%s",
                len(self._layouts[field_layout_id]),
                field_layout_id,
            )
        return self._layouts[field_layout_id]

    def layout_fields_for_handle(self, element: Element, handle: str) -> List[str]:
        """Layout-element uids in the element's layout bound to `handle`."""
        return [
            layout_field.uid
            for layout_field in self.layout_fields(element.field_layout_id)
            if layout_field.source_handle == handle
        ]
