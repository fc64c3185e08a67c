import json
import os
import uuid

import pytest
from sqlalchemy import insert, select

from link_migrator import create_app, db
from link_migrator.services.elements import CUSTOM_FIELD_ELEMENT
from link_migrator.tables import current_tables


def _resolve_test_db_uri() -> str:
    db_uri = (os.environ.get("TEST_DATABASE_URL") or "").strip()
    if not db_uri:
        return "sqlite://"

    if db_uri.startswith(("postgresql://", "postgresql+psycopg://", "postgres://")):
        db_name = db_uri.rsplit("/", 1)[-1].split("?", 1)[0]
        if "test" not in db_name.lower():
            raise RuntimeError(
                "Refusing to run pytest on non-test Postgres DB. "
                "Use TEST_DATABASE_URL with a database name containing 'test'."
            )
    return db_uri


class CraftDb:
    """Seeds the host CMS tables with the rows a migration reads."""

    def __init__(self, tables):
        self.tables = tables
        self._ids = {"field": 0, "layout": 0, "element": 0}

    def _next(self, kind: str) -> int:
        self._ids[kind] += 1
        return self._ids[kind]

    def _insert(self, table, **values) -> None:
        db.session.execute(insert(table).values(**values))
        db.session.commit()

    def add_field(
        self,
        handle: str,
        field_type: str = "lenz\\linkfield\\fields\\LinkField",
        settings: str = "{}",
        context: str = "global",
    ) -> dict:
        field = {
            "id": self._next("field"),
            "handle": handle,
            "name": handle.title(),
            "uid": str(uuid.uuid4()),
            "type": field_type,
            "settings": settings,
            "context": context,
        }
        self._insert(self.tables.fields, **field)
        return field

    def add_layout(self, *fields, handle_overrides=None) -> tuple[int, list[str]]:
        handle_overrides = handle_overrides or {}
        layout_id = self._next("layout")
        elements = []
        for field in fields:
            elements.append(
                {
                    "type": CUSTOM_FIELD_ELEMENT,
                    "fieldUid": field["uid"],
                    "uid": str(uuid.uuid4()),
                    "handle": handle_overrides.get(field["handle"]),
                }
            )
        config = {"tabs": [{"name": "Content", "elements": elements}]}
        self._insert(
            self.tables.fieldlayouts, id=layout_id, config=config
        )
        return layout_id, [element["uid"] for element in elements]

    def add_element(self, layout_id=None, site_ids=(1,), content=None, deleted=None) -> int:
        element_id = self._next("element")
        self._insert(
            self.tables.elements,
            id=element_id,
            fieldLayoutId=layout_id,
            dateDeleted=deleted,
        )
        for site_id in site_ids:
            self._insert(
                self.tables.elements_sites,
                elementId=element_id,
                siteId=site_id,
                content=content,
            )
        return element_id

    def add_link(self, field: dict, element_id: int, site_id: int = 1, **values) -> None:
        payload = values.pop("payload", None)
        if isinstance(payload, dict):
            payload = json.dumps(payload)
        self._insert(
            self.tables.legacy_links,
            fieldId=field["id"],
            elementId=element_id,
            siteId=site_id,
            payload=payload,
            **values,
        )

    def content(self, element_id: int, site_id: int = 1):
        sites = self.tables.elements_sites
        return db.session.execute(
            select(sites.c.content).where(
                sites.c.elementId == element_id, sites.c.siteId == site_id
            )
        ).scalar()

    def field(self, uid: str) -> dict:
        fields = self.tables.fields
        row = db.session.execute(select(fields).where(fields.c.uid == uid)).mappings().one()
        return dict(row)


@pytest.fixture()
def app():
    app = create_app(
        "default",
        db_uri_override=_resolve_test_db_uri(),
        table_prefix_override="",
    )
    app.config["TESTING"] = True
    with app.app_context():
        tables = current_tables()
        tables.metadata.create_all(db.engine)
        yield app
        db.session.remove()
        tables.metadata.drop_all(db.engine)


@pytest.fixture()
def craft(app):
    return CraftDb(current_tables())
