from __future__ import annotations

import json

import pytest

from link_migrator.services.content_mapper import MigrationReport, migrate_content
from link_migrator.services.elements import ElementRepository
from link_migrator.services.field_store import (
    ElementContentStore,
    FieldStore,
    LegacyContentStore,
)
from link_migrator.services.schema_rewriter import NATIVE_FIELD_TYPE


def _migrate(dry_run: bool = False) -> MigrationReport:
    field_store = FieldStore(dry_run=dry_run)
    return migrate_content(
        field_store,
        LegacyContentStore(),
        ElementRepository(field_store=field_store),
        ElementContentStore(dry_run=dry_run),
    )


@pytest.fixture()
def cta(craft):
    return craft.add_field("cta", field_type=NATIVE_FIELD_TYPE)


def test_migrate_merges_link_into_existing_content(app, craft, cta) -> None:
    layout_id, (cta_uid,) = craft.add_layout(cta)
    element_id = craft.add_element(layout_id=layout_id, content={"uidA": {"x": 1}})
    craft.add_link(cta, element_id, type="entry", linkedId=42)

    report = _migrate()

    assert report.migrated == 1
    assert craft.content(element_id) == {
        "uidA": {"x": 1},
        cta_uid: {
            "value": "{entry:42@1:url}",
            "type": "entry",
            "label": None,
            "target": None,
        },
    }


def test_migrate_writes_each_site_separately(app, craft, cta) -> None:
    layout_id, (cta_uid,) = craft.add_layout(cta)
    element_id = craft.add_element(layout_id=layout_id, site_ids=(1, 2))
    craft.add_link(cta, element_id, site_id=1, type="url", linkedUrl="https://a.test")
    craft.add_link(
        cta,
        element_id,
        site_id=2,
        type="url",
        linkedUrl="https://b.test",
        payload={"customText": "B", "target": "_blank"},
    )

    report = _migrate()

    assert report.migrated == 2
    assert craft.content(element_id, 1)[cta_uid]["value"] == "https://a.test"
    site_two = craft.content(element_id, 2)[cta_uid]
    assert site_two == {
        "value": "https://b.test",
        "type": "url",
        "label": "B",
        "target": "_blank",
    }


def test_migrate_unwraps_double_encoded_content(app, craft, cta) -> None:
    layout_id, (cta_uid,) = craft.add_layout(cta)
    # Stored as a JSON string holding the object.
    element_id = craft.add_element(
        layout_id=layout_id, content=json.dumps({"uidA": {"x": 1}})
    )
    craft.add_link(cta, element_id, type="tel", linkedUrl="+123456")

    _migrate()

    content = craft.content(element_id)
    assert content["uidA"] == {"x": 1}
    assert content[cta_uid]["value"] == "tel:+123456"


def test_migrate_skips_rows_and_counts_reasons(app, craft, cta) -> None:
    layout_id, (cta_uid,) = craft.add_layout(cta)
    empty_id = craft.add_element(layout_id=layout_id, content={"keep": 1})
    invalid_id = craft.add_element(layout_id=layout_id, content={"keep": 2})
    craft.add_link(cta, empty_id, type=None)
    craft.add_link(cta, invalid_id, type="user", linkedId=3)
    craft.add_link(cta, 404, type="url", linkedUrl="https://gone.test")

    report = _migrate()

    assert report.migrated == 0
    assert report.skipped_empty == 1
    assert report.skipped_invalid == 1
    assert report.missing_elements == 1
    assert craft.content(empty_id) == {"keep": 1}
    assert craft.content(invalid_id) == {"keep": 2}


def test_migrate_field_without_rows(app, craft, cta) -> None:
    report = _migrate()

    assert report.fields == 1
    assert report.fields_without_content == 1
    assert report.migrated == 0


def test_migrate_skips_non_global_fields(app, craft) -> None:
    nested = craft.add_field(
        "nested", field_type=NATIVE_FIELD_TYPE, context="superTableBlockType:abc"
    )
    layout_id, _ = craft.add_layout(nested)
    element_id = craft.add_element(layout_id=layout_id, content={"keep": 1})
    craft.add_link(nested, element_id, type="url", linkedUrl="https://a.test")

    report = _migrate()

    assert report.fields_not_global == 1
    assert report.migrated == 0
    assert craft.content(element_id) == {"keep": 1}


def test_migrate_ignores_fields_not_yet_converted(app, craft) -> None:
    legacy = craft.add_field("legacy")
    layout_id, _ = craft.add_layout(legacy)
    element_id = craft.add_element(layout_id=layout_id, content={"keep": 1})
    craft.add_link(legacy, element_id, type="url", linkedUrl="https://a.test")

    report = _migrate()

    assert report.fields == 0
    assert craft.content(element_id) == {"keep": 1}


def test_migrate_is_repeatable(app, craft, cta) -> None:
    layout_id, _ = craft.add_layout(cta)
    element_id = craft.add_element(layout_id=layout_id, content={"uidA": 1})
    craft.add_link(cta, element_id, type="email", linkedUrl="a@b.test")

    _migrate()
    first = craft.content(element_id)
    _migrate()

    assert craft.content(element_id) == first


def test_migrate_dry_run_leaves_content(app, craft, cta) -> None:
    layout_id, _ = craft.add_layout(cta)
    element_id = craft.add_element(layout_id=layout_id, content={"uidA": 1})
    craft.add_link(cta, element_id, type="custom", linkedUrl="/about")

    report = _migrate(dry_run=True)

    assert report.migrated == 1
    assert craft.content(element_id) == {"uidA": 1}


def test_summary_lists_counters() -> None:
    report = MigrationReport(fields=2, migrated=5, skipped_invalid=1)

    summary = report.summary()

    assert "fields=2" in summary
    assert "migrated=5" in summary
    assert "invalid=1" in summary
