"""Move legacy link content into the native Link field's JSON content."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from link_migrator.services.content_merge import element_content_for_field
from link_migrator.services.elements import ElementRepository
from link_migrator.services.field_store import (
    ElementContentStore,
    FieldStore,
    LegacyContentStore,
)
from link_migrator.services.link_conversion import convert_link_content
from link_migrator.services.schema_rewriter import NATIVE_FIELD_TYPE

logger = logging.getLogger(__name__)


@dataclass
class MigrationReport:
    fields: int = 0
    fields_without_content: int = 0
    fields_not_global: int = 0
    migrated: int = 0
    skipped_empty: int = 0
    skipped_invalid: int = 0
    missing_elements: int = 0

    def summary(self) -> str:
        return (
            f"fields={self.fields} migrated={self.migrated} "
            f"empty={self.skipped_empty} invalid={self.skipped_invalid} "
            f"missing_elements={self.missing_elements} "
            f"fields_without_content={self.fields_without_content} "
            f"fields_not_global={self.fields_not_global}"
        )


def migrate_field_content(
    field,
    rows,
    elements: ElementRepository,
    content_store: ElementContentStore,
    report: MigrationReport,
) -> None:
    for row in rows:
        element_id = row["elementId"]
        site_id = row["siteId"]
        element = elements.get_element(element_id, site_id)
        if element is None:
            report.missing_elements += 1
            logger.warning(
                "    > Unable to find element #%s and site #%s", element_id, site_id
            )
            continue

        value = convert_link_content(row)
        if value is None:
            report.skipped_empty += 1
            continue
        if value is False:
            report.skipped_invalid += 1
            logger.warning(
                "    > Unable to convert content for element #%s (type %r)",
                element_id,
                row.get("type"),
            )
            continue

        content = element_content_for_field(
            element, field.handle, value, elements, content_store
        )
        content_store.save_content(element.id, element.site_id, content)
        report.migrated += 1
        logger.info("    > Migrated content for element #%s", element_id)


def migrate_content(
    field_store: FieldStore,
    legacy_store: LegacyContentStore,
    elements: ElementRepository,
    content_store: ElementContentStore,
) -> MigrationReport:
    """Migrate legacy rows for every field already converted to the native type."""
    report = MigrationReport()
    for field in field_store.fields_of_type(NATIVE_FIELD_TYPE):
        report.fields += 1
        logger.info(
            "Preparing to migrate field “%s” (%s) content.", field.handle, field.uid
        )

        rows = legacy_store.rows_for_field(field.id)
        if not rows:
            report.fields_without_content += 1
            logger.info("> No content to migrate for field '%s'", field.handle)
            continue

        if not field.is_global:
            report.fields_not_global += 1
            logger.info(
                "> Field '%s' has context '%s'; only global fields are migrated.",
                field.handle,
                field.context,
            )
            continue

        migrate_field_content(field, rows, elements, content_store, report)
        logger.info("> Field “%s” content migrated.", field.handle)

    return report
