"""Rewrite legacy link field definitions to the native Link field type."""

from __future__ import annotations

import logging

from link_migrator import encode_json
from link_migrator.services.field_store import FieldStore

logger = logging.getLogger(__name__)

LEGACY_FIELD_TYPES = (
    "typedlinkfield\\fields\\LinkField",
    "lenz\\linkfield\\fields\\LinkField",
)
NATIVE_FIELD_TYPE = "craft\\fields\\Link"

# Allow everything by default; editors can tighten the settings afterwards.
NATIVE_FIELD_SETTINGS = {
    "advancedFields": ["target"],
    "fullGraphqlData": True,
    "maxLength": 255,
    "showLabelField": True,
    "typeSettings": {
        "entry": {"sources": "*"},
        "url": {"allowRootRelativeUrls": "1", "allowAnchors": "1"},
        "asset": {
            "sources": "*",
            "allowedKinds": "*",
            "showUnpermittedVolumes": "",
            "showUnpermittedFiles": "",
        },
        "category": {"sources": "*"},
    },
    "types": ["entry", "url", "asset", "category", "email", "tel"],
}


def native_settings_json() -> str:
    # Non-finite floats raise ValueError.
    return encode_json(NATIVE_FIELD_SETTINGS, allow_nan=False)


def convert_fields(field_store: FieldStore) -> int:
    """Rewrite every legacy link field; returns the number of fields touched."""
    settings = native_settings_json()
    fields = field_store.fields_of_type(*LEGACY_FIELD_TYPES)
    if not fields:
        logger.info("No legacy link fields found.")
        return 0

    for field in fields:
        logger.info(
            "Preparing to migrate field “%s” (%s) settings.",
            field.handle,
            field.uid,
        )
        field_store.update_field(field.uid, NATIVE_FIELD_TYPE, settings)
        logger.info("> Field “%s” settings migrated.", field.handle)

    return len(fields)
