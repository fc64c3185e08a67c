"""Merge converted link values into an element's JSON content blob."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, Mapping

from link_migrator.services.link_conversion import NativeLinkValue


def _loads(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return None


def decode_content(raw: Any) -> Dict[str, Any]:
    """
    Decode stored element content into a dict.

    Content written by some plugin versions is double encoded (a JSON string
    holding a JSON object); that case is decoded exactly once more. Anything
    that is not an object ends up as an empty dict.
    """
    if raw is None or raw == "":
        return {}
    content = _loads(raw) if isinstance(raw, (str, bytes)) else raw
    if isinstance(content, str) and content.lstrip().startswith("{"):
        content = _loads(content)
    if not isinstance(content, dict):
        return {}
    return content


def build_field_content(
    layout_uids: Iterable[str], value: NativeLinkValue
) -> Dict[str, Dict[str, Any]]:
    return {uid: value.to_dict() for uid in layout_uids}


def merge_content(
    existing: Mapping[str, Any], field_content: Mapping[str, Any]
) -> Dict[str, Any]:
    """Overlay `field_content` onto `existing`; unrelated keys are kept."""
    merged = dict(existing)
    merged.update(field_content)
    return merged


def element_content_for_field(element, handle, value, elements, content_store):
    """
    Compute the merged content blob for `element` after storing `value`
    under every layout element bound to the field `handle`.

    `elements` provides `layout_fields_for_handle(element, handle)` and
    `content_store` provides `fetch_content(element_id, site_id)`.
    """
    field_content = build_field_content(
        elements.layout_fields_for_handle(element, handle), value
    )
    existing = decode_content(content_store.fetch_content(element.id, element.site_id))
    return merge_content(existing, field_content)


__all__ = [
    "decode_content",
    "build_field_content",
    "merge_content",
    "element_content_for_field",
]
