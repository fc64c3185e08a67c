"""Convert legacy Typed Link Field rows into native Link field values."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Literal, Mapping, Optional, Union


class LinkType(str, Enum):
    ASSET = "asset"
    CATEGORY = "category"
    EMAIL = "email"
    ENTRY = "entry"
    URL = "url"
    TEL = "tel"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: Any) -> Optional["LinkType"]:
        try:
            return cls(value)
        except ValueError:
            return None


# Types whose value is a reference token to another element.
REFERENCE_TYPES = frozenset({LinkType.ENTRY, LinkType.ASSET, LinkType.CATEGORY})


@dataclass(frozen=True)
class NativeLinkValue:
    value: Optional[str]
    type: str
    label: Optional[str] = None
    target: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


ConversionResult = Optional[Union[NativeLinkValue, Literal[False]]]


def _decode_payload(raw: Any) -> dict | None:
    """Return the decoded payload, `{}` when empty, None when undecodable."""
    if raw is None or raw == "":
        return {}
    if isinstance(raw, Mapping):
        return dict(raw)
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if decoded is None:
        return {}
    if not isinstance(decoded, dict):
        return None
    return decoded


def reference_token(link_type: LinkType, linked_id: Any, site_id: Any) -> str:
    return f"{{{link_type.value}:{linked_id}@{site_id}:url}}"


def convert_link_content(row: Mapping[str, Any]) -> ConversionResult:
    """
    Convert one legacy content row.

    Returns:
        None when the row carries no link type (nothing to migrate),
        False when the type is unsupported or the row is incomplete,
        otherwise the NativeLinkValue to store.
    """
    raw_type = row.get("type")
    if not raw_type:
        return None

    link_type = LinkType.parse(raw_type)
    if link_type is None:
        return False

    payload = _decode_payload(row.get("payload"))
    if payload is None:
        return False

    link_value = row.get("linkedUrl")
    linked_id = row.get("linkedId")
    site_id = row.get("siteId")

    if link_type in REFERENCE_TYPES and (not linked_id or not site_id):
        return False

    output_type = link_type.value
    if link_type in REFERENCE_TYPES:
        link_value = reference_token(link_type, linked_id, site_id)
    elif link_type is LinkType.EMAIL:
        link_value = f"mailto:{link_value or ''}"
    elif link_type is LinkType.TEL:
        link_value = f"tel:{link_value or ''}"
    elif link_type is LinkType.CUSTOM:
        output_type = LinkType.URL.value

    return NativeLinkValue(
        value=link_value,
        type=output_type,
        label=payload.get("customText"),
        target=payload.get("target"),
    )


__all__ = [
    "LinkType",
    "NativeLinkValue",
    "ConversionResult",
    "convert_link_content",
    "reference_token",
]
