"""Translate source records into Brevo contact attributes."""
from __future__ import annotations

from typing import Dict, Mapping, Optional

from .models import SourceRecord

EMPTY_SENTINELS = frozenset({"", "http://"})

# Source field -> Brevo attribute name.
ATTRIBUTE_MAP: Mapping[str, str] = {
    "vendor_name": "COMPANY_NAME",
    "id_code": "COMPANY_ID",
    "phone": "SMS",
    "category": "TENDER_CODE",
}

SMS_ATTRIBUTE = ATTRIBUTE_MAP["phone"]


def build_attributes(record: Optional[SourceRecord]) -> Dict[str, str]:
    """Return the attribute mapping for ``record``, skipping empty and ``"http://"`` values."""

    if record is None:
        return {}
    attributes: Dict[str, str] = {}
    for source_field, attribute in ATTRIBUTE_MAP.items():
        value = getattr(record, source_field)
        if value not in EMPTY_SENTINELS:
            attributes[attribute] = value
    return attributes


__all__ = ["ATTRIBUTE_MAP", "SMS_ATTRIBUTE", "build_attributes"]
