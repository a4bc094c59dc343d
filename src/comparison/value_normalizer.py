# src/comparison/value_normalizer.py - v2
"""Value canonicalization applied before field comparison.

Order of application:
    1. Unit suffix policy on reference values (build time).
    2. Special rules (remove_spaces, to_lower_case), symmetric on both sides.
    3. Legacy barcode key aliasing, extracted side only.
"""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Mapping

from packqc.comparison.mappings import SpecialRule

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "NA"

# Reference column -> unit suffix appended when missing.
UNIT_SUFFIXES: Mapping[str, str] = MappingProxyType({
    "Piece count of FG": " pcs/pzs",
})

# Legacy or case-variant extracted key (lower-cased) -> canonical key.
# "barcode" is absent: Barcode is a field id of its own in the mappings.
LEGACY_BARCODE_KEYS: Mapping[str, str] = MappingProxyType({
    "barcodes_barcode": "UPCA",
    "barcodes_datamatrix": "DataMatrix",
    "upca": "UPCA",
    "datamatrix": "DataMatrix",
})

_WHITESPACE = re.compile(r"\s+")


def normalize_field_value(column: str, value: str) -> str:
    """Apply the column's unit suffix policy to a reference value."""
    suffix = UNIT_SUFFIXES.get(column)
    if suffix is None:
        return value
    trimmed = value.strip()
    if trimmed.endswith(suffix):
        return trimmed
    return f"{trimmed}{suffix}"


def apply_special_rule(value: str, rule: SpecialRule | None) -> str:
    if rule is None:
        return value
    if rule.remove_spaces:
        value = _WHITESPACE.sub("", value)
    if rule.to_lower_case:
        value = value.lower()
    return value


def is_missing(value: str | None) -> bool:
    """True for absent, blank or the "NA" sentinel."""
    return value is None or value.strip() == "" or value.strip().upper() == NOT_AVAILABLE


def normalize_barcode_fields(fields: Mapping[str, str]) -> dict[str, str]:
    """Fold legacy and case-variant barcode keys onto their canonical names.

    An existing canonical value wins; the legacy value only fills a
    canonical slot that is missing, empty or "NA". Legacy keys are
    always removed. Matching on legacy keys is case-insensitive.

    Returns:
        A new dict; the input is left untouched.
    """
    normalized = dict(fields)
    for key in list(normalized):
        canonical = LEGACY_BARCODE_KEYS.get(key.lower())
        if canonical is None or key == canonical:
            continue
        value = normalized.pop(key)
        current = normalized.get(canonical)
        if (not current or current == NOT_AVAILABLE) and value and value != NOT_AVAILABLE:
            normalized[canonical] = value
            logger.debug("Moved legacy barcode key %r onto %r", key, canonical)
    return normalized
