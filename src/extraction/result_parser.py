# src/extraction/result_parser.py - v1
"""Flatten an Azure Document Intelligence analyzeResult into ExtractedFields."""

from __future__ import annotations

import logging
import re
from typing import Any

from packqc.comparison.value_normalizer import normalize_barcode_fields
from packqc.core.models import ExtractedFields

logger = logging.getLogger(__name__)

BARCODE_FIELDS = frozenset({"Barcode", "UPCA", "DataMatrix"})

# Normalized barcode kind -> canonical field name.
BARCODE_KINDS: dict[str, str] = {
    "upca": "UPCA",
    "datamatrix": "DataMatrix",
}

_WHITESPACE = re.compile(r"\s+")
_KIND_SEPARATORS = re.compile(r"[-_\s]")


def parse_analyze_result(result: dict[str, Any]) -> ExtractedFields:
    """Collect fields from documents, key/value pairs, tables and page barcodes.

    Document fields take precedence over key/value pairs with the same key.
    Page barcodes of kind UPC-A or DataMatrix overwrite document fields of
    the same canonical name.
    """
    fields: ExtractedFields = {}

    documents = result.get("documents") or []
    if documents:
        for name, raw in (documents[0].get("fields") or {}).items():
            value = _field_value(raw)
            if not value:
                continue
            fields[name] = _WHITESPACE.sub("", value) if name in BARCODE_FIELDS else value

    for kvp in result.get("keyValuePairs") or []:
        key = ((kvp.get("key") or {}).get("content") or "").strip()
        value = ((kvp.get("value") or {}).get("content") or "").strip()
        if key and value and key not in fields:
            fields[key] = value

    for table in result.get("tables") or []:
        for cell in table.get("cells") or []:
            content = cell.get("content")
            if content:
                fields[f"table_{cell.get('rowIndex', 0)}_{cell.get('columnIndex', 0)}"] = content

    kinds_seen: list[str] = []
    for page in result.get("pages") or []:
        for barcode in page.get("barcodes") or []:
            kind = barcode.get("kind") or ""
            value = barcode.get("value")
            kinds_seen.append(kind)
            canonical = BARCODE_KINDS.get(_KIND_SEPARATORS.sub("", kind.lower()))
            if canonical and value:
                fields[canonical] = _WHITESPACE.sub("", value)

    if kinds_seen:
        logger.debug("Barcode kinds found: %s", kinds_seen)

    return normalize_barcode_fields(fields)


def _field_value(raw: Any) -> str | None:
    """valueString, then content, then valueNumber, then valueInteger."""
    if not isinstance(raw, dict):
        return None
    for key in ("valueString", "content", "valueNumber", "valueInteger"):
        value = raw.get(key)
        if value is not None:
            text = str(value).strip()
            return text or None
    return None
