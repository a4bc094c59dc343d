# src/comparison/resolver.py - v1
"""Primary-key resolver: find the reference row for a parsed filename.

A row matches when its SKU column equals the key's SKU, its version
column equals the key's version (case-insensitive), and its Description
column agrees with the key's type. The first matching row wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Literal, Sequence

from packqc.core.models import CellValue, DocumentKey, ReferenceRow, ResolutionFailure
from packqc.reference.normalizer import cell_to_str

logger = logging.getLogger(__name__)

DescriptionPolicy = Literal["exact", "contains"]

# Abbreviated Description values -> canonical type token.
DESCRIPTION_ALIASES: dict[str, str] = {
    "MA": "MA-BOX",
    "SA": "SEMI",
}


@dataclass(frozen=True)
class KeyColumns:
    """Reference column names that make up the primary key."""

    sku: str = "Communication no."
    versions: tuple[str, ...] = ("Name of Dependency", "Product Version no.")
    description: str = "Description"


DEFAULT_KEY_COLUMNS = KeyColumns()


def resolve_row(
    key: DocumentKey,
    rows: Sequence[ReferenceRow],
    columns: KeyColumns = DEFAULT_KEY_COLUMNS,
    description_policy: DescriptionPolicy = "contains",
) -> ReferenceRow | ResolutionFailure:
    """Return the first row matching the key, or a diagnostic failure.

    Args:
        key: Parsed (SKU, version, type) key.
        rows: Normalized reference rows.
        columns: Names of the SKU, version and description columns.
        description_policy: "exact" compares the normalized Description
            with the type; "contains" accepts a Description that includes it.

    Returns:
        The matching row, or a ResolutionFailure naming the first key
        component that could not be matched.
    """
    if not rows:
        return ResolutionFailure(
            reason="no_reference_rows",
            message="No reference spreadsheet rows loaded",
        )

    sku_rows = [r for r in rows if cell_to_str(r.get(columns.sku)).strip() == key.sku]
    if not sku_rows:
        return ResolutionFailure(
            reason="sku_not_found",
            message=f"SKU {key.sku!r} not found in column {columns.sku!r}",
        )

    wanted_version = key.version.strip().lower()
    version_rows = [
        r for r in sku_rows if _row_version(r, columns.versions).lower() == wanted_version
    ]
    if not version_rows:
        versions = _distinct(_row_version(r, columns.versions) for r in sku_rows)
        return ResolutionFailure(
            reason="version_mismatch",
            message=(
                f"SKU {key.sku!r} found but no row has version {key.version!r} "
                f"(available: {', '.join(versions) or 'none'})"
            ),
            available_versions=versions,
        )

    for row in version_rows:
        description = normalize_description(row.get(columns.description))
        if _description_matches(description, key.type.value, description_policy):
            logger.debug("Resolved %s/%s/%s", key.sku, key.version, key.type.value)
            return row

    descriptions = _distinct(normalize_description(r.get(columns.description)) for r in version_rows)
    return ResolutionFailure(
        reason="description_mismatch",
        message=(
            f"SKU {key.sku!r} version {key.version!r} found but no row has "
            f"description {key.type.value!r} (available: {', '.join(descriptions) or 'none'})"
        ),
        available_descriptions=descriptions,
    )


def normalize_description(value: CellValue) -> str:
    text = cell_to_str(value).strip().upper()
    return DESCRIPTION_ALIASES.get(text, text)


def _description_matches(description: str, wanted: str, policy: DescriptionPolicy) -> bool:
    if policy == "exact":
        return description == wanted
    return wanted in description


def _row_version(row: ReferenceRow, version_columns: Iterable[str]) -> str:
    """Version value from the first populated version column."""
    lowered = {name.lower(): name for name in row}
    for column in version_columns:
        actual = column if column in row else lowered.get(column.lower())
        if actual is None:
            continue
        value = cell_to_str(row[actual]).strip()
        if value:
            return value
    return ""


def _distinct(values: Iterable[str]) -> list[str]:
    return [v for v in dict.fromkeys(values) if v]
