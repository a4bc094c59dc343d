# src/reference/normalizer.py - v1
"""Spreadsheet normalizer for SAP packaging exports.

The export has three banner rows, the header on the fourth row, data
from the fifth row on, and vertically merged cells that arrive as blanks.
Blanks are forward-filled per column to reconstruct the merged values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from packqc.core.models import CellValue, ReferenceRow

logger = logging.getLogger(__name__)

DEFAULT_HEADER_ROW_INDEX = 3

# Column index -> forced header name, used when the header cell is blank.
DEFAULT_COLUMN_OVERRIDES: Mapping[int, str] = MappingProxyType({15: "Description"})


class MalformedSpreadsheetError(ValueError):
    """Raised when the grid has no data below the header row."""


@dataclass(frozen=True)
class NormalizedSheet:
    """Header names plus read-only row mappings, in sheet order."""

    headers: tuple[str, ...]
    rows: tuple[ReferenceRow, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.rows)


def column_letter(index: int) -> str:
    """Spreadsheet column letter for a 0-based index (0 -> A, 26 -> AA)."""
    if index < 0:
        raise ValueError(f"Column index must be >= 0, got {index}")
    letters = ""
    n = index + 1
    while n:
        n, rem = divmod(n - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def is_blank(value: CellValue) -> bool:
    return value is None or str(value).strip() == ""


def cell_to_str(value: CellValue) -> str:
    """Render a cell for comparison. Integral floats lose their ``.0``."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_grid(
    raw: list[list[CellValue]],
    header_row_index: int = DEFAULT_HEADER_ROW_INDEX,
    column_overrides: Mapping[int, str] | None = None,
) -> NormalizedSheet:
    """Convert a raw cell grid into named, forward-filled rows.

    Args:
        raw: Row-major grid as returned by load_spreadsheet().
        header_row_index: 0-based index of the header row.
        column_overrides: Forced names for blank header cells, by column index.

    Returns:
        NormalizedSheet with one mapping per data row.

    Raises:
        MalformedSpreadsheetError: If there are no rows below the header.
    """
    if len(raw) <= header_row_index + 1:
        raise MalformedSpreadsheetError(
            f"Spreadsheet must have data below the header on row {header_row_index + 1}, "
            f"got {len(raw)} rows"
        )

    overrides = DEFAULT_COLUMN_OVERRIDES if column_overrides is None else column_overrides
    column_count = max(len(r) for r in raw)
    header_row = raw[header_row_index]

    headers: list[str] = []
    for i in range(column_count):
        cell = header_row[i] if i < len(header_row) else None
        if is_blank(cell):
            headers.append(overrides.get(i, column_letter(i)))
        else:
            headers.append(str(cell))

    data_rows: list[dict[str, CellValue]] = []
    for raw_row in raw[header_row_index + 1:]:
        row: dict[str, CellValue] = {}
        for i, header in enumerate(headers):
            row[header] = raw_row[i] if i < len(raw_row) else None
        data_rows.append(row)

    _forward_fill(data_rows, headers)

    logger.debug(
        "Normalized sheet: %d headers, %d data rows", len(headers), len(data_rows),
    )
    return NormalizedSheet(
        headers=tuple(headers),
        rows=tuple(MappingProxyType(r) for r in data_rows),
    )


def _forward_fill(rows: list[dict[str, CellValue]], headers: list[str]) -> None:
    """Fill blank cells from the last non-blank value above, per column."""
    for header in dict.fromkeys(headers):
        last: CellValue = None
        for row in rows:
            if not is_blank(row[header]):
                last = row[header]
            elif last is not None:
                row[header] = last
