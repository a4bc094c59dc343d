# src/reference/loader.py - v1
"""Reference data source: read a spreadsheet export into a raw cell grid.

No header or business logic here; see reference/normalizer.py.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

from openpyxl import load_workbook

from packqc.core.models import CellValue

logger = logging.getLogger(__name__)

RawGrid = list[list[CellValue]]


class SpreadsheetLoadError(ValueError):
    """Raised when the spreadsheet bytes cannot be read as a workbook."""


def load_spreadsheet(content: bytes | Path, sheet_name: str | None = None) -> RawGrid:
    """Read the first (or named) worksheet into a list of rows.

    Args:
        content: Workbook bytes or a path to an .xlsx file.
        sheet_name: Optional worksheet name (first sheet if None).

    Returns:
        Row-major cell grid. Rows are padded to the sheet's column count
        so every row has the same length.

    Raises:
        SpreadsheetLoadError: If the workbook cannot be opened.
    """
    source = io.BytesIO(content) if isinstance(content, bytes) else Path(content).expanduser()
    try:
        wb = load_workbook(source, data_only=True, read_only=True)
    except Exception as e:
        raise SpreadsheetLoadError(
            f"Cannot read spreadsheet (is it corrupted or wrong format?): {e}"
        ) from e

    try:
        ws = wb[sheet_name] if sheet_name else wb.worksheets[0]
        grid: RawGrid = [list(row) for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()

    width = max((len(r) for r in grid), default=0)
    for row in grid:
        if len(row) < width:
            row.extend([None] * (width - len(row)))

    logger.info("Loaded spreadsheet: %d rows x %d columns", len(grid), width)
    return grid
