# src/batch/scanner.py - v2
"""Batch scanner: discover packaging PDFs in a directory.

Entries come back sorted by path so batch order is reproducible.
"""

from __future__ import annotations

import logging
from pathlib import Path

from packqc.batch.models import ScanEntry

logger = logging.getLogger(__name__)

PDF_SUFFIX = ".pdf"


def scan_pdfs(scan_root: Path, recursive: bool = False) -> list[ScanEntry]:
    """List all PDF files under scan_root.

    Args:
        scan_root: Directory to scan.
        recursive: If True, include subdirectories.

    Raises:
        ValueError: If scan_root is not a directory.
    """
    if not scan_root.is_dir():
        msg = f"Scan root is not a directory: {scan_root}"
        raise ValueError(msg)

    pattern_fn = scan_root.rglob if recursive else scan_root.glob
    entries = [
        ScanEntry(
            file_path=str(path.resolve()),
            filename=path.name,
            size_bytes=path.stat().st_size,
        )
        for path in sorted(pattern_fn("*"))
        if path.is_file() and path.suffix.lower() == PDF_SUFFIX
    ]

    logger.info(
        "Scanned %s: found %d PDF files (recursive=%s)",
        scan_root, len(entries), recursive,
    )
    return entries
