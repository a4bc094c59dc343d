# src/core/filename_parser.py - v1
"""Decode the (SKU, version, type) primary key from a packaging PDF filename.

Filenames follow ``SKU_VERSION_TYPE_free-text.pdf`` where TYPE is ``MA``
(master box) or ``SA`` (semi-finished). Anything else yields no key.
"""

from __future__ import annotations

import logging
import re

from packqc.core.models import DescriptionType, DocumentKey

logger = logging.getLogger(__name__)

_PDF_SUFFIX = re.compile(r"\.pdf$", re.IGNORECASE)

# Filename type token -> description type.
TYPE_TOKENS: dict[str, DescriptionType] = {
    "MA": DescriptionType.MA_BOX,
    "SA": DescriptionType.SEMI,
}

_MIN_SEGMENTS = 4


def parse_pdf_filename(filename: str) -> DocumentKey | None:
    """Parse a PDF filename into a DocumentKey.

    Args:
        filename: Bare filename, with or without a ``.pdf`` extension.

    Returns:
        DocumentKey, or None when the name has fewer than four
        underscore-separated segments or an unknown type token.
    """
    stem = _PDF_SUFFIX.sub("", filename)
    parts = stem.split("_")

    if len(parts) < _MIN_SEGMENTS:
        logger.debug("Filename %r has %d segments, expected >= %d", filename, len(parts), _MIN_SEGMENTS)
        return None

    description_type = TYPE_TOKENS.get(parts[2].upper())
    if description_type is None:
        logger.debug("Filename %r has unknown type token %r", filename, parts[2])
        return None

    return DocumentKey(sku=parts[0], version=parts[1], type=description_type)
