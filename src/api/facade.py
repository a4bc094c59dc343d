# src/api/facade.py - v3
"""Public API facade: single-document reconciliation.

Usage:
    from packqc.api.facade import auto_populate, compare_document
    populated = auto_populate(document.filename, sheet.rows, model_id)
    result = await compare_document(document, populated.selected_inputs, model_id, service)
"""

from __future__ import annotations

import logging
from typing import Sequence

from packqc.api.models import AutoPopulation, ComparisonResult, DocumentInput
from packqc.comparison.comparator import build_selected_inputs, compare_fields
from packqc.comparison.mappings import get_field_mapping
from packqc.comparison.resolver import resolve_row
from packqc.config.settings import Settings
from packqc.core.filename_parser import parse_pdf_filename
from packqc.core.models import (
    DocumentKey,
    ExtractedFields,
    ReferenceRow,
    ResolutionFailure,
    SelectedInput,
    summarize,
)
from packqc.extraction.base_service import BaseExtractionService

logger = logging.getLogger(__name__)


def auto_populate(
    filename: str,
    rows: Sequence[ReferenceRow],
    model_id: str,
    settings: Settings | None = None,
) -> AutoPopulation:
    """Resolve a filename against the reference rows and build expected values.

    Every column the model's mapping defines is selected when the matched
    row has a value for it.
    """
    key = parse_pdf_filename(filename)
    if key is None:
        return AutoPopulation()
    return resolve_key(key, rows, model_id, settings)


def resolve_key(
    key: DocumentKey,
    rows: Sequence[ReferenceRow],
    model_id: str,
    settings: Settings | None = None,
) -> AutoPopulation:
    """Find the reference row for an already parsed key and build expected values."""
    settings = settings or Settings()
    match = resolve_row(key, rows, description_policy=settings.description_match_policy)
    if isinstance(match, ResolutionFailure):
        logger.info("No reference row for %s/%s/%s: %s", key.sku, key.version, key.type.value, match.message)
        return AutoPopulation(parsed_filename=key, failure=match)

    mapping = get_field_mapping(model_id)
    return AutoPopulation(
        parsed_filename=key,
        selected_inputs=build_selected_inputs(match, mapping),
    )


async def compare_document(
    document: DocumentInput,
    selected_inputs: Sequence[SelectedInput],
    model_id: str,
    service: BaseExtractionService,
    settings: Settings | None = None,
) -> ComparisonResult:
    """Extract fields from a PDF and compare them with the selected inputs.

    Raises:
        ExtractionError: Propagated from the extraction service.
    """
    extracted = await service.extract(document.read_bytes(), model_id)
    return compare_extracted(document.filename, selected_inputs, model_id, extracted, settings)


def compare_extracted(
    filename: str,
    selected_inputs: Sequence[SelectedInput],
    model_id: str,
    extracted: ExtractedFields,
    settings: Settings | None = None,
) -> ComparisonResult:
    """Compare already extracted fields with the selected inputs."""
    settings = settings or Settings()
    mapping = get_field_mapping(model_id)
    verdicts = compare_fields(
        selected_inputs, mapping, extracted,
        missing_policy=settings.missing_list_field_policy,
    )
    summary = summarize(verdicts)

    logger.info(
        "Comparison complete for %s: %d correct, %d incorrect, %d not found",
        filename, summary.correct, summary.incorrect, summary.not_found,
    )
    return ComparisonResult(
        filename=filename,
        model_id=model_id,
        results=verdicts,
        summary=summary,
        extracted_fields=extracted,
    )
