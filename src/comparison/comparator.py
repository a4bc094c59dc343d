# src/comparison/comparator.py - v1
"""Field-by-field comparison of reference values with extracted values.

Each selected (column, value) pair yields zero or more verdicts:
    - unmapped column: one "not-found" verdict
    - column mapped to one field id: one verdict
    - column mapped to several field ids: one verdict per id, labelled
      "{column} ({field_id})"; ids with no extracted value are skipped
      under the "skip" policy or reported "not-found" under "strict"
"""

from __future__ import annotations

import logging
from typing import Iterable, Literal, Mapping

from packqc.comparison.mappings import FieldMapping
from packqc.comparison.value_normalizer import (
    apply_special_rule,
    is_missing,
    normalize_barcode_fields,
    normalize_field_value,
)
from packqc.core.models import ComparisonVerdict, ReferenceRow, SelectedInput
from packqc.reference.normalizer import cell_to_str, is_blank

logger = logging.getLogger(__name__)

MissingPolicy = Literal["skip", "strict"]

NOT_FOUND_IN_PDF = "Not found in PDF"


def build_selected_inputs(row: ReferenceRow, mapping: FieldMapping) -> list[SelectedInput]:
    """Expected values for every mapped column that has a value in the row."""
    inputs: list[SelectedInput] = []
    for column in mapping.mappings:
        value = row.get(column)
        if is_blank(value):
            continue
        inputs.append(
            SelectedInput(column=column, value=normalize_field_value(column, cell_to_str(value)))
        )
    return inputs


def compare_fields(
    selected_inputs: Iterable[SelectedInput],
    mapping: FieldMapping,
    extracted: Mapping[str, str],
    missing_policy: MissingPolicy = "skip",
) -> list[ComparisonVerdict]:
    """Compare selected reference values against extracted document fields.

    Args:
        selected_inputs: (column, expected value) pairs to check.
        mapping: Field mapping of the extraction model used.
        extracted: Raw extracted fields; legacy barcode keys are folded first.
        missing_policy: How list-mapped ids without a value are reported.

    Returns:
        Verdicts in input order, list expansions in mapping order.
    """
    fields = normalize_barcode_fields(extracted)
    verdicts: list[ComparisonVerdict] = []

    for selected in selected_inputs:
        column = selected.column
        expected = normalize_field_value(column, selected.value)
        target = mapping.mappings.get(column)

        if target is None:
            verdicts.append(ComparisonVerdict(
                field=column,
                pdf_value="",
                excel_value=expected,
                status="not-found",
                match_details=f"No field mapping for model {mapping.model_id}",
            ))
            continue

        if isinstance(target, str):
            actual = fields.get(target)
            if actual is None or not actual.strip():
                verdicts.append(ComparisonVerdict(
                    field=column,
                    pdf_value=NOT_FOUND_IN_PDF,
                    excel_value=expected,
                    status="not-found",
                    match_details=f"Expected label: {target}",
                ))
                continue
            verdicts.append(_verdict(column, target, actual, expected, mapping))
            continue

        for field_id in target:
            label = f"{column} ({field_id})"
            actual = fields.get(field_id)
            if actual is None or is_missing(actual):
                if missing_policy == "strict":
                    verdicts.append(ComparisonVerdict(
                        field=label,
                        pdf_value=NOT_FOUND_IN_PDF,
                        excel_value=expected,
                        status="not-found",
                        match_details=f"Expected label: {field_id}",
                    ))
                else:
                    logger.debug("%s not present in document, skipping", label)
                continue
            verdicts.append(_verdict(label, field_id, actual, expected, mapping))

    return verdicts


def compare_row(
    row: ReferenceRow,
    mapping: FieldMapping,
    extracted: Mapping[str, str],
    missing_policy: MissingPolicy = "skip",
) -> list[ComparisonVerdict]:
    """Check every mapped column of a reference row."""
    return compare_fields(build_selected_inputs(row, mapping), mapping, extracted, missing_policy)


def _verdict(
    label: str, field_id: str, actual: str, expected: str, mapping: FieldMapping,
) -> ComparisonVerdict:
    rule = mapping.rule_for(field_id)
    match = (
        apply_special_rule(actual, rule).lower()
        == apply_special_rule(expected, rule).lower()
    )
    return ComparisonVerdict(
        field=label,
        pdf_value=actual,
        excel_value=expected,
        status="correct" if match else "incorrect",
    )
