# src/core/models.py - v2
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field

# A single spreadsheet cell after loading: text, number or empty.
CellValue = Union[str, int, float, None]

# One reference spreadsheet row keyed by resolved column name.
ReferenceRow = Mapping[str, CellValue]

# Extracted-field identifier -> raw string value. Open key set.
ExtractedFields = dict[str, str]

VerdictStatus = Literal["correct", "incorrect", "not-found"]


# === PRIMARY KEY ===


class DescriptionType(str, Enum):
    """Packaging type encoded in the filename and the Description column."""

    MA_BOX = "MA-BOX"
    SEMI = "SEMI"


class DocumentKey(BaseModel):
    """Composite primary key (SKU, version, type) decoded from a PDF filename."""

    model_config = ConfigDict(frozen=True)

    sku: str
    version: str
    type: DescriptionType


class ResolutionFailure(BaseModel):
    """Why no reference row matched a DocumentKey."""

    reason: Literal["no_reference_rows", "sku_not_found", "version_mismatch", "description_mismatch"]
    message: str
    available_versions: list[str] = Field(default_factory=list)
    available_descriptions: list[str] = Field(default_factory=list)


# === COMPARISON ===


class SelectedInput(BaseModel):
    """One (reference column, expected value) pair chosen for checking."""

    column: str
    value: str


class ComparisonVerdict(BaseModel):
    """Outcome of comparing one expected value with one extracted value."""

    field: str
    pdf_value: str
    excel_value: str
    status: VerdictStatus
    match_details: str | None = None


class ComparisonSummary(BaseModel):
    """Verdict counts for a single document."""

    total: int = 0
    correct: int = 0
    incorrect: int = 0
    not_found: int = 0


def summarize(verdicts: list[ComparisonVerdict]) -> ComparisonSummary:
    """Count verdicts by status."""
    return ComparisonSummary(
        total=len(verdicts),
        correct=sum(1 for v in verdicts if v.status == "correct"),
        incorrect=sum(1 for v in verdicts if v.status == "incorrect"),
        not_found=sum(1 for v in verdicts if v.status == "not-found"),
    )

