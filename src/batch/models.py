# src/batch/models.py - v2
"""Batch processing models: ScanEntry, BatchItemResult, BatchSummary, BatchReport."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

from packqc.core.models import (
    ComparisonSummary,
    ComparisonVerdict,
    DocumentKey,
    ResolutionFailure,
    SelectedInput,
)

ErrorType = Literal["primary_key_failed", "network", "rate_limit", "timeout", "unknown"]


class BatchState(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"


class ScanEntry(BaseModel):
    """A single PDF discovered during a directory scan."""

    file_path: str
    filename: str
    size_bytes: int


class BatchItemResult(BaseModel):
    """Result for one document of a batch, successful or not."""

    filename: str
    comparison_results: list[ComparisonVerdict] = Field(default_factory=list)
    selected_inputs: list[SelectedInput] = Field(default_factory=list)
    parsed_filename: DocumentKey | None = None
    summary: ComparisonSummary = Field(default_factory=ComparisonSummary)
    error: str | None = None
    error_type: ErrorType | None = None
    resolution: ResolutionFailure | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class BatchSummary(BaseModel):
    """Aggregate counters over a whole batch run."""

    total_documents: int = 0
    successful_documents: int = 0
    failed_documents: int = 0
    failures_by_type: dict[str, int] = Field(default_factory=dict)
    total_fields: int = 0
    correct: int = 0
    incorrect: int = 0
    not_found: int = 0


class BatchReport(BaseModel):
    """Ordered per-document results plus the compiled aggregate."""

    batch_id: str
    model_id: str
    items: list[BatchItemResult] = Field(default_factory=list)
    summary: BatchSummary = Field(default_factory=BatchSummary)
    cancelled: bool = False
    duration_seconds: float = 0.0

    def failures(self) -> list[BatchItemResult]:
        return [item for item in self.items if not item.succeeded]

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


def compile_summary(items: list[BatchItemResult]) -> BatchSummary:
    """Aggregate per-document results; field totals cover successful documents only."""
    summary = BatchSummary(total_documents=len(items))
    for item in items:
        if not item.succeeded:
            summary.failed_documents += 1
            key = item.error_type or "unknown"
            summary.failures_by_type[key] = summary.failures_by_type.get(key, 0) + 1
            continue
        summary.successful_documents += 1
        summary.total_fields += item.summary.total
        summary.correct += item.summary.correct
        summary.incorrect += item.summary.incorrect
        summary.not_found += item.summary.not_found
    return summary
