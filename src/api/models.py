# src/api/models.py - v3
"""API-level models: DocumentInput, AutoPopulation, ComparisonResult."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from packqc.core.models import (
    ComparisonSummary,
    ComparisonVerdict,
    DocumentKey,
    ResolutionFailure,
    SelectedInput,
)


class DocumentInput(BaseModel):
    """A packaging PDF to check: raw bytes or a path, plus its filename."""

    content: Path | bytes
    filename: str

    def read_bytes(self) -> bytes:
        if isinstance(self.content, bytes):
            return self.content
        return self.content.expanduser().read_bytes()

    @classmethod
    def from_path(cls, path: Path) -> DocumentInput:
        return cls(content=path, filename=path.name)


class AutoPopulation(BaseModel):
    """Expected values derived from a filename and the reference sheet."""

    parsed_filename: DocumentKey | None = None
    selected_inputs: list[SelectedInput] = Field(default_factory=list)
    failure: ResolutionFailure | None = None

    @property
    def resolved(self) -> bool:
        return self.parsed_filename is not None and self.failure is None


class ComparisonResult(BaseModel):
    """Return value of facade.compare_document()."""

    filename: str
    model_id: str
    results: list[ComparisonVerdict] = Field(default_factory=list)
    summary: ComparisonSummary = Field(default_factory=ComparisonSummary)
    extracted_fields: dict[str, str] = Field(default_factory=dict)
