# src/extraction/base_service.py - v1
"""Abstract document extraction service interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from packqc.core.models import ExtractedFields


class ModelInfo(BaseModel):
    """An extraction model known to the provider."""

    model_id: str
    description: str = ""
    tags: dict[str, str] = Field(default_factory=dict)
    created: str | None = None

    @property
    def is_prebuilt(self) -> bool:
        return self.model_id.startswith("prebuilt-")


class BaseExtractionService(ABC):
    """Submit a document to a field-extraction model and return its fields.

    Implementations run the provider job to completion (submit, then poll)
    and raise RateLimitedError, ExtractionTimeoutError or
    ExtractionServiceError on failure.
    """

    @abstractmethod
    async def extract(self, content: bytes, model_id: str) -> ExtractedFields:
        """Extract named fields (including barcodes) from a PDF."""

    @abstractmethod
    async def list_models(self) -> list[ModelInfo]:
        """Models available for extraction."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (e.g. azure)."""

    async def aclose(self) -> None:
        """Release network resources. Default: nothing to release."""
