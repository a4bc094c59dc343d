# tests/unit/extraction/test_service_factory.py - v1
"""Tests for extraction/service_factory.py."""

from __future__ import annotations

import pytest

from packqc.config.settings import Settings
from packqc.extraction.azure_service import AzureDocumentIntelligenceService
from packqc.extraction.service_factory import (
    UnsupportedProviderError,
    create_extraction_service,
    register_provider,
)


class TestCreateExtractionService:
    def test_azure_from_settings(self):
        settings = Settings(
            _env_file=None, azure_endpoint="https://x.example", azure_api_key="k",
            extraction_max_poll_attempts=5,
        )
        service = create_extraction_service(settings=settings)
        assert isinstance(service, AzureDocumentIntelligenceService)
        assert service._max_poll_attempts == 5
        assert service._features == ["barcodes", "ocrHighResolution"]

    def test_kwargs_override_settings(self):
        settings = Settings(_env_file=None, azure_endpoint="https://x.example", azure_api_key="k")
        service = create_extraction_service("azure", settings, poll_interval_s=0.1)
        assert service._poll_interval_s == 0.1

    def test_missing_credentials(self):
        with pytest.raises(ValueError, match="required"):
            create_extraction_service("azure", Settings(_env_file=None))

    def test_unknown_provider(self):
        with pytest.raises(UnsupportedProviderError, match="Unsupported"):
            create_extraction_service("textract", Settings(_env_file=None))

    def test_register_provider(self):
        register_provider("fake-azure", "packqc.extraction.azure_service.AzureDocumentIntelligenceService")
        service = create_extraction_service(
            "fake-azure", Settings(_env_file=None), endpoint="https://y.example", api_key="k",
        )
        assert isinstance(service, AzureDocumentIntelligenceService)
