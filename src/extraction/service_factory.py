# src/extraction/service_factory.py - v1
"""Factory: instantiate an extraction service from a provider name."""

from __future__ import annotations

import importlib
import logging

from packqc.config.settings import Settings
from packqc.extraction.base_service import BaseExtractionService

logger = logging.getLogger(__name__)

# Registry of provider name -> service class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "azure": "packqc.extraction.azure_service.AzureDocumentIntelligenceService",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def create_extraction_service(
    provider: str | None = None,
    settings: Settings | None = None,
    **kwargs: object,
) -> BaseExtractionService:
    """Instantiate the extraction service for a provider.

    Args:
        provider: Provider identifier; defaults to settings.extraction_provider.
        settings: Application settings (credentials, poll budget).
        **kwargs: Extra constructor arguments (override settings).

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    settings = settings or Settings()
    provider = provider or settings.extraction_provider
    if provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported extraction provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    service_cls = _import_class(_PROVIDER_REGISTRY[provider])

    init_kwargs = dict(kwargs)
    if provider == "azure":
        init_kwargs.setdefault("endpoint", settings.azure_endpoint)
        init_kwargs.setdefault("api_key", settings.azure_api_key)
        init_kwargs.setdefault("api_version", settings.azure_api_version)
        init_kwargs.setdefault("admin_api_version", settings.azure_admin_api_version)
        init_kwargs.setdefault("features", settings.azure_features_list)
        init_kwargs.setdefault("poll_interval_s", settings.extraction_poll_interval_s)
        init_kwargs.setdefault("max_poll_attempts", settings.extraction_max_poll_attempts)
        init_kwargs.setdefault("request_timeout_s", settings.extraction_request_timeout_s)

    logger.debug("Creating extraction service: provider=%s", provider)
    return service_cls(**init_kwargs)


def register_provider(name: str, class_path: str) -> None:
    """Register a custom extraction service implementing BaseExtractionService."""
    _PROVIDER_REGISTRY[name] = class_path
    logger.info("Registered extraction provider: %s -> %s", name, class_path)


def _import_class(class_path: str) -> type:
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
