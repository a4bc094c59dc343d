# src/extraction/azure_service.py - v1
"""Azure Document Intelligence adapter implementing BaseExtractionService.

Talks to the REST API with httpx: submit the PDF to a custom model, then
poll the Operation-Location URL until the job succeeds, fails or the poll
budget runs out.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable

import httpx

from packqc.core.models import ExtractedFields
from packqc.extraction.base_service import BaseExtractionService, ModelInfo
from packqc.extraction.errors import (
    ExtractionNetworkError,
    ExtractionServiceError,
    ExtractionTimeoutError,
    RateLimitedError,
)
from packqc.extraction.result_parser import parse_analyze_result

logger = logging.getLogger(__name__)

_KEY_HEADER = "Ocp-Apim-Subscription-Key"


class AzureDocumentIntelligenceService(BaseExtractionService):
    """Azure Document Intelligence (Form Recognizer) REST adapter."""

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        api_version: str = "2023-07-31",
        admin_api_version: str = "2024-02-29-preview",
        features: list[str] | None = None,
        poll_interval_s: float = 2.0,
        max_poll_attempts: int = 30,
        request_timeout_s: float = 60.0,
        client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if not endpoint or not api_key:
            raise ValueError("Azure endpoint and API key are required")
        self._endpoint = endpoint.rstrip("/")
        self._api_key = api_key
        self._api_version = api_version
        self._admin_api_version = admin_api_version
        self._features = features if features is not None else ["barcodes", "ocrHighResolution"]
        self._poll_interval_s = poll_interval_s
        self._max_poll_attempts = max_poll_attempts
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=request_timeout_s)
        self._sleep = sleep

    @property
    def provider_name(self) -> str:
        return "azure"

    async def extract(self, content: bytes, model_id: str) -> ExtractedFields:
        t0 = time.monotonic()
        operation_url = await self._submit(content, model_id)
        result = await self._poll(operation_url)
        fields = parse_analyze_result(result)
        logger.info(
            "Extracted %d fields with model %s in %.1fs",
            len(fields), model_id, time.monotonic() - t0,
        )
        return fields

    async def list_models(self) -> list[ModelInfo]:
        url = f"{self._endpoint}/documentintelligence/documentModels"
        response = await self._request(
            "GET", url, params={"api-version": self._admin_api_version},
        )
        _raise_for_status(response, "Failed to fetch models")
        models = [
            ModelInfo(
                model_id=m["modelId"],
                description=m.get("description") or "",
                tags=m.get("tags") or {},
                created=m.get("createdDateTime"),
            )
            for m in response.json().get("value", [])
        ]
        logger.info(
            "Fetched %d models (%d custom)",
            len(models), sum(1 for m in models if not m.is_prebuilt),
        )
        return models

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # --- Internals ---

    async def _submit(self, content: bytes, model_id: str) -> str:
        url = f"{self._endpoint}/formrecognizer/documentModels/{model_id}:analyze"
        params: list[tuple[str, str]] = [("api-version", self._api_version)]
        params.extend(("features", f) for f in self._features)

        logger.debug("Submitting %d bytes to model %s", len(content), model_id)
        response = await self._request(
            "POST", url, params=params, content=content,
            headers={"Content-Type": "application/pdf"},
        )
        _raise_for_status(response, "Failed to analyze document")

        operation_url = response.headers.get("Operation-Location")
        if not operation_url:
            raise ExtractionServiceError(
                "No operation location returned", status_code=response.status_code,
            )
        return operation_url

    async def _poll(self, operation_url: str) -> dict[str, Any]:
        for attempt in range(1, self._max_poll_attempts + 1):
            await self._sleep(self._poll_interval_s)
            response = await self._request("GET", operation_url)
            _raise_for_status(response, "Failed to poll analysis")

            body = response.json()
            status = body.get("status")
            if status == "succeeded":
                logger.debug("Analysis succeeded after %d polls", attempt)
                return body.get("analyzeResult") or {}
            if status == "failed":
                raise ExtractionServiceError(
                    "Document analysis failed", status_code=response.status_code,
                    details=body.get("error"),
                )
        raise ExtractionTimeoutError(self._max_poll_attempts, self._poll_interval_s)

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers = {_KEY_HEADER: self._api_key, **kwargs.pop("headers", {})}
        try:
            return await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            raise ExtractionNetworkError(f"Request timed out: {e}") from e
        except httpx.TransportError as e:
            raise ExtractionNetworkError(f"Network error: {e}") from e


def _raise_for_status(response: httpx.Response, message: str) -> None:
    if response.status_code == 429:
        raise RateLimitedError(retry_after_s=_retry_after(response))
    if response.is_error:
        raise ExtractionServiceError(
            f"{message} (HTTP {response.status_code})",
            status_code=response.status_code,
            details=response.text,
        )


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    try:
        return float(value) if value is not None else None
    except ValueError:
        return None
