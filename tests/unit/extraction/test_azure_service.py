# tests/unit/extraction/test_azure_service.py - v1
"""Tests for extraction/azure_service.py - submit/poll against a mock transport."""

from __future__ import annotations

import httpx
import pytest

from packqc.extraction.azure_service import AzureDocumentIntelligenceService
from packqc.extraction.errors import (
    ExtractionNetworkError,
    ExtractionServiceError,
    ExtractionTimeoutError,
    RateLimitedError,
)

ENDPOINT = "https://qc.cognitiveservices.azure.com"
OPERATION_URL = f"{ENDPOINT}/formrecognizer/documentModels/M1/analyzeResults/abc"

SUCCEEDED = {
    "status": "succeeded",
    "analyzeResult": {
        "documents": [{"fields": {"Version": {"valueString": "V2"}}}],
        "pages": [{"barcodes": [{"kind": "UPCA", "value": "673419 340045"}]}],
    },
}


class Recorder:
    def __init__(self) -> None:
        self.sleeps: list[float] = []
        self.requests: list[httpx.Request] = []

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)


def _service(handler, recorder: Recorder, **kwargs) -> AzureDocumentIntelligenceService:
    def wrapped(request: httpx.Request) -> httpx.Response:
        recorder.requests.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(wrapped))
    return AzureDocumentIntelligenceService(
        endpoint=ENDPOINT + "/", api_key="secret", client=client, sleep=recorder.sleep, **kwargs,
    )


def _accepted() -> httpx.Response:
    return httpx.Response(202, headers={"Operation-Location": OPERATION_URL})


class TestExtract:
    @pytest.mark.asyncio
    async def test_submit_then_poll(self):
        polls = iter([{"status": "running"}, SUCCEEDED])

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return _accepted()
            return httpx.Response(200, json=next(polls))

        recorder = Recorder()
        service = _service(handler, recorder)
        fields = await service.extract(b"%PDF", "M1")

        assert fields == {"Version": "V2", "UPCA": "673419340045"}
        assert recorder.sleeps == [2.0, 2.0]

        submit = recorder.requests[0]
        assert submit.url.path == "/formrecognizer/documentModels/M1:analyze"
        assert submit.url.params.get_list("features") == ["barcodes", "ocrHighResolution"]
        assert submit.url.params["api-version"] == "2023-07-31"
        assert submit.headers["Ocp-Apim-Subscription-Key"] == "secret"
        assert submit.headers["Content-Type"] == "application/pdf"
        assert submit.content == b"%PDF"
        assert str(recorder.requests[1].url) == OPERATION_URL

    @pytest.mark.asyncio
    async def test_submit_rate_limited(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, headers={"Retry-After": "20"})

        service = _service(handler, Recorder())
        with pytest.raises(RateLimitedError) as exc_info:
            await service.extract(b"%PDF", "M1")
        assert exc_info.value.retry_after_s == 20.0

    @pytest.mark.asyncio
    async def test_submit_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, text="bad model")

        service = _service(handler, Recorder())
        with pytest.raises(ExtractionServiceError) as exc_info:
            await service.extract(b"%PDF", "M1")
        assert exc_info.value.status_code == 400
        assert exc_info.value.details == "bad model"

    @pytest.mark.asyncio
    async def test_missing_operation_location(self):
        service = _service(lambda r: httpx.Response(202), Recorder())
        with pytest.raises(ExtractionServiceError, match="operation location"):
            await service.extract(b"%PDF", "M1")

    @pytest.mark.asyncio
    async def test_job_failed(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return _accepted()
            return httpx.Response(200, json={"status": "failed", "error": {"code": "InvalidContent"}})

        service = _service(handler, Recorder())
        with pytest.raises(ExtractionServiceError, match="analysis failed") as exc_info:
            await service.extract(b"%PDF", "M1")
        assert exc_info.value.details == {"code": "InvalidContent"}

    @pytest.mark.asyncio
    async def test_poll_budget_exhausted(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return _accepted()
            return httpx.Response(200, json={"status": "running"})

        recorder = Recorder()
        service = _service(handler, recorder, max_poll_attempts=3, poll_interval_s=0.5)
        with pytest.raises(ExtractionTimeoutError):
            await service.extract(b"%PDF", "M1")
        assert recorder.sleeps == [0.5, 0.5, 0.5]
        assert len(recorder.requests) == 4

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        service = _service(handler, Recorder())
        with pytest.raises(ExtractionNetworkError):
            await service.extract(b"%PDF", "M1")


class TestListModels:
    @pytest.mark.asyncio
    async def test_lists_models(self):
        payload = {"value": [
            {"modelId": "prebuilt-read", "description": "Read"},
            {"modelId": "Model_PKG_v2_Combined", "tags": {"projectId": "p1"},
             "createdDateTime": "2025-10-01T00:00:00Z"},
        ]}
        recorder = Recorder()
        service = _service(lambda r: httpx.Response(200, json=payload), recorder)
        models = await service.list_models()

        assert [m.model_id for m in models] == ["prebuilt-read", "Model_PKG_v2_Combined"]
        assert models[0].is_prebuilt
        assert not models[1].is_prebuilt
        assert models[1].tags == {"projectId": "p1"}
        assert recorder.requests[0].url.path == "/documentintelligence/documentModels"

    @pytest.mark.asyncio
    async def test_list_error(self):
        service = _service(lambda r: httpx.Response(401, text="denied"), Recorder())
        with pytest.raises(ExtractionServiceError):
            await service.list_models()


class TestConstruction:
    def test_requires_credentials(self):
        with pytest.raises(ValueError, match="required"):
            AzureDocumentIntelligenceService(endpoint="", api_key="")

    def test_provider_name(self):
        service = _service(lambda r: httpx.Response(200), Recorder())
        assert service.provider_name == "azure"
