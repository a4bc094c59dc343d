# src/extraction/errors.py - v1
"""Extraction service error taxonomy and error classification."""

from __future__ import annotations

from typing import Any, Literal

import httpx

ErrorKind = Literal["rate_limit", "timeout", "network", "unknown"]


class ExtractionError(Exception):
    """Base class for document extraction failures."""


class RateLimitedError(ExtractionError):
    """The extraction provider throttled the request (HTTP 429)."""

    def __init__(self, message: str = "Rate limit exceeded (429)", retry_after_s: float | None = None):
        self.retry_after_s = retry_after_s
        super().__init__(message)


class ExtractionTimeoutError(ExtractionError):
    """The extraction job did not finish within the poll budget."""

    def __init__(self, attempts: int, interval_s: float):
        self.attempts = attempts
        self.interval_s = interval_s
        super().__init__(
            f"Analysis timed out after {attempts} polls ({attempts * interval_s:.0f}s)"
        )


class ExtractionServiceError(ExtractionError):
    """The provider rejected the request or the job failed."""

    def __init__(self, message: str, status_code: int | None = None, details: Any = None):
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ExtractionNetworkError(ExtractionServiceError):
    """Transport-level failure talking to the provider."""


def classify_error(error: BaseException) -> ErrorKind:
    """Classify an exception raised during extraction."""
    if isinstance(error, RateLimitedError):
        return "rate_limit"
    if isinstance(error, ExtractionTimeoutError):
        return "timeout"
    if isinstance(error, ExtractionServiceError):
        return "rate_limit" if error.status_code == 429 else "network"
    if isinstance(error, (httpx.TimeoutException, TimeoutError)):
        return "timeout"
    if isinstance(error, (httpx.TransportError, ConnectionError)):
        return "network"

    msg = str(error).lower()
    if "429" in msg or "rate limit" in msg or "too many requests" in msg:
        return "rate_limit"
    if "timeout" in msg or "timed out" in msg:
        return "timeout"
    if any(s in msg for s in ("network", "connection", "fetch")):
        return "network"
    return "unknown"
