# src/batch/orchestrator.py - v2
"""Batch orchestrator: reconcile many PDFs against one reference sheet.

Documents are processed strictly one at a time, in input order:
    1. Parse the filename into a primary key
    2. Resolve the key against the reference rows
    3. Build expected values for every mapped column
    4. Call the extraction service (the only paid, rate-limited step)
    5. Compare and record verdicts

A document that fails at any step is recorded with an error type and the
batch moves on. Steps 1-2 failing means step 4 is never attempted. A fixed
pacing delay separates consecutive documents; a rate-limited document adds
a cooldown before the next one.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Sequence

from packqc.api.facade import compare_extracted, resolve_key
from packqc.api.models import DocumentInput
from packqc.batch.models import BatchItemResult, BatchReport, BatchState, compile_summary
from packqc.config.settings import Settings
from packqc.core.filename_parser import parse_pdf_filename
from packqc.core.models import ReferenceRow
from packqc.extraction.base_service import BaseExtractionService
from packqc.extraction.errors import RateLimitedError, classify_error
from packqc.logging.context import clear_context, set_batch_context, set_document_context, set_step

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]

FILENAME_FORMAT_HINT = "expected SKU_VERSION_TYPE_*.pdf with TYPE MA or SA"


class BatchAlreadyRunningError(RuntimeError):
    """Raised when run() is called while a batch is in progress."""


class BatchOrchestrator:
    """Drive filename parsing, key resolution, extraction and comparison per PDF.

    Args:
        service: Extraction service used once per resolvable document.
        settings: Pacing, cooldown and matching policies.
        sleep: Awaitable sleep (injectable for tests).
        clock: Monotonic clock used for the report duration.
        on_progress: Called with (index, total, filename) before each document.
    """

    def __init__(
        self,
        service: BaseExtractionService,
        settings: Settings | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self._service = service
        self._settings = settings or Settings()
        self._sleep = sleep
        self._clock = clock
        self._on_progress = on_progress
        self._state = BatchState.IDLE
        self._current_index: int | None = None
        self._cancel_requested = False

    @property
    def state(self) -> BatchState:
        return self._state

    @property
    def current_index(self) -> int | None:
        """Index of the document being processed, None when idle."""
        return self._current_index

    def cancel(self) -> None:
        """Stop after the current document; no new documents are started."""
        if self._state is BatchState.PROCESSING:
            logger.info("Batch cancellation requested")
            self._cancel_requested = True

    async def run(
        self,
        documents: Sequence[DocumentInput],
        rows: Sequence[ReferenceRow],
        model_id: str | None = None,
    ) -> BatchReport:
        """Process all documents and compile the batch report.

        Args:
            documents: PDFs in the order results must be reported.
            rows: Normalized reference rows (read-only).
            model_id: Extraction model; defaults to settings.default_model_id.

        Returns:
            BatchReport with one item per processed document, in input order.

        Raises:
            BatchAlreadyRunningError: If this orchestrator is already running.
        """
        if self._state is BatchState.PROCESSING:
            raise BatchAlreadyRunningError("A batch is already being processed")

        model_id = model_id or self._settings.default_model_id
        batch_id = _generate_batch_id()
        report = BatchReport(batch_id=batch_id, model_id=model_id)
        total = len(documents)

        self._state = BatchState.PROCESSING
        self._cancel_requested = False
        set_batch_context(batch_id)
        logger.info("Starting batch %s: %d documents, model %s", batch_id, total, model_id)

        t0 = self._clock()
        cooldown_s = 0.0
        try:
            for index, document in enumerate(documents):
                if index > 0 and not self._cancel_requested:
                    await self._pace(cooldown_s)
                if self._cancel_requested:
                    report.cancelled = True
                    logger.warning("Batch cancelled before %s (%d/%d)", document.filename, index + 1, total)
                    break

                self._current_index = index
                if self._on_progress is not None:
                    self._on_progress(index, total, document.filename)

                item, cooldown_s = await self._process(document, rows, model_id)
                report.items.append(item)
        finally:
            self._state = BatchState.IDLE
            self._current_index = None
            self._cancel_requested = False
            clear_context()

        report.summary = compile_summary(report.items)
        report.duration_seconds = round(self._clock() - t0, 2)

        logger.info(
            "Batch %s complete: %d/%d documents succeeded, %d correct, %d incorrect, %d not found",
            batch_id, report.summary.successful_documents, total,
            report.summary.correct, report.summary.incorrect, report.summary.not_found,
        )
        return report

    async def _pace(self, cooldown_s: float) -> None:
        delay = self._settings.batch_inter_document_delay_s + cooldown_s
        if delay <= 0:
            return
        if cooldown_s:
            logger.info("Rate limited: waiting %.0fs before next document", delay)
        else:
            logger.debug("Waiting %.0fs before next document", delay)
        await self._sleep(delay)

    async def _process(
        self,
        document: DocumentInput,
        rows: Sequence[ReferenceRow],
        model_id: str,
    ) -> tuple[BatchItemResult, float]:
        """Process one document. Returns the result and the cooldown to apply next."""
        set_document_context(document.filename)
        set_step("parse")

        key = parse_pdf_filename(document.filename)
        if key is None:
            logger.warning("Cannot parse filename %s", document.filename)
            return BatchItemResult(
                filename=document.filename,
                error=f"Could not parse filename ({FILENAME_FORMAT_HINT})",
                error_type="primary_key_failed",
            ), 0.0

        set_step("resolve")
        populated = resolve_key(key, rows, model_id, self._settings)
        if populated.failure is not None:
            logger.warning("Primary key not resolved for %s: %s", document.filename, populated.failure.message)
            return BatchItemResult(
                filename=document.filename,
                parsed_filename=populated.parsed_filename,
                error=populated.failure.message,
                error_type="primary_key_failed",
                resolution=populated.failure,
            ), 0.0

        set_step("extract")
        try:
            extracted = await self._service.extract(document.read_bytes(), model_id)
            set_step("compare")
            result = compare_extracted(
                document.filename, populated.selected_inputs, model_id, extracted, self._settings,
            )
        except Exception as e:
            error_type = classify_error(e)
            cooldown_s = 0.0
            if error_type == "rate_limit":
                cooldown_s = self._settings.batch_rate_limit_cooldown_s
                if isinstance(e, RateLimitedError) and e.retry_after_s:
                    cooldown_s = max(cooldown_s, e.retry_after_s)
                logger.warning("Rate limited on %s: %s", document.filename, e)
            elif error_type == "unknown":
                logger.exception("Unexpected error processing %s", document.filename)
            else:
                logger.error("Extraction failed for %s (%s): %s", document.filename, error_type, e)
            return BatchItemResult(
                filename=document.filename,
                parsed_filename=populated.parsed_filename,
                selected_inputs=populated.selected_inputs,
                error=str(e) or type(e).__name__,
                error_type=error_type,
            ), cooldown_s

        return BatchItemResult(
            filename=document.filename,
            parsed_filename=populated.parsed_filename,
            selected_inputs=populated.selected_inputs,
            comparison_results=result.results,
            summary=result.summary,
        ), 0.0


def _generate_batch_id() -> str:
    """Generate a batch ID: yyyymmdd_hhmmss_{uuid4_short}."""
    ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    return f"{ts}_{uuid.uuid4().hex[:8]}"
