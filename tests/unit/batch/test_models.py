# tests/unit/batch/test_models.py - v1
"""Tests for batch/models.py - result models and summary compilation."""

from __future__ import annotations

from packqc.batch.models import BatchItemResult, BatchReport, compile_summary
from packqc.core.models import ComparisonSummary


def _ok(correct: int, incorrect: int = 0, not_found: int = 0) -> BatchItemResult:
    return BatchItemResult(
        filename="ok.pdf",
        summary=ComparisonSummary(
            total=correct + incorrect + not_found,
            correct=correct, incorrect=incorrect, not_found=not_found,
        ),
    )


def _failed(error_type: str | None) -> BatchItemResult:
    return BatchItemResult(filename="bad.pdf", error="failed", error_type=error_type)


class TestCompileSummary:
    def test_counts(self):
        summary = compile_summary([
            _ok(5, 1),
            _failed("network"),
            _ok(3, 0, 2),
            _failed("network"),
            _failed("primary_key_failed"),
        ])
        assert summary.total_documents == 5
        assert summary.successful_documents == 2
        assert summary.failed_documents == 3
        assert summary.failures_by_type == {"network": 2, "primary_key_failed": 1}
        assert summary.total_fields == 11
        assert (summary.correct, summary.incorrect, summary.not_found) == (8, 1, 2)

    def test_missing_error_type_counts_as_unknown(self):
        summary = compile_summary([_failed(None)])
        assert summary.failures_by_type == {"unknown": 1}

    def test_empty(self):
        summary = compile_summary([])
        assert summary.total_documents == 0
        assert summary.failures_by_type == {}


class TestBatchReport:
    def test_failures(self):
        report = BatchReport(batch_id="b", model_id="LP5", items=[_ok(1), _failed("timeout")])
        assert [item.error_type for item in report.failures()] == ["timeout"]

    def test_succeeded(self):
        assert _ok(1).succeeded
        assert not _failed("unknown").succeeded
