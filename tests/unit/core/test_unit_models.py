# tests/unit/core/test_unit_models.py - v2
"""Tests for core/models.py - verdicts and summaries."""

from __future__ import annotations

from packqc.core.models import ComparisonVerdict, summarize


def _verdict(status: str) -> ComparisonVerdict:
    return ComparisonVerdict(field="f", pdf_value="a", excel_value="a", status=status)


class TestSummarize:
    def test_empty(self):
        s = summarize([])
        assert (s.total, s.correct, s.incorrect, s.not_found) == (0, 0, 0, 0)

    def test_counts_by_status(self):
        s = summarize([
            _verdict("correct"), _verdict("correct"),
            _verdict("incorrect"), _verdict("not-found"),
        ])
        assert s.total == 4
        assert s.correct == 2
        assert s.incorrect == 1
        assert s.not_found == 1


class TestComparisonVerdict:
    def test_match_details_optional(self):
        v = _verdict("correct")
        assert v.match_details is None
