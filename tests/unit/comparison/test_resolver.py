# tests/unit/comparison/test_resolver.py - v1
"""Tests for comparison/resolver.py - primary key resolution."""

from __future__ import annotations

from packqc.comparison.resolver import KeyColumns, normalize_description, resolve_row
from packqc.core.models import DescriptionType, DocumentKey, ResolutionFailure


def _key(sku: str = "60123", version: str = "V2", type_: DescriptionType = DescriptionType.MA_BOX) -> DocumentKey:
    return DocumentKey(sku=sku, version=version, type=type_)


class TestNormalizeDescription:
    def test_aliases(self):
        assert normalize_description("MA") == "MA-BOX"
        assert normalize_description(" sa ") == "SEMI"

    def test_passthrough(self):
        assert normalize_description("ma-box") == "MA-BOX"
        assert normalize_description(None) == ""


class TestResolveRow:
    def test_master_box_row(self, sheet):
        row = resolve_row(_key(), sheet.rows)
        assert not isinstance(row, ResolutionFailure)
        assert row["Component"] == 6501234

    def test_semi_row_via_forward_fill(self, sheet):
        row = resolve_row(_key(type_=DescriptionType.SEMI), sheet.rows)
        assert not isinstance(row, ResolutionFailure)
        assert row["Component"] == 6501235

    def test_version_case_insensitive(self, sheet):
        row = resolve_row(_key(sku="60124", version="V1"), sheet.rows)
        assert not isinstance(row, ResolutionFailure)
        assert row["Plant"] == "PL02"

    def test_sku_not_found(self, sheet):
        result = resolve_row(_key(sku="99999"), sheet.rows)
        assert isinstance(result, ResolutionFailure)
        assert result.reason == "sku_not_found"

    def test_version_mismatch(self, sheet):
        result = resolve_row(_key(version="V9"), sheet.rows)
        assert isinstance(result, ResolutionFailure)
        assert result.reason == "version_mismatch"
        assert result.available_versions == ["V2"]

    def test_description_mismatch(self, sheet):
        result = resolve_row(_key(sku="60124", version="v1", type_=DescriptionType.SEMI), sheet.rows)
        assert isinstance(result, ResolutionFailure)
        assert result.reason == "description_mismatch"
        assert result.available_descriptions == ["MA-BOX"]

    def test_no_rows(self):
        result = resolve_row(_key(), [])
        assert isinstance(result, ResolutionFailure)
        assert result.reason == "no_reference_rows"

    def test_sku_trimmed(self):
        rows = [{"Communication no.": " 60123 ", "Name of Dependency": "V2", "Description": "MA"}]
        assert resolve_row(_key(), rows) is rows[0]

    def test_first_match_wins(self):
        rows = [
            {"Communication no.": "60123", "Name of Dependency": "V2", "Description": "MA", "n": 1},
            {"Communication no.": "60123", "Name of Dependency": "V2", "Description": "MA", "n": 2},
        ]
        assert resolve_row(_key(), rows)["n"] == 1

    def test_fallback_version_column(self):
        rows = [{"Communication no.": "60123", "Product Version no.": "V2", "Description": "MA-BOX"}]
        assert resolve_row(_key(), rows) is rows[0]

    def test_version_column_name_case_insensitive(self):
        rows = [{"Communication no.": "60123", "name of dependency": "V2", "Description": "MA"}]
        assert resolve_row(_key(), rows) is rows[0]

    def test_contains_policy(self):
        rows = [{"Communication no.": "60123", "Name of Dependency": "V2", "Description": "MA-BOX 6PK"}]
        assert resolve_row(_key(), rows, description_policy="contains") is rows[0]

    def test_exact_policy(self):
        rows = [{"Communication no.": "60123", "Name of Dependency": "V2", "Description": "MA-BOX 6PK"}]
        result = resolve_row(_key(), rows, description_policy="exact")
        assert isinstance(result, ResolutionFailure)
        assert result.reason == "description_mismatch"

    def test_custom_columns(self):
        rows = [{"SKU": "60123", "Rev": "V2", "Kind": "SA"}]
        columns = KeyColumns(sku="SKU", versions=("Rev",), description="Kind")
        assert resolve_row(_key(type_=DescriptionType.SEMI), rows, columns=columns) is rows[0]
