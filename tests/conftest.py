# tests/conftest.py - v2
"""Shared test fixtures for all unit tests.

Provides a SAP-style reference grid, matching extracted fields, a fake
extraction service and a fake clock. No network or real sleeping.
"""

from __future__ import annotations

from typing import Any

import pytest

from packqc.config.settings import Settings
from packqc.core.models import ExtractedFields
from packqc.extraction.base_service import BaseExtractionService, ModelInfo
from packqc.reference.normalizer import NormalizedSheet, normalize_grid

HEADERS = [
    "Communication no.",
    "Name of Dependency",
    "Product Age Classification",
    "Piece count of FG",
    "Component",
    "Finished Goods Material Number",
    "EAN/UPC",
    "Super Design",
    None, None, None, None, None, None, None,  # I..O
    None,  # P -> Description
    "Plant",
]


def _row(**cells: Any) -> list[Any]:
    row: list[Any] = [None] * len(HEADERS)
    positions = {
        "sku": 0, "version": 1, "age": 2, "pieces": 3, "component": 4,
        "material": 5, "ean": 6, "design": 7, "description": 15, "plant": 16,
    }
    for name, value in cells.items():
        row[positions[name]] = value
    return row


def build_grid() -> list[list[Any]]:
    """Three banner rows, header on row 4, merged cells left blank."""
    banner = [None] * len(HEADERS)
    return [
        ["SAP export", *banner[1:]],
        list(banner),
        ["Packaging BOM", *banner[1:]],
        list(HEADERS),
        _row(sku=60123, version="V2", age="6+", pieces=250, component=6501234,
             material=6401234, ean="673419 340045", design="Castle",
             description="MA", plant="PL01"),
        _row(component=6501235, description="SA"),
        _row(sku=60124, version="v1", age="9+", pieces=500.0, component=6509999,
             material=6409999, ean="673419340052", design="Harbor",
             description="MA-BOX", plant="PL02"),
    ]


# === FIXTURES: Sample data ===


@pytest.fixture
def raw_grid() -> list[list[Any]]:
    return build_grid()


@pytest.fixture
def sheet(raw_grid: list[list[Any]]) -> NormalizedSheet:
    return normalize_grid(raw_grid)


@pytest.fixture
def extracted_fields() -> ExtractedFields:
    """Model_PKG_v2_Combined fields matching the 60123/V2/MA row."""
    return {
        "SKU_Number_Front": "60123",
        "SKU_Number_Back": "60123",
        "Age_Mark": "6+",
        "Version": "V2",
        "Piece_Count": "250 pcs/pzs",
        "Material_Number_MA": "6501234",
        "Item_Number": "6401234",
        "UPCA": "673419340045",
        "Super_Design": "Castle",
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


# === FIXTURES: Fakes ===


class FakeClock:
    """Monotonic clock advanced only by the fake sleep."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeExtractionService(BaseExtractionService):
    """Returns canned fields (or raises) per document content."""

    def __init__(
        self,
        responses: dict[bytes, ExtractedFields | Exception],
        clock: FakeClock | None = None,
    ) -> None:
        self._responses = responses
        self._clock = clock
        self.calls: list[tuple[bytes, str, float]] = []

    async def extract(self, content: bytes, model_id: str) -> ExtractedFields:
        self.calls.append((content, model_id, self._clock() if self._clock else 0.0))
        response = self._responses[content]
        if isinstance(response, Exception):
            raise response
        return dict(response)

    async def list_models(self) -> list[ModelInfo]:
        return [ModelInfo(model_id="Model_PKG_v2_Combined")]

    @property
    def provider_name(self) -> str:
        return "fake"


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_service(fake_clock: FakeClock):
    """Factory: FakeExtractionService bound to the shared fake clock."""

    def _make(responses: dict[bytes, ExtractedFields | Exception]) -> FakeExtractionService:
        return FakeExtractionService(responses, clock=fake_clock)

    return _make
