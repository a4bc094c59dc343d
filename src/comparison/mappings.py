# src/comparison/mappings.py - v2
"""Field mapping registry: reference column -> extracted field id(s).

One static mapping per extraction model. A column mapped to a list of ids
is checked once per id (e.g. the SKU printed on six panel faces); list
order is the output order, not a matching priority.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

MappedFields = Union[str, tuple[str, ...]]


class SpecialRule(BaseModel):
    """Per extracted-field canonicalization flags."""

    model_config = ConfigDict(frozen=True)

    remove_spaces: bool = False
    to_lower_case: bool = False


class FieldMapping(BaseModel):
    """Static mapping table for one extraction model.

    Both tables are exposed as read-only views; a mapping never changes
    after construction.
    """

    model_config = ConfigDict(frozen=True)

    model_id: str
    mappings: Mapping[str, MappedFields]
    special_rules: Mapping[str, SpecialRule] = Field(default_factory=dict, validate_default=True)

    @field_validator("mappings")
    @classmethod
    def validate_mappings(cls, v: Mapping[str, MappedFields]) -> Mapping[str, MappedFields]:
        for column, target in v.items():
            if isinstance(target, tuple) and not target:
                raise ValueError(f"Mapping for {column!r} must list at least one field id")
            if isinstance(target, str) and not target:
                raise ValueError(f"Mapping for {column!r} has an empty field id")
        return MappingProxyType(dict(v))

    @field_validator("special_rules")
    @classmethod
    def freeze_special_rules(cls, v: Mapping[str, SpecialRule]) -> Mapping[str, SpecialRule]:
        return MappingProxyType(dict(v))

    def fields_for(self, column: str) -> tuple[str, ...]:
        """All extracted-field ids a column expands to (empty if unmapped)."""
        target = self.mappings.get(column)
        if target is None:
            return ()
        return (target,) if isinstance(target, str) else target

    def rule_for(self, field_id: str) -> SpecialRule | None:
        return self.special_rules.get(field_id)


_BARCODE_RULES = {
    "Barcode": SpecialRule(remove_spaces=True),
    "UPCA": SpecialRule(remove_spaces=True),
    "DataMatrix": SpecialRule(remove_spaces=True),
}

LP5_MAPPING = FieldMapping(
    model_id="LP5",
    mappings={
        "Communication no.": (
            "SKU_Front", "SKU_Left", "SKU_Right", "SKU_Top", "SKU_Bottom", "SKU_Back",
        ),
        "Product Age Classification": "AgeMark",
        "Name of Dependency": "Version",
        "Piece count of FG": "PieceCount",
        "Component": ("Material Number_Info Box", "MaterialBottom", "MaterialSide"),
        "Finished Goods Material Number": "ItemNumber",
        "EAN/UPC": ("Barcode", "UPCA", "DataMatrix"),
    },
    special_rules=_BARCODE_RULES,
)

MODEL_PKG_V2_COMBINED_MAPPING = FieldMapping(
    model_id="Model_PKG_v2_Combined",
    mappings={
        "Communication no.": (
            "SKU_Number_Front",
            "SKU_Number_Left",
            "SKU_Number_Right",
            "SKU_Number_Top",
            "SKU_Number_Bottom",
            "SKU_Number_Back",
        ),
        "Product Age Classification": "Age_Mark",
        "Name of Dependency": "Version",
        "Piece count of FG": "Piece_Count",
        "Component": ("Material_Number_MA", "Material_Number_Bottom", "Material_Number_SA_Flap"),
        "Finished Goods Material Number": "Item_Number",
        "EAN/UPC": ("Barcode", "UPCA", "DataMatrix"),
        "Super Design": "Super_Design",
    },
    special_rules=_BARCODE_RULES,
)

DEFAULT_MODEL_ID = MODEL_PKG_V2_COMBINED_MAPPING.model_id

_MAPPING_REGISTRY: dict[str, FieldMapping] = {
    LP5_MAPPING.model_id: LP5_MAPPING,
    MODEL_PKG_V2_COMBINED_MAPPING.model_id: MODEL_PKG_V2_COMBINED_MAPPING,
}


def get_field_mapping(model_id: str) -> FieldMapping:
    """Return the mapping for a model, falling back to the default mapping.

    Model identifiers drift as models are retrained, so an unknown id is
    not an error.
    """
    mapping = _MAPPING_REGISTRY.get(model_id)
    if mapping is None:
        logger.info("No field mapping for model %r, using %s", model_id, DEFAULT_MODEL_ID)
        return _MAPPING_REGISTRY[DEFAULT_MODEL_ID]
    return mapping


def register_field_mapping(mapping: FieldMapping) -> None:
    """Register (or replace) the mapping for mapping.model_id."""
    _MAPPING_REGISTRY[mapping.model_id] = mapping
    logger.info("Registered field mapping: %s (%d columns)", mapping.model_id, len(mapping.mappings))


def available_model_ids() -> list[str]:
    return sorted(_MAPPING_REGISTRY)

