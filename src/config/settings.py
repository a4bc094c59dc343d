# src/config/settings.py - v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Extraction provider ===
    extraction_provider: str = "azure"
    azure_endpoint: str = ""
    azure_api_key: str = ""
    azure_api_version: str = "2023-07-31"
    azure_admin_api_version: str = "2024-02-29-preview"
    azure_features: str = "barcodes,ocrHighResolution"

    # Job polling
    extraction_poll_interval_s: float = 2.0
    extraction_max_poll_attempts: int = 30
    extraction_request_timeout_s: float = 60.0

    # === Field mapping ===
    default_model_id: str = "Model_PKG_v2_Combined"

    # === Reference spreadsheet ===
    sheet_header_row_index: int = 3
    sheet_column_overrides: dict[int, str] = {15: "Description"}

    # === Matching policies ===
    description_match_policy: Literal["exact", "contains"] = "contains"
    missing_list_field_policy: Literal["skip", "strict"] = "skip"

    # === Batch pacing ===
    batch_inter_document_delay_s: float = 15.0
    batch_rate_limit_cooldown_s: float = 30.0

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("batch_inter_document_delay_s", "batch_rate_limit_cooldown_s")
    @classmethod
    def validate_delays(cls, v: float) -> float:
        if v < 0:
            raise ValueError("batch delays must be >= 0")
        return v

    @field_validator("extraction_poll_interval_s")
    @classmethod
    def validate_poll_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("extraction_poll_interval_s must be > 0")
        return v

    @field_validator("extraction_max_poll_attempts")
    @classmethod
    def validate_poll_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("extraction_max_poll_attempts must be >= 1")
        return v

    @field_validator("sheet_header_row_index")
    @classmethod
    def validate_header_row(cls, v: int) -> int:
        if v < 0:
            raise ValueError("sheet_header_row_index must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if bool(self.azure_endpoint) != bool(self.azure_api_key):
            errors.append("AZURE_ENDPOINT and AZURE_API_KEY must be set together")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def azure_features_list(self) -> list[str]:
        """Parse comma-separated analyze features."""
        return [f.strip() for f in self.azure_features.split(",") if f.strip()]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
