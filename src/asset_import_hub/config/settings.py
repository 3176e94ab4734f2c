"""
Configuration management for Asset Import Hub.

This module provides environment-based configuration using Pydantic BaseSettings,
so that matching thresholds, alias table locations and logging behaviour can be
tuned per deployment without code changes.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

import structlog
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)

# Determine project root for resolving .env by default
PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"
ENV_FILE_OVERRIDE = os.getenv("AIH_ENV_FILE")
if ENV_FILE_OVERRIDE:
    env_file_candidate = Path(ENV_FILE_OVERRIDE).expanduser()
    if not env_file_candidate.is_absolute():
        env_file_candidate = PROJECT_ROOT / env_file_candidate
    SETTINGS_ENV_FILE = env_file_candidate
else:
    SETTINGS_ENV_FILE = DEFAULT_ENV_FILE

# Shipped alias table, used when no alias_table_path is configured
DEFAULT_ALIAS_TABLE = Path(__file__).resolve().parent / "mappings" / "column_aliases.yml"


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Environment variables are automatically loaded with the AIH_ prefix.
    For example, AIH_FUZZY_THRESHOLD=70 raises the fuzzy acceptance threshold.

    LOG_LEVEL is read without the prefix.

    Confidence values are integers on a 0-100 scale.
    """

    LOG_LEVEL: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level (uppercase)",
    )

    log_to_file: bool = Field(
        default=False, description="Also write log events to a daily rotating file"
    )
    log_file_dir: str = Field(default="logs", description="Directory for log files")

    # Configuration artifacts
    alias_table_path: Optional[str] = Field(
        default=None,
        description="Path to the column alias YAML table (None = shipped table)",
    )
    history_store_path: Optional[str] = Field(
        default=None,
        description="Path to the YAML file backing confirmed historical mappings",
    )

    # Matching confidence bands
    historical_confidence: int = Field(
        default=95, description="Confidence for a confirmed historical mapping"
    )
    alias_confidence: int = Field(
        default=98, description="Default confidence for an alias table entry"
    )
    exact_confidence: int = Field(
        default=95, description="Confidence for full label/path equality"
    )
    loose_exact_confidence: int = Field(
        default=90,
        description="Confidence for equality ignoring plurals and separators",
    )
    fuzzy_threshold: int = Field(
        default=60, description="Minimum edit-distance similarity for a fuzzy match"
    )
    fuzzy_confidence_cap: int = Field(
        default=89, description="Upper bound for fuzzy match confidence"
    )
    pattern_confidence: int = Field(
        default=70, description="Confidence for a sample-value pattern match"
    )
    pattern_min_ratio: float = Field(
        default=0.8,
        description="Share of sampled values that must parse as one kind",
    )
    pattern_sample_limit: int = Field(
        default=10, description="Non-empty sample values inspected per column"
    )

    # Import / export
    array_delimiter: str = Field(
        default=",", description="Delimiter used when exporting array values"
    )
    header_scan_rows: int = Field(
        default=10, description="Rows scanned for the header row when reading sheets"
    )

    @model_validator(mode="after")
    def validate_confidence_bands(self) -> "Settings":
        """Keep mapped confidences on 1-100 and fuzzy below the exact bands.

        A mapped column never carries confidence 0, so every band a match can
        be scored with starts at 1. The default alias confidence may be 0,
        which disables entries that do not set their own.
        """
        if not 0 <= self.alias_confidence <= 100:
            raise ValueError(
                f"alias_confidence must be within 0-100, got {self.alias_confidence}"
            )
        bands = {
            "historical_confidence": self.historical_confidence,
            "exact_confidence": self.exact_confidence,
            "loose_exact_confidence": self.loose_exact_confidence,
            "fuzzy_threshold": self.fuzzy_threshold,
            "fuzzy_confidence_cap": self.fuzzy_confidence_cap,
            "pattern_confidence": self.pattern_confidence,
        }
        for name, value in bands.items():
            if not 1 <= value <= 100:
                raise ValueError(f"{name} must be within 1-100, got {value}")

        if self.fuzzy_confidence_cap >= self.loose_exact_confidence:
            raise ValueError(
                "fuzzy_confidence_cap must stay below loose_exact_confidence "
                f"({self.fuzzy_confidence_cap} >= {self.loose_exact_confidence})"
            )
        if not 0 < self.pattern_min_ratio <= 1:
            raise ValueError(
                f"pattern_min_ratio must be within (0, 1], got {self.pattern_min_ratio}"
            )
        if self.pattern_sample_limit < 1:
            raise ValueError("pattern_sample_limit must be at least 1")
        return self

    def get_alias_table_path(self) -> Path:
        """Resolve the alias table location, falling back to the shipped table."""
        if self.alias_table_path:
            return Path(self.alias_table_path).expanduser()
        return DEFAULT_ALIAS_TABLE

    model_config = SettingsConfigDict(
        env_prefix="AIH_",
        env_file=str(SETTINGS_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are loaded once and reused across
    the application lifecycle. Tests that change the environment should call
    ``get_settings.cache_clear()``.

    Returns:
        Settings instance with loaded configuration
    """
    return Settings()
