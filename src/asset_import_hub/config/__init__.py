"""Configuration management for Asset Import Hub.

This module provides centralized configuration loaded from environment variables
with validation using Pydantic BaseSettings, plus the YAML alias table loader.

Usage:
    >>> from asset_import_hub.config import get_settings
    >>> settings = get_settings()
    >>> settings.fuzzy_threshold
    60
"""

from asset_import_hub.config.alias_loader import get_alias_table_path, load_alias_table
from asset_import_hub.config.alias_schema import (
    DEFAULT_ALIAS_CONFIDENCE,
    AliasEntry,
    AliasTable,
)
from asset_import_hub.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "AliasEntry",
    "AliasTable",
    "DEFAULT_ALIAS_CONFIDENCE",
    "get_alias_table_path",
    "load_alias_table",
]
