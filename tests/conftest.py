"""Shared fixtures for the Asset Import Hub test suite."""

from __future__ import annotations

import pytest

from asset_import_hub.config import get_settings
from asset_import_hub.domain.field_discovery import DataType, FieldDefinition

AIH_ENV_VARS = (
    "AIH_ALIAS_TABLE_PATH",
    "AIH_HISTORY_STORE_PATH",
    "AIH_FUZZY_THRESHOLD",
    "AIH_FUZZY_CONFIDENCE_CAP",
    "AIH_PATTERN_MIN_RATIO",
    "AIH_ARRAY_DELIMITER",
    "AIH_LOG_TO_FILE",
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Fresh settings for every test, unaffected by the developer's shell."""
    for name in AIH_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def asset_fields():
    """Typical fields of an asset form."""
    return [
        FieldDefinition(path="asset_tag", label="Asset Tag", required=True),
        FieldDefinition(path="asset_type", label="Asset Type"),
        FieldDefinition(path="site_code", label="Site Code"),
        FieldDefinition(path="asset_group_code", label="Asset Group Code"),
        FieldDefinition(path="install_date", label="Install Date", data_type=DataType.DATE),
        FieldDefinition(
            path="specifications.weight", label="Weight", data_type=DataType.NUMBER
        ),
    ]


@pytest.fixture
def asset_form():
    """Form tree with nested groups, a repeating group and choice widgets."""
    return {
        "fields": [
            {"key": "asset_tag", "type": "text", "label": "Asset Tag", "required": True},
            {
                "key": "status",
                "type": "select",
                "options": [
                    {"label": "In Service", "value": "in_service"},
                    {"label": "Retired", "value": "retired"},
                ],
            },
            {
                "key": "specifications",
                "type": "group",
                "children": [
                    {
                        "key": "dimensions",
                        "type": "group",
                        "children": [
                            {"key": "length", "type": "number"},
                            {"key": "width", "type": "number"},
                        ],
                    },
                    {"key": "weight", "type": "decimal"},
                ],
            },
            {"key": "install_date", "type": "date-picker", "label": "Install Date"},
            {"key": "is_critical", "type": "switch"},
            {
                "key": "inspections",
                "type": "group",
                "repeat": True,
                "children": [{"key": "inspected_on", "type": "date"}],
            },
        ]
    }
