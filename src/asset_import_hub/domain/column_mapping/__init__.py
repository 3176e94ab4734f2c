"""Column mapping: spreadsheet headers to discovered field paths."""

from asset_import_hub.domain.column_mapping.history import (
    HistoricalMappingStore,
    InMemoryHistoryStore,
    YamlHistoryStore,
)
from asset_import_hub.domain.column_mapping.models import (
    UNMAPPED,
    ColumnMapping,
    ConfidenceBand,
    MappingSummary,
    MappingTechnique,
    classify_confidence,
    summarize_mappings,
)
from asset_import_hub.domain.column_mapping.service import (
    ColumnMapper,
    map_columns,
    resolve_target_collisions,
)

__all__ = [
    "UNMAPPED",
    "ColumnMapper",
    "ColumnMapping",
    "ConfidenceBand",
    "HistoricalMappingStore",
    "InMemoryHistoryStore",
    "MappingSummary",
    "MappingTechnique",
    "YamlHistoryStore",
    "classify_confidence",
    "map_columns",
    "resolve_target_collisions",
    "summarize_mappings",
]
