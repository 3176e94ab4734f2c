"""Domain layer: field discovery, column mapping and import/export."""

from asset_import_hub.domain.exceptions import (
    AliasTableError,
    AssetImportError,
    InvalidInputError,
    MetadataError,
)

__all__ = [
    "AssetImportError",
    "MetadataError",
    "InvalidInputError",
    "AliasTableError",
]
