"""Nested record access plus the import/export steps built on it."""

from asset_import_hub.domain.import_export.nested_values import (
    flat_column_keys,
    flatten,
    get_value,
    set_value,
    unflatten,
)
from asset_import_hub.domain.import_export.service import (
    ImportBatch,
    RowIssue,
    build_records,
    coerce_value,
    export_dataframe,
    export_rows,
    write_export_workbook,
)

__all__ = [
    "ImportBatch",
    "RowIssue",
    "build_records",
    "coerce_value",
    "export_dataframe",
    "export_rows",
    "flat_column_keys",
    "flatten",
    "get_value",
    "set_value",
    "unflatten",
    "write_export_workbook",
]
