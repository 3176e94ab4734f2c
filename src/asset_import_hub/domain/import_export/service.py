"""
Import and export of nested records through confirmed column mappings.

Import turns spreadsheet rows into nested records: every mapped cell is coerced
to its field's data type and written with ``set_value``. Problems are collected
as ``RowIssue`` entries instead of raised, so one bad cell never aborts a batch.
Export goes the other way through ``flatten``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Sequence, Union

import pandas as pd
from pydantic import BaseModel, Field

from asset_import_hub.config import get_settings
from asset_import_hub.domain.column_mapping.models import ColumnMapping
from asset_import_hub.domain.field_discovery.models import DataType, FieldDefinition
from asset_import_hub.domain.import_export.nested_values import (
    flat_column_keys,
    flatten,
    get_value,
    set_value,
)
from asset_import_hub.utils.logging import get_logger
from asset_import_hub.utils.value_parser import (
    is_empty_value,
    parse_boolean_value,
    parse_date_value,
    parse_number_value,
)

logger = get_logger(__name__)

_ARRAY_SPLIT = re.compile(r"[,;\n]")


class RowIssue(BaseModel):
    """Problem found while building the record for one data row."""

    row: int = Field(..., ge=1, description="1-based data row number")
    column: str = Field(..., description="Source column (or field label)")
    message: str
    value: Any = None
    severity: Literal["error", "warning"] = "error"


class ImportBatch(BaseModel):
    """Records built from a sheet plus the issues found on the way."""

    records: List[Dict[str, Any]] = Field(default_factory=list)
    issues: List[RowIssue] = Field(default_factory=list)
    total_rows: int = 0
    rejected_rows: int = 0

    @property
    def errors(self) -> List[RowIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> List[RowIssue]:
        return [i for i in self.issues if i.severity == "warning"]


def _coerce_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _coerce_enum(value: Any, field: FieldDefinition) -> str:
    text = _coerce_text(value)
    if not field.options:
        return text
    for option in field.options:
        if option.lower() == text.lower():
            return option
    raise ValueError(
        f"'{text}' is not an allowed value for {field.label}; "
        f"expected one of: {', '.join(field.options)}"
    )


def coerce_value(value: Any, field: FieldDefinition) -> Any:
    """
    Convert a raw cell value to the representation stored for ``field``.

    Empty cells become ``None``. Array fields split strings on ``,``, ``;`` or
    newlines; dates are stored as ISO ``YYYY-MM-DD`` strings.

    Raises:
        ValueError: If the value cannot be read as the field's data type.
    """
    if is_empty_value(value):
        return None

    if field.is_array:
        if isinstance(value, (list, tuple)):
            return [item for item in value if not is_empty_value(item)]
        return [part.strip() for part in _ARRAY_SPLIT.split(_coerce_text(value)) if part.strip()]

    if field.data_type is DataType.NUMBER:
        return parse_number_value(value)
    if field.data_type is DataType.BOOLEAN:
        return parse_boolean_value(value)
    if field.data_type is DataType.DATE:
        return parse_date_value(value).isoformat()
    if field.data_type is DataType.ENUM:
        return _coerce_enum(value, field)
    return _coerce_text(value)


def _cell(row: Any, position: int, header: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(header)
    return row[position] if position < len(row) else None


def build_records(
    headers: Sequence[str],
    rows: Sequence[Any],
    mappings: Sequence[ColumnMapping],
    fields: Sequence[FieldDefinition],
) -> ImportBatch:
    """
    Apply confirmed mappings to every data row.

    Rows may be cell sequences aligned with ``headers`` or header-keyed
    mappings. Blank rows are skipped. A cell that fails coercion is kept as its
    raw value with a warning; a row missing a required field is rejected with
    an error.
    """
    by_path = {f.path: f for f in fields}
    positions = {header: i for i, header in enumerate(headers)}
    active = [
        (m, by_path[m.target_path])
        for m in mappings
        if m.is_mapped and m.target_path in by_path and m.source_column in positions
    ]
    source_for = {f.path: m.source_column for m, f in active}

    batch = ImportBatch()
    for row_number, row in enumerate(rows, start=1):
        cells = [
            (m, f, _cell(row, positions[m.source_column], m.source_column))
            for m, f in active
        ]
        if all(is_empty_value(value) for _, _, value in cells):
            continue
        batch.total_rows += 1

        record: Dict[str, Any] = {}
        for mapping, field, value in cells:
            if is_empty_value(value):
                continue
            try:
                coerced = coerce_value(value, field)
            except ValueError as e:
                batch.issues.append(
                    RowIssue(
                        row=row_number,
                        column=mapping.source_column,
                        message=str(e),
                        value=value,
                        severity="warning",
                    )
                )
                coerced = value
            set_value(record, field.path, coerced)

        missing = [
            f for f in fields if f.required and is_empty_value(get_value(record, f.path))
        ]
        for field in missing:
            batch.issues.append(
                RowIssue(
                    row=row_number,
                    column=source_for.get(field.path, field.label),
                    message=f"Required field '{field.label}' is missing",
                    severity="error",
                )
            )
        if missing:
            batch.rejected_rows += 1
            continue
        batch.records.append(record)

    logger.info(
        "import.records_built",
        total_rows=batch.total_rows,
        accepted=len(batch.records),
        rejected=batch.rejected_rows,
        warning_count=len(batch.warnings),
    )
    return batch


def _export_delimiter(delimiter: Optional[str]) -> str:
    return get_settings().array_delimiter if delimiter is None else delimiter


def export_rows(
    records: Sequence[Mapping[str, Any]],
    fields: Sequence[FieldDefinition],
    delimiter: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Flatten every record into a label-keyed row.

    Array values are joined with ``delimiter``, or with the configured
    ``array_delimiter`` when it is not given.
    """
    joiner = _export_delimiter(delimiter)
    return [flatten(record, fields, joiner) for record in records]


def export_dataframe(
    records: Sequence[Mapping[str, Any]],
    fields: Sequence[FieldDefinition],
    delimiter: Optional[str] = None,
) -> pd.DataFrame:
    """Flattened records as a DataFrame with columns in field order."""
    return pd.DataFrame(
        export_rows(records, fields, delimiter), columns=flat_column_keys(fields)
    )


def write_export_workbook(
    records: Sequence[Mapping[str, Any]],
    fields: Sequence[FieldDefinition],
    path: Union[str, Path],
    sheet_name: str = "Export",
    delimiter: Optional[str] = None,
) -> Path:
    """
    Write flattened records to an ``.xlsx`` workbook.

    Returns:
        Path of the written workbook
    """
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    df = export_dataframe(records, fields, delimiter)

    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)

    logger.info(
        "export.workbook_written",
        file_path=str(output),
        sheet_name=sheet_name,
        row_count=len(df),
        column_count=len(df.columns),
    )
    return output


__all__ = [
    "ImportBatch",
    "RowIssue",
    "build_records",
    "coerce_value",
    "export_dataframe",
    "export_rows",
    "write_export_workbook",
]
